"""
Incremental brute force candidate generator and keyspace estimation
"""

import itertools
import logging
from typing import Iterator, Optional

from ..config import CHARSETS
from ..interfaces import (
    CandidateGenerator, Candidate, GeneratorKind, InvalidAttackOptions
)


def resolve_charset(charset: str) -> str:
    """
    Resolve a named charset or take a literal character set.

    Duplicate characters are removed keeping their first position, so the
    enumeration order follows the order characters are given in.
    """
    if not charset:
        raise InvalidAttackOptions("Charset cannot be empty")
    characters = CHARSETS.get(charset, charset)
    return ''.join(dict.fromkeys(characters))


def keyspace_size(charset_size: int, max_length: int, min_length: int = 1) -> int:
    """Number of strings of length min_length..max_length over the charset"""
    return sum(charset_size ** length for length in range(min_length, max_length + 1))


def estimate_seconds(keyspace: int, hashes_per_second: float) -> float:
    """Worst-case time to exhaust a keyspace at a given hash rate"""
    if hashes_per_second <= 0:
        return float('inf')
    try:
        return keyspace / hashes_per_second
    except OverflowError:
        return float('inf')


class IncrementalBruteForceGenerator(CandidateGenerator):
    """
    Enumerates every string over a charset, shortest first.

    Within a length tier candidates are lexicographic in charset order.
    Never yields a string longer than ``max_length`` or the same string
    twice.
    """

    kind = GeneratorKind.BRUTE_FORCE

    def __init__(self, charset: str = "alphanumeric", max_length: int = 4, min_length: int = 1,
                 limit: Optional[int] = None, logger: Optional[logging.Logger] = None):
        super().__init__(limit)
        if max_length < 1:
            raise InvalidAttackOptions(f"Brute force max length must be at least 1, got {max_length}")
        if not 1 <= min_length <= max_length:
            raise InvalidAttackOptions(f"Brute force min length must be between 1 and {max_length}")
        self.charset = resolve_charset(charset)
        self.max_length = max_length
        self.min_length = min_length
        self.current_length = 0
        self.logger = logger or logging.getLogger(__name__)

    @property
    def keyspace(self) -> int:
        return keyspace_size(len(self.charset), self.max_length, self.min_length)

    @property
    def description(self) -> str:
        return f"{len(self.charset)} chars, length {self.min_length}-{self.max_length} ({self.keyspace} candidates)"

    def reset(self):
        super().reset()
        self.current_length = 0

    def tiers(self) -> range:
        return range(self.min_length, self.max_length + 1)

    def passwords_for_length(self, length: int) -> Iterator[str]:
        """Plain strings of one length tier, for callers that hash directly"""
        for chars in itertools.product(self.charset, repeat=length):
            yield ''.join(chars)

    def _generate(self) -> Iterator[Candidate]:
        for length in self.tiers():
            self.current_length = length
            pattern = f"brute_force(len={length})"
            for password in self.passwords_for_length(length):
                yield Candidate(password=password, source=self.kind, pattern=pattern)
