"""
Precomputed digest lookup

The table maps the MD5, SHA1 and SHA256 digests of an expanded common
password dictionary back to their plaintexts. It is built once per engine
and answers any target with one dictionary access, so the lookup phase runs before
every generator that has to hash its guesses.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from ..interfaces import Candidate, CandidateGenerator, GeneratorKind, HashAlgorithm
from .hash_cracking import HashTarget, digest


LOOKUP_SUFFIXES = ('1', '!', '123', '@', '#', '$', '!!', '12', '69', '99')


def expand_dictionary(words: Iterable[str], years: Sequence[int] = ()) -> List[str]:
    """
    Case variants of every word plus common suffixes.

    Each word contributes itself, its lower, upper and capitalized forms,
    then the word and its capitalized form with every suffix and year.
    Order follows the input and duplicates are dropped.
    """
    suffixes = LOOKUP_SUFFIXES + tuple(str(year) for year in years)
    expanded: Dict[str, None] = {}

    for word in words:
        if not word:
            continue
        capitalized = word[0].upper() + word[1:]
        for variant in (word, word.lower(), word.upper(), word[0].upper() + word[1:].lower()):
            expanded.setdefault(variant, None)
        for suffix in suffixes:
            expanded.setdefault(word + suffix, None)
            expanded.setdefault(capitalized + suffix, None)

    return list(expanded)


class LookupTable:
    """Read-only digest to plaintext tables, one per supported algorithm"""

    def __init__(self, words: Iterable[str], logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        plaintexts = list(words)

        tables = {}
        for algorithm in HashAlgorithm:
            table: Dict[str, str] = {}
            for plaintext in plaintexts:
                table.setdefault(digest(algorithm, plaintext), plaintext)
            tables[algorithm] = MappingProxyType(table)
        self._tables: Mapping[HashAlgorithm, Mapping[str, str]] = MappingProxyType(tables)

        self.logger.debug(f"Lookup tables built: {self.info()}")

    @classmethod
    def from_wordlist(cls, words: Iterable[str], years: Sequence[int] = (),
                      logger: Optional[logging.Logger] = None) -> 'LookupTable':
        return cls(expand_dictionary(words, years), logger=logger)

    def lookup(self, target: HashTarget) -> Optional[str]:
        return self._tables[target.algorithm].get(target.raw_hash)

    def size(self, algorithm: HashAlgorithm) -> int:
        return len(self._tables[algorithm])

    def info(self) -> Dict[str, int]:
        return {algorithm.value: len(table) for algorithm, table in self._tables.items()}


class LookupTableGenerator(CandidateGenerator):
    """Yields the table's plaintext for the target, or nothing on a miss"""

    kind = GeneratorKind.LOOKUP

    def __init__(self, table: LookupTable, target: HashTarget,
                 logger: Optional[logging.Logger] = None):
        super().__init__()
        self.table = table
        self.target = target
        self.logger = logger or logging.getLogger(__name__)

    @property
    def description(self) -> str:
        return f"{self.table.size(self.target.algorithm)} precomputed {self.target.algorithm.value} digests"

    def sub_phase_summary(self) -> List[Dict[str, object]]:
        return [{
            'name': f"{self.target.algorithm.value} table",
            'description': 'Precomputed digests of the expanded common password list',
            'count': self.table.size(self.target.algorithm),
        }]

    def _generate(self) -> Iterator[Candidate]:
        password = self.table.lookup(self.target)
        if password is not None:
            self.logger.debug(f"Lookup table hit for {self.target.raw_hash}")
            yield Candidate(password=password, source=self.kind, pattern="lookup")
