"""
Hash identification and digest matching

Classifies hex digests by length, builds immutable hash targets and
compares candidate digests against them.
"""

import hashlib
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..interfaces import (
    HashAlgorithm, InvalidHashFormat, UnsupportedAlgorithm
)


HEX_PATTERN = re.compile(r'^[0-9a-fA-F]+$')

ALGORITHMS_BY_LENGTH = {
    32: HashAlgorithm.MD5,
    40: HashAlgorithm.SHA1,
    64: HashAlgorithm.SHA256,
}

# Advisory only, never used for phase selection
STRENGTH_RATINGS = {
    HashAlgorithm.MD5: "Very Weak",
    HashAlgorithm.SHA1: "Weak",
    HashAlgorithm.SHA256: "Strong",
}

ALGORITHM_ALIASES = {
    'md5': HashAlgorithm.MD5,
    'sha1': HashAlgorithm.SHA1,
    'sha-1': HashAlgorithm.SHA1,
    'sha256': HashAlgorithm.SHA256,
    'sha-256': HashAlgorithm.SHA256,
}


def parse_algorithm(algorithm: Union[str, HashAlgorithm, None]) -> Optional[HashAlgorithm]:
    """
    Resolve an algorithm name.

    Args:
        algorithm: Algorithm enum, name such as ``"sha-256"``, or
            ``None``/``"auto"`` to infer from the hash

    Returns:
        Optional[HashAlgorithm]: Resolved algorithm, None for auto-detection

    Raises:
        UnsupportedAlgorithm: If the name is not a supported algorithm
    """
    if algorithm is None or isinstance(algorithm, HashAlgorithm):
        return algorithm

    name = str(algorithm).strip().lower()
    if name in ('', 'auto'):
        return None
    if name not in ALGORITHM_ALIASES:
        raise UnsupportedAlgorithm(str(algorithm))
    return ALGORITHM_ALIASES[name]


def _clean_hash(raw_hash: str) -> str:
    if not isinstance(raw_hash, str):
        raise InvalidHashFormat(f"Hash must be a string, got {type(raw_hash).__name__}")
    hash_clean = raw_hash.strip()
    if not hash_clean:
        raise InvalidHashFormat("Hash value cannot be empty")
    if not HEX_PATTERN.match(hash_clean):
        raise InvalidHashFormat("Hash contains non-hexadecimal characters")
    return hash_clean.lower()


@dataclass(frozen=True)
class HashIdentification:
    """Result of classifying a hash string"""
    algorithm: HashAlgorithm
    length: int
    strength: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.algorithm.value,
            'length': self.length,
            'strength': self.strength,
        }


def identify_hash(raw_hash: str) -> HashIdentification:
    """
    Classify a hash by length and hex charset.

    Raises:
        InvalidHashFormat: If the string is not a 32, 40 or 64 char hex digest
    """
    hash_clean = _clean_hash(raw_hash)
    algorithm = ALGORITHMS_BY_LENGTH.get(len(hash_clean))
    if algorithm is None:
        raise InvalidHashFormat(
            f"Unrecognised hash length {len(hash_clean)}; expected 32 (MD5), 40 (SHA1) or 64 (SHA256)"
        )
    return HashIdentification(algorithm, len(hash_clean), STRENGTH_RATINGS[algorithm])


def digest(algorithm: Union[str, HashAlgorithm], plaintext: str) -> str:
    """Hex digest of ``plaintext`` (UTF-8) under ``algorithm``"""
    resolved = parse_algorithm(algorithm)
    if resolved is None:
        raise UnsupportedAlgorithm(str(algorithm))
    return hashlib.new(resolved.hashlib_name, plaintext.encode('utf-8')).hexdigest()


@dataclass(frozen=True)
class HashTarget:
    """Immutable hash target for an attack session"""
    raw_hash: str
    algorithm: HashAlgorithm
    length: int
    strength_rating: str

    @classmethod
    def create(cls, raw_hash: str,
               algorithm: Union[str, HashAlgorithm, None] = None) -> 'HashTarget':
        """
        Build a validated target.

        Args:
            raw_hash: Hex digest to attack
            algorithm: Declared algorithm or None/"auto" to infer it

        Raises:
            UnsupportedAlgorithm: Unknown algorithm name
            InvalidHashFormat: Malformed hash or length mismatch with the
                declared algorithm
        """
        declared = parse_algorithm(algorithm)
        identification = identify_hash(raw_hash)

        if declared is not None and declared != identification.algorithm:
            raise InvalidHashFormat(
                f"Hash length {identification.length} does not match algorithm "
                f"{declared.value} (expected {declared.hex_length})"
            )

        return cls(
            raw_hash=_clean_hash(raw_hash),
            algorithm=identification.algorithm,
            length=identification.length,
            strength_rating=identification.strength,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hash': self.raw_hash,
            'algorithm': self.algorithm.value,
            'length': self.length,
            'strength': self.strength_rating,
        }


class HashMatcher:
    """Hashes candidates and compares them against one target"""

    def __init__(self, target: HashTarget):
        self.target = target
        self._constructor = getattr(hashlib, target.algorithm.hashlib_name)
        self._expected = target.raw_hash

    def matches(self, plaintext: str) -> bool:
        return self._constructor(plaintext.encode('utf-8')).hexdigest() == self._expected
