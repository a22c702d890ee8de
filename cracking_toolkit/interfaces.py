"""
Core interfaces and shared types for the CrackLab cracking engine
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class HashAlgorithm(Enum):
    """Supported digest algorithms"""
    MD5 = "MD5"
    SHA1 = "SHA1"
    SHA256 = "SHA256"

    @property
    def hashlib_name(self) -> str:
        return self.value.lower()

    @property
    def hex_length(self) -> int:
        return {HashAlgorithm.MD5: 32, HashAlgorithm.SHA1: 40, HashAlgorithm.SHA256: 64}[self]


class GeneratorKind(Enum):
    """Closed set of candidate generator strategies"""
    LOOKUP = "lookup"
    DICTIONARY = "dictionary"
    RULE_MUTATION = "rule_mutation"
    MARKOV = "markov"
    PROFILE_HEURISTIC = "profile_heuristic"
    HYBRID = "hybrid"
    BRUTE_FORCE = "brute_force"
    EXTERNAL = "external"

    @property
    def display_name(self) -> str:
        return _KIND_DISPLAY_NAMES[self]


_KIND_DISPLAY_NAMES = {
    GeneratorKind.LOOKUP: "Lookup-Table",
    GeneratorKind.DICTIONARY: "Dictionary",
    GeneratorKind.RULE_MUTATION: "Rule-Mutation",
    GeneratorKind.MARKOV: "Markov-Chain",
    GeneratorKind.PROFILE_HEURISTIC: "Profile-Heuristic",
    GeneratorKind.HYBRID: "Hybrid",
    GeneratorKind.BRUTE_FORCE: "Brute-Force",
    GeneratorKind.EXTERNAL: "External-List",
}


class SessionStatus(Enum):
    """Attack session lifecycle status"""
    PENDING = "pending"
    RUNNING = "running"
    CRACKED = "cracked"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.CRACKED, SessionStatus.EXHAUSTED, SessionStatus.CANCELLED)


class ProgressEventType(Enum):
    """Live brute force event types"""
    PROGRESS = "progress"
    PHASE_COMPLETE = "phase_complete"
    CRACKED = "cracked"
    EXHAUSTED = "exhausted"

    @property
    def is_droppable(self) -> bool:
        return self is ProgressEventType.PROGRESS

    @property
    def is_terminal(self) -> bool:
        return self in (ProgressEventType.CRACKED, ProgressEventType.EXHAUSTED)


class ErrorKind(Enum):
    """Stable error categories exposed to callers"""
    INPUT_VALIDATION = "InputValidation"
    UNSUPPORTED_CONFIGURATION = "UnsupportedConfiguration"
    RESOURCE_EXHAUSTION = "ResourceExhaustion"
    CANCELLATION = "Cancellation"
    INTERNAL_GENERATOR_FAULT = "InternalGeneratorFault"


@dataclass(frozen=True)
class Candidate:
    """A single guess and where it came from"""
    password: str
    source: GeneratorKind
    pattern: str = ""
    base_word: Optional[str] = None
    rule: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'password': self.password,
            'pattern': self.pattern,
            'source': self.source.value,
        }
        if self.base_word is not None:
            data['baseWord'] = self.base_word
        if self.rule is not None:
            data['rule'] = self.rule
        if self.metadata:
            data['metadata'] = dict(self.metadata)
        return data


class CandidateGenerator(ABC):
    """
    Shared contract for all candidate generators.

    Subclasses implement ``_generate`` as a lazy iterator. The base class
    turns it into a restartable batch source: ``reset`` rebuilds the
    iterator from the same configuration, so identical inputs always
    replay the same order. An optional ``limit`` caps the number of
    candidates a single run may yield.
    """

    kind: GeneratorKind

    def __init__(self, limit: Optional[int] = None):
        if limit is not None and limit < 0:
            raise InvalidAttackOptions(f"Generator limit must be non-negative, got {limit}")
        self.limit = limit
        self.yielded = 0
        self.capped = False
        self._iterator: Optional[Iterator[Candidate]] = None
        self._exhausted = False

    @abstractmethod
    def _generate(self) -> Iterator[Candidate]:
        """Yield candidates in deterministic order"""
        pass

    @property
    def description(self) -> str:
        return self.kind.display_name

    def next_batch(self, size: int = 1000) -> List[Candidate]:
        """
        Return up to ``size`` further candidates.

        An empty list means the generator is exhausted.
        """
        if size <= 0:
            raise InvalidAttackOptions(f"Batch size must be positive, got {size}")
        if self._exhausted:
            return []
        if self._iterator is None:
            self._iterator = self._generate()

        batch = []
        while len(batch) < size:
            if self.limit is not None and self.yielded >= self.limit:
                self.capped = True
                self._exhausted = True
                break
            try:
                candidate = next(self._iterator)
            except StopIteration:
                self._exhausted = True
                break
            batch.append(candidate)
            self.yielded += 1
        return batch

    def is_exhausted(self) -> bool:
        return self._exhausted

    def sub_phase_summary(self) -> List[Dict[str, Any]]:
        """Per sub-phase counts for generators that report them"""
        return []

    def reset(self):
        """Restart generation from the first candidate"""
        self._iterator = None
        self._exhausted = False
        self.yielded = 0
        self.capped = False

    def __iter__(self) -> Iterator[Candidate]:
        self.reset()
        while True:
            batch = self.next_batch()
            if not batch:
                return
            yield from batch


class CrackingException(Exception):
    """Base exception for cracking engine operations"""

    kind = ErrorKind.INTERNAL_GENERATOR_FAULT

    def __init__(self, message: str, error_code: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        if kind is not None:
            self.kind = kind
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'errorCode': self.error_code,
            'message': self.message,
        }


class InputValidationError(CrackingException):
    kind = ErrorKind.INPUT_VALIDATION

    def __init__(self, message: str, error_code: str = "INPUT_VALIDATION"):
        super().__init__(message, error_code)


class InvalidHashFormat(InputValidationError):
    """Hash string is not a recognised hex digest"""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_HASH_FORMAT")


class MissingRequiredProfileField(InputValidationError):
    """Profile lacks a field the heuristic generator cannot do without"""

    def __init__(self, field_name: str):
        super().__init__(f"Profile field '{field_name}' is required", "MISSING_PROFILE_FIELD")
        self.field_name = field_name


class InvalidAttackOptions(InputValidationError):

    def __init__(self, message: str):
        super().__init__(message, "INVALID_ATTACK_OPTIONS")


class UnsupportedConfigurationError(CrackingException):
    kind = ErrorKind.UNSUPPORTED_CONFIGURATION

    def __init__(self, message: str, error_code: str = "UNSUPPORTED_CONFIGURATION"):
        super().__init__(message, error_code)


class UnsupportedAlgorithm(UnsupportedConfigurationError):

    def __init__(self, algorithm: str):
        super().__init__(f"Unsupported hash algorithm: {algorithm}", "UNSUPPORTED_ALGORITHM")
        self.algorithm = algorithm


class MissingMarkovModel(UnsupportedConfigurationError):

    def __init__(self, message: str):
        super().__init__(message, "MISSING_MARKOV_MODEL")


class InvalidModelArtifact(UnsupportedConfigurationError):

    def __init__(self, message: str):
        super().__init__(message, "INVALID_MODEL_ARTIFACT")


class SessionCancelled(CrackingException):
    kind = ErrorKind.CANCELLATION

    def __init__(self, message: str):
        super().__init__(message, "SESSION_CANCELLED")


class PhaseGeneratorError(CrackingException):
    """
    Unexpected failure inside a generator.

    Carries the partial result gathered before the fault so callers can
    still report statistics for the aborted session.
    """
    kind = ErrorKind.INTERNAL_GENERATOR_FAULT

    def __init__(self, message: str, phase_name: Optional[str] = None, partial_result=None):
        super().__init__(message, "PHASE_GENERATOR_ERROR")
        self.phase_name = phase_name
        self.partial_result = partial_result

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['phase'] = self.phase_name
        if self.partial_result is not None:
            data['partialResult'] = self.partial_result.to_dict()
        return data


class InvalidSessionTransition(CrackingException):
    """Illegal attack session status change"""
    kind = ErrorKind.INTERNAL_GENERATOR_FAULT

    def __init__(self, message: str):
        super().__init__(message, "INVALID_SESSION_TRANSITION")
