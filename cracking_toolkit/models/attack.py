"""
Attack session, phase, options and result models
"""

import time
import uuid
from dataclasses import dataclass, field, FrozenInstanceError
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..interfaces import (
    Candidate, GeneratorKind, HashAlgorithm, SessionStatus,
    InvalidAttackOptions, InvalidSessionTransition, SessionCancelled
)
from .profile import TargetProfile


def hashes_per_second(attempts: int, elapsed_ms: float) -> float:
    """attempts / seconds, 0.0 when no time has elapsed"""
    if elapsed_ms <= 0:
        return 0.0
    return attempts / (elapsed_ms / 1000.0)


@dataclass
class AttackOptions:
    """
    Per-request attack configuration

    Unset values fall back to the engine settings. ``phases`` may be
    given as GeneratorKind members or their string values; an explicit
    empty list is rejected.
    """
    phases: Optional[List[GeneratorKind]] = None
    wordlist: Optional[List[str]] = None
    profile: Optional[TargetProfile] = None
    external_candidates: Optional[List[Union[str, Dict[str, Any]]]] = None
    external_source: str = "external"
    brute_force_max_length: Optional[int] = None
    brute_force_charset: Optional[str] = None
    time_budget_seconds: Optional[float] = None
    rule_phase_cap: Optional[int] = None
    hybrid_phase_cap: Optional[int] = None
    markov_max_candidates: Optional[int] = None
    deduplicate: Optional[bool] = None
    batch_size: Optional[int] = None
    session_id: Optional[str] = None

    def __post_init__(self):
        self.validate_all()

    def validate_all(self) -> bool:
        """
        Validate all options

        Raises:
            InvalidAttackOptions: If any option is malformed
            MissingRequiredProfileField: If a profile lacks its name
        """
        if self.phases is not None:
            self.phases = [self._to_kind(kind) for kind in self.phases]
            if not self.phases:
                raise InvalidAttackOptions("Phase plan cannot be empty")
            if GeneratorKind.PROFILE_HEURISTIC in self.phases and self.profile is None:
                raise InvalidAttackOptions("Profile-Heuristic phase requires a profile")
            if GeneratorKind.EXTERNAL in self.phases and not self.external_candidates:
                raise InvalidAttackOptions("External-List phase requires external candidates")
            if GeneratorKind.BRUTE_FORCE in self.phases[:-1]:
                raise InvalidAttackOptions("Brute-Force must be the last phase of the plan")
            if GeneratorKind.LOOKUP in self.phases[1:]:
                raise InvalidAttackOptions("Lookup-Table must be the first phase of the plan")

        if self.profile is not None:
            if isinstance(self.profile, dict):
                self.profile = TargetProfile.from_dict(self.profile)
            self.profile.validate()

        if self.wordlist is not None:
            if isinstance(self.wordlist, str) or not all(isinstance(w, str) for w in self.wordlist):
                raise InvalidAttackOptions("Wordlist must be a sequence of strings")

        for name in ('brute_force_max_length', 'rule_phase_cap', 'hybrid_phase_cap',
                     'markov_max_candidates', 'batch_size'):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, int) or value < 1):
                raise InvalidAttackOptions(f"{name} must be a positive integer, got {value!r}")

        if self.time_budget_seconds is not None and self.time_budget_seconds <= 0:
            raise InvalidAttackOptions("time_budget_seconds must be positive")

        return True

    @staticmethod
    def _to_kind(kind) -> GeneratorKind:
        if isinstance(kind, GeneratorKind):
            return kind
        try:
            return GeneratorKind(str(kind).lower())
        except ValueError:
            raise InvalidAttackOptions(f"Unknown phase kind: {kind}")


@dataclass
class AttackPhase:
    """One generator-bound stage of a session; read-only once locked"""
    name: str
    generator_kind: GeneratorKind
    ordinal: int
    description: str = ""
    attempts_attempted: int = 0
    elapsed_ms: float = 0.0
    success: bool = False
    found_candidate: Optional[Candidate] = None
    capped: bool = False
    sub_phases: Tuple[Dict[str, Any], ...] = ()
    _locked: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name, value):
        if getattr(self, '_locked', False):
            raise FrozenInstanceError(f"cannot assign to field '{name}' of a finished phase")
        object.__setattr__(self, name, value)

    def lock(self):
        object.__setattr__(self, '_locked', True)

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def hashes_per_second(self) -> float:
        return hashes_per_second(self.attempts_attempted, self.elapsed_ms)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'phase': self.name,
            'kind': self.generator_kind.value,
            'ordinal': self.ordinal,
            'description': self.description,
            'attempted': self.attempts_attempted,
            'time': round(self.elapsed_ms, 3),
            'success': self.success,
            'hashesPerSecond': round(self.hashes_per_second, 2),
            'capped': self.capped,
        }
        if self.found_candidate is not None:
            data['crackedWith'] = self.found_candidate.password
            if self.found_candidate.base_word is not None:
                data['baseWord'] = self.found_candidate.base_word
            if self.found_candidate.rule is not None:
                data['rule'] = self.found_candidate.rule
        if self.sub_phases:
            data['subPhases'] = [dict(sp) for sp in self.sub_phases]
        return data


_ALLOWED_TRANSITIONS = {
    SessionStatus.PENDING: (SessionStatus.RUNNING, SessionStatus.CANCELLED),
    SessionStatus.RUNNING: (SessionStatus.CRACKED, SessionStatus.EXHAUSTED, SessionStatus.CANCELLED),
}


class AttackSession:
    """
    Aggregate root for one attack run.

    Explicit state machine: Pending -> Running -> one of Cracked,
    Exhausted or Cancelled. Phases are opened strictly in plan order and
    every phase is locked once the session reaches a terminal status.
    """

    def __init__(self, hash_target, plan: Sequence[GeneratorKind], session_id: Optional[str] = None):
        if not plan:
            raise InvalidAttackOptions("Phase plan cannot be empty")
        self.id = session_id or uuid.uuid4().hex
        self.hash_target = hash_target
        self.algorithm: HashAlgorithm = hash_target.algorithm
        self.plan: Tuple[GeneratorKind, ...] = tuple(plan)
        self.phases: List[AttackPhase] = []
        self.phase_index = -1
        self.status = SessionStatus.PENDING
        self.reason: Optional[str] = None
        self.found_candidate: Optional[Candidate] = None
        self.created_at = datetime.now()
        self.finished_at: Optional[datetime] = None
        self.total_elapsed_ms = 0.0
        self.result = None
        self._started: Optional[float] = None

    @property
    def total_attempts(self) -> int:
        return sum(phase.attempts_attempted for phase in self.phases)

    @property
    def elapsed_ms(self) -> float:
        if self._started is None:
            return 0.0
        if self.status.is_terminal:
            return self.total_elapsed_ms
        return (time.perf_counter() - self._started) * 1000.0

    @property
    def current_phase(self) -> Optional[AttackPhase]:
        return self.phases[self.phase_index] if self.phase_index >= 0 else None

    @property
    def hashes_per_second(self) -> float:
        return hashes_per_second(self.total_attempts, self.elapsed_ms)

    def _check_transition(self, new_status: SessionStatus):
        if self.status is SessionStatus.CANCELLED:
            raise SessionCancelled(f"Session {self.id} was cancelled")
        if new_status not in _ALLOWED_TRANSITIONS.get(self.status, ()):
            raise InvalidSessionTransition(
                f"Session {self.id}: cannot move from {self.status.value} to {new_status.value}"
            )

    def _transition(self, new_status: SessionStatus, reason: Optional[str] = None):
        self._check_transition(new_status)
        self.status = new_status
        if reason is not None:
            self.reason = reason
        if new_status.is_terminal:
            self._finish()

    def _finish(self):
        if self._started is not None:
            self.total_elapsed_ms = (time.perf_counter() - self._started) * 1000.0
        self.finished_at = datetime.now()
        for phase in self.phases:
            phase.lock()

    def start(self):
        self._transition(SessionStatus.RUNNING)
        self._started = time.perf_counter()

    def begin_phase(self, kind: GeneratorKind, description: str = "") -> AttackPhase:
        """Open the next phase of the plan"""
        if self.status is not SessionStatus.RUNNING:
            raise InvalidSessionTransition(f"Session {self.id} is {self.status.value}, cannot start a phase")
        next_index = self.phase_index + 1
        if next_index >= len(self.plan) or self.plan[next_index] is not kind:
            raise InvalidSessionTransition(f"Phase {kind.value} is out of plan order")

        phase = AttackPhase(
            name=kind.display_name,
            generator_kind=kind,
            ordinal=next_index + 1,
            description=description,
        )
        self.phases.append(phase)
        self.phase_index = next_index
        return phase

    def mark_cracked(self, candidate: Candidate):
        phase = self.current_phase
        if phase is None:
            raise InvalidSessionTransition("No phase is running")
        self._check_transition(SessionStatus.CRACKED)
        phase.success = True
        phase.found_candidate = candidate
        self.found_candidate = candidate
        self._transition(SessionStatus.CRACKED, "cracked")

    def mark_exhausted(self, reason: str = "exhausted"):
        self._transition(SessionStatus.EXHAUSTED, reason)

    def cancel(self, reason: str = "cancelled"):
        self._transition(SessionStatus.CANCELLED, reason)


@dataclass(frozen=True)
class AttackResult:
    """Canonical, reproducible outcome of an attack session"""
    session_id: str
    hash_value: str
    algorithm: HashAlgorithm
    status: SessionStatus
    reason: str
    cracked: bool
    password: Optional[str]
    method: Optional[str]
    attempts: int
    time_ms: float
    hashes_per_second: float
    phases: Tuple[AttackPhase, ...]
    partial: bool = False
    target: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def phase_dicts(self) -> List[Dict[str, Any]]:
        return [phase.to_dict() for phase in self.phases]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sessionId': self.session_id,
            'hash': self.hash_value,
            'algorithm': self.algorithm.value,
            'target': dict(self.target),
            'status': self.status.value,
            'reason': self.reason,
            'cracked': self.cracked,
            'password': self.password,
            'method': self.method,
            'attempts': self.attempts,
            'timeMs': round(self.time_ms, 3),
            'hashesPerSecond': round(self.hashes_per_second, 2),
            'phases': self.phase_dicts(),
            'partial': self.partial,
            'timestamp': self.timestamp.isoformat(),
        }
