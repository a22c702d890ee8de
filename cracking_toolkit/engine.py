"""
CrackLab engine facade

Single entry point for the five external operations: hash
identification, synchronous multi-phase attacks, live brute force
streaming, guess generation and strength prediction. Only
CrackingException subclasses leave this module.
"""

import functools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .config import CrackLabSettings
from .interfaces import (
    Candidate, CandidateGenerator, CrackingException, HashAlgorithm,
    InvalidAttackOptions, PhaseGeneratorError
)
from .models.attack import AttackOptions, AttackResult
from .models.profile import TargetProfile
from .attack_engines.hash_cracking import HashIdentification, identify_hash
from .attack_engines.dictionary_attack import DictionaryGenerator
from .attack_engines.rule_mutation import RuleMutationGenerator
from .attack_engines.profile_heuristic import ProfileHeuristicGenerator
from .resources import EngineResources, initialize_engine
from .services.attack_orchestrator import AttackOrchestrator
from .services.live_brute_force import LiveBruteForceService, ProgressStream
from .services.result_reporter import ResultReporter
from .services.strength_predictor import StrengthPrediction, predict_strength


def _guarded(method):
    """Wrap unexpected exceptions so only the engine's error taxonomy escapes"""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except CrackingException:
            raise
        except Exception as e:
            self.logger.error(f"{method.__name__} failed: {e}")
            raise PhaseGeneratorError(f"Internal error in {method.__name__}: {e}") from e
    return wrapper


@dataclass(frozen=True)
class GuessResult:
    """Guess-only generation output"""
    guesses: Tuple[Candidate, ...]
    phases: Tuple[Dict[str, Any], ...]
    time_ms: float
    truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'guesses': [
                {'password': c.password, 'pattern': c.pattern, 'source': c.source.value}
                for c in self.guesses
            ],
            'count': len(self.guesses),
            'phases': [dict(phase) for phase in self.phases],
            'timeMs': round(self.time_ms, 3),
            'truncated': self.truncated,
        }


class CrackingEngine:
    """
    Facade over the orchestrator, live service, reporter and strength model

    Engine resources are built once and shared read-only by every session
    started through this facade.
    """

    def __init__(self, resources: Optional[EngineResources] = None,
                 settings: Optional[CrackLabSettings] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize engine

        Args:
            resources: Prebuilt resources; built from ``settings`` if omitted
            settings: Engine settings used when ``resources`` is omitted
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.resources = resources or initialize_engine(settings, logger=self.logger)
        self.reporter = ResultReporter(self.resources.audit_logger, logger=self.logger)
        self.orchestrator = AttackOrchestrator(self.resources, self.reporter, logger=self.logger)
        self.live_service = LiveBruteForceService(self.resources, self.reporter, logger=self.logger)

    @property
    def settings(self) -> CrackLabSettings:
        return self.resources.settings

    @_guarded
    def identify_hash(self, hash_value: str) -> HashIdentification:
        return identify_hash(hash_value)

    @_guarded
    def run_attack(self, hash_value: str, algorithm: Union[str, HashAlgorithm, None] = None,
                   options: Union[AttackOptions, Dict[str, Any], None] = None,
                   cancel_event: Optional[threading.Event] = None) -> AttackResult:
        """
        Run a synchronous multi-phase attack

        Args:
            hash_value: Target hex digest
            algorithm: Declared algorithm or None/"auto"
            options: AttackOptions or a dict of its fields
            cancel_event: Optional cancellation event

        Returns:
            AttackResult: Final result
        """
        if isinstance(options, dict):
            try:
                options = AttackOptions(**options)
            except TypeError as e:
                raise InvalidAttackOptions(f"Unknown attack option: {e}")
        return self.orchestrator.run_attack(hash_value, algorithm, options, cancel_event)

    @_guarded
    def start_live_brute_force(self, hash_value: str, algorithm: Union[str, HashAlgorithm, None] = None,
                               max_length: Optional[int] = None, charset: Optional[str] = None,
                               session_id: Optional[str] = None,
                               time_budget_seconds: Optional[float] = None) -> ProgressStream:
        return self.live_service.start_live_brute_force(
            hash_value, algorithm, max_length=max_length, charset=charset,
            session_id=session_id, time_budget_seconds=time_budget_seconds,
        )

    @_guarded
    def generate_guesses(self, wordlist: Optional[Sequence[str]] = None,
                         profile: Union[TargetProfile, Dict[str, Any], None] = None,
                         limit: Optional[int] = None) -> GuessResult:
        """
        Produce candidate guesses without hashing

        A profile runs the profile-heuristic generator; otherwise the
        wordlist (the built-in list by default) runs through the dictionary
        and rule-mutation generators. Duplicate guesses are dropped.

        Args:
            wordlist: Base words
            profile: Target profile, mutually exclusive with ``wordlist``
            limit: Maximum number of guesses returned

        Returns:
            GuessResult: Guesses in generation order with per-phase counts
        """
        if wordlist is not None and profile is not None:
            raise InvalidAttackOptions("Provide either a wordlist or a profile, not both")
        if limit is not None and limit < 1:
            raise InvalidAttackOptions(f"Guess limit must be positive, got {limit}")

        attack = self.settings.attack
        generators: List[CandidateGenerator]
        if profile is not None:
            if isinstance(profile, dict):
                profile = TargetProfile.from_dict(profile)
            generators = [ProfileHeuristicGenerator(
                profile, reference_year=self.resources.reference_year,
                min_length=attack.profile_min_length, max_length=attack.profile_max_length,
                logger=self.logger,
            )]
        else:
            words = list(wordlist) if wordlist is not None else list(self.resources.wordlist)
            if not words:
                raise InvalidAttackOptions("Wordlist cannot be empty")
            generators = [
                DictionaryGenerator(words, logger=self.logger),
                RuleMutationGenerator(words, self.resources.rule_catalog,
                                      limit=attack.rule_phase_cap, logger=self.logger),
            ]

        started = time.perf_counter()
        guesses: List[Candidate] = []
        seen = set()
        phases = []
        truncated = False

        for generator in generators:
            produced = 0
            for candidate in generator:
                if limit is not None and len(guesses) >= limit:
                    truncated = True
                    break
                if candidate.password in seen:
                    continue
                seen.add(candidate.password)
                guesses.append(candidate)
                produced += 1
            phase = {'phase': generator.kind.display_name, 'count': produced}
            sub_phases = generator.sub_phase_summary()
            if sub_phases:
                phase['subPhases'] = sub_phases
            phases.append(phase)
            if truncated:
                break

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        self.logger.info(f"Generated {len(guesses)} guesses in {elapsed_ms:.1f} ms")
        return GuessResult(tuple(guesses), tuple(phases), elapsed_ms, truncated)

    @_guarded
    def predict_strength(self, password: str) -> StrengthPrediction:
        return predict_strength(password, self.resources.strength_model, logger=self.logger)

    def shutdown(self):
        self.orchestrator.shutdown()
        self.live_service.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()


__all__ = ['CrackingEngine', 'GuessResult', 'EngineResources', 'initialize_engine']
