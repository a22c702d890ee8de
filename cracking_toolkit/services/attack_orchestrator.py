"""
Attack Orchestrator - sequences candidate generators into attack phases

The orchestrator validates a request, builds the ordered phase plan,
runs each phase's generator against the target digest and stops at the
first match. It is generic over the CandidateGenerator interface; the
generator for each phase kind comes from a factory registry.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from ..interfaces import (
    CandidateGenerator, CrackingException, GeneratorKind, HashAlgorithm,
    PhaseGeneratorError, InvalidAttackOptions
)
from ..models.attack import AttackOptions, AttackPhase, AttackResult, AttackSession
from ..attack_engines.hash_cracking import HashTarget, HashMatcher
from ..attack_engines.dictionary_attack import (
    DictionaryGenerator, HybridGenerator, ExternalListGenerator
)
from ..attack_engines.rule_mutation import RuleMutationGenerator
from ..attack_engines.markov_chain import MarkovGenerator
from ..attack_engines.profile_heuristic import ProfileHeuristicGenerator
from ..attack_engines.brute_force import IncrementalBruteForceGenerator
from ..attack_engines.lookup_table import LookupTableGenerator
from .result_reporter import ResultReporter


DEFAULT_PLAN = (
    GeneratorKind.LOOKUP,
    GeneratorKind.DICTIONARY,
    GeneratorKind.RULE_MUTATION,
    GeneratorKind.MARKOV,
    GeneratorKind.PROFILE_HEURISTIC,
    GeneratorKind.EXTERNAL,
    GeneratorKind.HYBRID,
    GeneratorKind.BRUTE_FORCE,
)

# Phases that only join the default plan when their input is supplied
_OPTIONAL_INPUT_PHASES = {
    GeneratorKind.PROFILE_HEURISTIC: lambda options: options.profile is not None,
    GeneratorKind.EXTERNAL: lambda options: bool(options.external_candidates),
}

GeneratorFactory = Callable[[AttackOptions, HashTarget], CandidateGenerator]


class AttackOrchestrator:
    """
    Runs synchronous multi-phase attack sessions

    One session runs sequentially on the calling thread. Sessions share
    only the read-only engine resources, so independent sessions can run
    in parallel through ``run_attack_async``.
    """

    def __init__(self, resources, reporter: Optional[ResultReporter] = None,
                 max_workers: int = 4, logger: Optional[logging.Logger] = None):
        """
        Initialize orchestrator

        Args:
            resources: EngineResources handle from ``initialize_engine``
            reporter: Result reporter (one without audit logging by default)
            max_workers: Thread pool size for asynchronous sessions
            logger: Optional logger instance
        """
        self.resources = resources
        self.settings = resources.settings.attack
        self.logger = logger or logging.getLogger(__name__)
        self.reporter = reporter or ResultReporter(resources.audit_logger, logger=self.logger)
        self.max_workers = max_workers

        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.RLock()
        self._phase_callback: Optional[Callable[[str, AttackPhase], None]] = None

        self._factories: Dict[GeneratorKind, GeneratorFactory] = {
            GeneratorKind.LOOKUP: self._create_lookup,
            GeneratorKind.DICTIONARY: self._create_dictionary,
            GeneratorKind.RULE_MUTATION: self._create_rule_mutation,
            GeneratorKind.MARKOV: self._create_markov,
            GeneratorKind.PROFILE_HEURISTIC: self._create_profile,
            GeneratorKind.EXTERNAL: self._create_external,
            GeneratorKind.HYBRID: self._create_hybrid,
            GeneratorKind.BRUTE_FORCE: self._create_brute_force,
        }

    def set_phase_callback(self, callback: Callable[[str, AttackPhase], None]):
        """Called with (session_id, phase) after each phase finishes"""
        self._phase_callback = callback

    def _words(self, options: AttackOptions) -> Sequence[str]:
        return options.wordlist if options.wordlist is not None else self.resources.wordlist

    def _create_lookup(self, options: AttackOptions, target: HashTarget) -> CandidateGenerator:
        return LookupTableGenerator(self.resources.lookup_table, target, logger=self.logger)

    def _create_dictionary(self, options: AttackOptions, target: HashTarget) -> CandidateGenerator:
        return DictionaryGenerator(self._words(options), logger=self.logger)

    def _create_rule_mutation(self, options: AttackOptions, target: HashTarget) -> CandidateGenerator:
        return RuleMutationGenerator(
            self._words(options), self.resources.rule_catalog,
            limit=options.rule_phase_cap or self.settings.rule_phase_cap, logger=self.logger
        )

    def _create_markov(self, options: AttackOptions, target: HashTarget) -> CandidateGenerator:
        return MarkovGenerator(
            self.resources.markov_model,
            beam_width=self.settings.markov_beam_width,
            max_candidates=options.markov_max_candidates or self.settings.markov_max_candidates,
            min_length=self.settings.markov_min_length,
            max_length=self.settings.markov_max_length,
            logger=self.logger,
        )

    def _create_profile(self, options: AttackOptions, target: HashTarget) -> CandidateGenerator:
        if options.profile is None:
            raise InvalidAttackOptions("Profile-Heuristic phase requires a profile")
        return ProfileHeuristicGenerator(
            options.profile, reference_year=self.resources.reference_year,
            min_length=self.settings.profile_min_length, max_length=self.settings.profile_max_length,
            logger=self.logger,
        )

    def _create_external(self, options: AttackOptions, target: HashTarget) -> CandidateGenerator:
        if not options.external_candidates:
            raise InvalidAttackOptions("External-List phase requires external candidates")
        return ExternalListGenerator(options.external_candidates, options.external_source, logger=self.logger)

    def _create_hybrid(self, options: AttackOptions, target: HashTarget) -> CandidateGenerator:
        return HybridGenerator(
            self._words(options), self.resources.rule_catalog,
            limit=options.hybrid_phase_cap or self.settings.hybrid_phase_cap, logger=self.logger
        )

    def _create_brute_force(self, options: AttackOptions, target: HashTarget) -> CandidateGenerator:
        return IncrementalBruteForceGenerator(
            charset=options.brute_force_charset or self.settings.brute_force_charset,
            max_length=options.brute_force_max_length or self.settings.brute_force_max_length,
            logger=self.logger,
        )

    def build_plan(self, options: AttackOptions) -> Tuple[GeneratorKind, ...]:
        """Ordered phase kinds for a request"""
        if options.phases is not None:
            return tuple(options.phases)
        return tuple(
            kind for kind in DEFAULT_PLAN
            if kind not in _OPTIONAL_INPUT_PHASES or _OPTIONAL_INPUT_PHASES[kind](options)
        )

    def create_generator(self, kind: GeneratorKind, options: AttackOptions,
                         target: HashTarget) -> CandidateGenerator:
        return self._factories[kind](options, target)

    def run_attack(self, hash_value: str, algorithm: Union[str, HashAlgorithm, None] = None,
                   options: Optional[AttackOptions] = None,
                   cancel_event: Optional[threading.Event] = None) -> AttackResult:
        """
        Run a synchronous attack session

        All input is validated and every phase generator is built before
        the session starts, so invalid requests fail with no side effects.

        Args:
            hash_value: Target hex digest
            algorithm: Declared algorithm, or None/"auto" to infer it
            options: Attack options
            cancel_event: Optional event that cancels the session when set

        Returns:
            AttackResult: Final result (cracked, exhausted, timed out or cancelled)

        Raises:
            InvalidHashFormat: Malformed hash or algorithm mismatch
            UnsupportedAlgorithm: Unknown algorithm name
            InvalidAttackOptions: Malformed options
            MissingRequiredProfileField: Profile without a name
            PhaseGeneratorError: A generator failed mid-session; the error
                carries the partial result
        """
        options = options or AttackOptions()
        target = HashTarget.create(hash_value, algorithm)
        plan = self.build_plan(options)
        generators = [(kind, self.create_generator(kind, options, target)) for kind in plan]

        session = AttackSession(target, plan, session_id=options.session_id)
        return self.execute_session(session, generators, options, cancel_event)

    def run_attack_async(self, hash_value: str, algorithm: Union[str, HashAlgorithm, None] = None,
                         options: Optional[AttackOptions] = None,
                         cancel_event: Optional[threading.Event] = None) -> 'Future[AttackResult]':
        """Run a session on the orchestrator's thread pool"""
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.max_workers,
                                                    thread_name_prefix="attack-session")
            return self._executor.submit(self.run_attack, hash_value, algorithm, options, cancel_event)

    def execute_session(self, session: AttackSession,
                        generators: List[Tuple[GeneratorKind, CandidateGenerator]],
                        options: AttackOptions,
                        cancel_event: Optional[threading.Event] = None) -> AttackResult:
        """Drive a pending session through its phase plan"""
        matcher = HashMatcher(session.hash_target)
        budget = options.time_budget_seconds or self.settings.time_budget_seconds
        deduplicate = options.deduplicate if options.deduplicate is not None else self.settings.deduplicate_across_phases
        batch_size = options.batch_size or self.settings.batch_size
        seen: Optional[Set[str]] = set() if deduplicate else None

        session.start()
        deadline = time.perf_counter() + budget if budget else None
        self.logger.info(
            f"Session {session.id}: {session.algorithm.value} target, "
            f"plan {[kind.display_name for kind in session.plan]}"
        )

        try:
            for kind, generator in generators:
                phase = session.begin_phase(kind, generator.description)
                self._run_phase(session, phase, generator, matcher, batch_size, deadline, seen, cancel_event)
                if session.status.is_terminal:
                    break
            else:
                session.mark_exhausted()
        except Exception as e:
            return self._abort_session(session, e)

        return self.reporter.publish(session)

    def _run_phase(self, session: AttackSession, phase: AttackPhase, generator: CandidateGenerator,
                   matcher: HashMatcher, batch_size: int, deadline: Optional[float],
                   seen: Optional[Set[str]], cancel_event: Optional[threading.Event]):
        started = time.perf_counter()
        attempts = 0

        def close_phase():
            phase.attempts_attempted = attempts
            phase.elapsed_ms = (time.perf_counter() - started) * 1000.0
            phase.capped = generator.capped
            phase.sub_phases = tuple(generator.sub_phase_summary())

        try:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    close_phase()
                    session.cancel("cancelled")
                    return
                if deadline is not None and time.perf_counter() >= deadline:
                    close_phase()
                    self.logger.info(f"Session {session.id}: time budget expired in {phase.name}")
                    session.mark_exhausted("timed out")
                    return

                batch = generator.next_batch(batch_size)
                if not batch:
                    break

                for candidate in batch:
                    if seen is not None:
                        if candidate.password in seen:
                            continue
                        seen.add(candidate.password)
                    attempts += 1
                    if matcher.matches(candidate.password):
                        close_phase()
                        self.logger.info(
                            f"Session {session.id}: match in phase {phase.ordinal} ({phase.name}) "
                            f"after {attempts} attempts"
                        )
                        session.mark_cracked(candidate)
                        return

            close_phase()
            if phase.capped:
                self.logger.info(f"Session {session.id}: {phase.name} stopped at its candidate cap")
        finally:
            if not phase.locked and phase.attempts_attempted != attempts:
                close_phase()
            self._notify_phase(session, phase)

    def _notify_phase(self, session: AttackSession, phase: AttackPhase):
        self.logger.debug(
            f"Session {session.id}: phase {phase.ordinal} {phase.name} "
            f"{phase.attempts_attempted} attempts in {phase.elapsed_ms:.1f} ms"
        )
        if self._phase_callback:
            self._phase_callback(session.id, phase)

    def _abort_session(self, session: AttackSession, error: Exception) -> AttackResult:
        phase_name = session.current_phase.name if session.current_phase else None
        self.logger.error(f"Session {session.id}: generator fault in {phase_name}: {error}")

        if not session.status.is_terminal:
            session.cancel("aborted")
        partial = self.reporter.publish(session, partial=True)

        if isinstance(error, PhaseGeneratorError):
            error.partial_result = partial
            raise error
        message = error.message if isinstance(error, CrackingException) else str(error)
        raise PhaseGeneratorError(
            f"Generator failure in phase {phase_name}: {message}",
            phase_name=phase_name,
            partial_result=partial,
        ) from error

    def shutdown(self, wait: bool = True):
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=wait)
                self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
