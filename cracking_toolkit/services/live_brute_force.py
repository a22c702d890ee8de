"""
Live brute force streaming

Runs the incremental brute force generator on a dedicated worker thread
that publishes ProgressEvents into a bounded channel. Progress events are
coalesced when the consumer lags; phase, crack and exhaustion events are
always delivered. Closing the stream stops the worker cooperatively.
"""

import logging
import queue
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Iterator, List, Optional, Union

from ..config import LiveSettings
from ..interfaces import (
    Candidate, GeneratorKind, HashAlgorithm, ProgressEventType, InvalidAttackOptions,
    PhaseGeneratorError,
)
from ..models.attack import AttackResult, AttackSession
from ..models.progress import ProgressEvent
from ..attack_engines.hash_cracking import HashTarget, HashMatcher
from ..attack_engines.brute_force import IncrementalBruteForceGenerator
from .result_reporter import ResultReporter


# Cancellation is polled on every candidate, the clock every this many
TIME_CHECK_INTERVAL = 64


class ProgressChannel:
    """
    Bounded, back-pressured event queue between one producer and one consumer.

    When full, a new Progress event replaces the oldest queued Progress
    event (or is dropped if none is queued). Terminal and PhaseComplete
    events make room by discarding a queued Progress event, otherwise they
    block until the consumer catches up or closes the channel.
    """

    def __init__(self, capacity: int = 64):
        if capacity < 1:
            raise InvalidAttackOptions(f"Channel capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.dropped = 0
        self._events: Deque[ProgressEvent] = deque()
        self._condition = threading.Condition()
        self._closed = False
        self._finished = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._condition:
            return len(self._events)

    def _discard_progress(self) -> bool:
        for index, queued in enumerate(self._events):
            if queued.type.is_droppable:
                del self._events[index]
                self.dropped += 1
                return True
        return False

    def put(self, event: ProgressEvent) -> bool:
        """
        Publish an event

        Returns:
            bool: False if the event was dropped or the channel is closed
        """
        with self._condition:
            if self._closed:
                return False

            if event.type.is_droppable:
                if len(self._events) >= self.capacity and not self._discard_progress():
                    self.dropped += 1
                    return False
            else:
                while len(self._events) >= self.capacity and not self._closed:
                    if self._discard_progress():
                        break
                    self._condition.wait()
                if self._closed:
                    return False

            self._events.append(event)
            self._condition.notify_all()
            return True

    def get(self, timeout: Optional[float] = None) -> Optional[ProgressEvent]:
        """
        Take the next event

        Returns:
            ProgressEvent or None once the channel is closed or the producer
            has finished and the queue is drained

        Raises:
            queue.Empty: If no event arrived within ``timeout``
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        with self._condition:
            while not self._events:
                if self._closed or self._finished:
                    return None
                remaining = None
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise queue.Empty()
                self._condition.wait(remaining)
            event = self._events.popleft()
            self._condition.notify_all()
            return event

    def finish(self):
        """Producer side: no more events will be published"""
        with self._condition:
            self._finished = True
            self._condition.notify_all()

    def close(self):
        """Consumer side: discard queued events and refuse new ones"""
        with self._condition:
            self._closed = True
            self._events.clear()
            self._condition.notify_all()


class LiveBruteForceWorker(threading.Thread):
    """Producer thread for one live brute force session"""

    def __init__(self, session: AttackSession, generator: IncrementalBruteForceGenerator,
                 channel: ProgressChannel, reporter: ResultReporter, settings: LiveSettings,
                 time_budget_seconds: Optional[float] = None,
                 on_finished: Optional[Callable[["LiveBruteForceWorker"], None]] = None,
                 logger: Optional[logging.Logger] = None):
        super().__init__(name=f"live-brute-force-{session.id[:8]}", daemon=True)
        self.session = session
        self.generator = generator
        self.channel = channel
        self.reporter = reporter
        self.settings = settings
        self.time_budget_seconds = time_budget_seconds
        self.on_finished = on_finished
        self.logger = logger or logging.getLogger(__name__)

        self.matcher = HashMatcher(session.hash_target)
        self.result: Optional[AttackResult] = None
        self.error: Optional[PhaseGeneratorError] = None
        self._stop_event = threading.Event()

        self._attempts = 0
        self._start_time = 0.0

    def stop(self):
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set() or self.channel.closed

    def _elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start_time) * 1000.0

    def _emit(self, event_type: ProgressEventType, rate: float, candidate: Optional[str] = None,
              reason: Optional[str] = None) -> bool:
        return self.channel.put(ProgressEvent(
            session_id=self.session.id,
            type=event_type,
            attempts_so_far=self._attempts,
            elapsed_ms=self._elapsed_ms(),
            hashes_per_second=rate,
            candidate=candidate,
            current_length=self.generator.current_length or None,
            reason=reason,
        ))

    def _average_rate(self) -> float:
        elapsed = self._elapsed_ms()
        return self._attempts / (elapsed / 1000.0) if elapsed > 0 else 0.0

    def run(self):
        self._start_time = time.perf_counter()
        phase = None
        try:
            phase = self.session.begin_phase(GeneratorKind.BRUTE_FORCE, self.generator.description)
            self._brute_force(phase)
        except Exception as e:
            self.logger.error(f"Live session {self.session.id}: brute force worker failed: {e}")
            if phase is not None and not phase.locked:
                phase.attempts_attempted = self._attempts
                phase.elapsed_ms = self._elapsed_ms()
            if not self.session.status.is_terminal:
                self.session.cancel("aborted")
            self.result = self.reporter.publish(self.session, partial=True)
            self.error = PhaseGeneratorError(f"Brute force worker failed: {e}",
                                             phase_name=GeneratorKind.BRUTE_FORCE.display_name,
                                             partial_result=self.result)
            self.error.__cause__ = e
            self._emit(ProgressEventType.EXHAUSTED, self._average_rate(), reason="aborted")
        finally:
            self.channel.finish()
            if self.on_finished is not None:
                self.on_finished(self)

    def _brute_force(self, phase):
        every = self.settings.progress_every_attempts
        interval = self.settings.progress_interval_seconds
        deadline = self._start_time + self.time_budget_seconds if self.time_budget_seconds else None

        last_emit_time = self._start_time
        last_emit_attempts = 0

        def close_phase():
            phase.attempts_attempted = self._attempts
            phase.elapsed_ms = self._elapsed_ms()

        for length in self.generator.tiers():
            self.generator.current_length = length
            pattern = f"brute_force(len={length})"

            for password in self.generator.passwords_for_length(length):
                if self.stop_requested:
                    close_phase()
                    self.session.cancel("cancelled")
                    self.result = self.reporter.publish(self.session)
                    self.logger.info(f"Live session {self.session.id}: cancelled after {self._attempts} attempts")
                    return

                self._attempts += 1
                if self.matcher.matches(password):
                    close_phase()
                    self.session.mark_cracked(Candidate(password=password, source=GeneratorKind.BRUTE_FORCE,
                                                        pattern=pattern))
                    self.result = self.reporter.publish(self.session)
                    self._emit(ProgressEventType.CRACKED, self._average_rate(), candidate=password)
                    return

                since_emit = self._attempts - last_emit_attempts
                check_clock = self._attempts % TIME_CHECK_INTERVAL == 0
                now = time.perf_counter() if check_clock or since_emit >= every else None

                if now is not None and (since_emit >= every or now - last_emit_time >= interval):
                    window = now - last_emit_time
                    rate = since_emit / window if window > 0 else 0.0
                    self._emit(ProgressEventType.PROGRESS, rate, candidate=password)
                    last_emit_time, last_emit_attempts = now, self._attempts

                if deadline is not None and now is not None and now >= deadline:
                    close_phase()
                    self.session.mark_exhausted("timed out")
                    self.result = self.reporter.publish(self.session)
                    self._emit(ProgressEventType.EXHAUSTED, self._average_rate(), reason="timed out")
                    return

            self._emit(ProgressEventType.PHASE_COMPLETE, self._average_rate())

        close_phase()
        self.session.mark_exhausted()
        self.result = self.reporter.publish(self.session)
        self._emit(ProgressEventType.EXHAUSTED, self._average_rate(), reason="exhausted")


class ProgressStream:
    """
    Consumer handle for a live session

    Iterating yields events until a terminal event arrives or the stream
    is closed. Closing stops the worker and guarantees no further events.
    """

    def __init__(self, session: AttackSession, worker: LiveBruteForceWorker, channel: ProgressChannel,
                 grace_seconds: float = 2.0):
        self.session = session
        self.worker = worker
        self.channel = channel
        self.grace_seconds = grace_seconds

    @property
    def session_id(self) -> str:
        return self.session.id

    @property
    def result(self) -> Optional[AttackResult]:
        return self.worker.result

    @property
    def error(self) -> Optional[PhaseGeneratorError]:
        return self.worker.error

    @property
    def dropped_events(self) -> int:
        return self.channel.dropped

    def is_active(self) -> bool:
        return self.worker.is_alive()

    def next_event(self, timeout: Optional[float] = None) -> Optional[ProgressEvent]:
        """Next event, None at end of stream; raises queue.Empty on timeout"""
        return self.channel.get(timeout)

    def __iter__(self) -> Iterator[ProgressEvent]:
        while True:
            event = self.channel.get()
            if event is None:
                return
            yield event
            if event.is_terminal:
                return

    def cancel(self):
        self.worker.stop()
        self.channel.close()

    def close(self, timeout: Optional[float] = None) -> bool:
        """
        Cancel the stream and wait for the worker

        Returns:
            bool: True if the worker stopped within the grace period
        """
        self.cancel()
        if self.worker.ident is not None:
            self.worker.join(self.grace_seconds if timeout is None else timeout)
        return not self.worker.is_alive()

    def wait(self, timeout: Optional[float] = None) -> Optional[AttackResult]:
        """Block until the worker finishes without consuming events"""
        self.worker.join(timeout)
        return self.worker.result

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class LiveBruteForceService:
    """Starts live sessions, at most one worker per session id"""

    def __init__(self, resources, reporter: Optional[ResultReporter] = None,
                 logger: Optional[logging.Logger] = None):
        self.resources = resources
        self.settings: LiveSettings = resources.settings.live
        self.logger = logger or logging.getLogger(__name__)
        self.reporter = reporter or ResultReporter(resources.audit_logger, logger=self.logger)
        self._streams: Dict[str, ProgressStream] = {}
        self._lock = threading.Lock()

    def start_live_brute_force(self, hash_value: str, algorithm: Union[str, HashAlgorithm, None] = None,
                               max_length: Optional[int] = None, charset: Optional[str] = None,
                               session_id: Optional[str] = None,
                               time_budget_seconds: Optional[float] = None) -> ProgressStream:
        """
        Start a live brute force session

        A running session with the same id is cancelled first.

        Args:
            hash_value: Target hex digest
            algorithm: Declared algorithm, or None/"auto" to infer it
            max_length: Longest candidate length
            charset: Named charset or literal characters
            session_id: Session id to reuse; a new one is generated if omitted
            time_budget_seconds: Optional wall-clock budget

        Returns:
            ProgressStream: Cancellable stream of ProgressEvents

        Raises:
            InvalidHashFormat: Malformed hash
            UnsupportedAlgorithm: Unknown algorithm name
            InvalidAttackOptions: Bad length, charset or budget
        """
        target = HashTarget.create(hash_value, algorithm)
        generator = IncrementalBruteForceGenerator(
            charset=charset or self.settings.charset,
            max_length=max_length if max_length is not None else self.settings.max_length,
            logger=self.logger,
        )
        if time_budget_seconds is not None and time_budget_seconds <= 0:
            raise InvalidAttackOptions("time_budget_seconds must be positive")

        session = AttackSession(target, (GeneratorKind.BRUTE_FORCE,), session_id=session_id)

        channel = ProgressChannel(self.settings.channel_capacity)
        worker = LiveBruteForceWorker(
            session, generator, channel, self.reporter, self.settings,
            time_budget_seconds=time_budget_seconds, on_finished=self._release, logger=self.logger,
        )
        stream = ProgressStream(session, worker, channel, self.settings.cancel_grace_seconds)

        # Prior workers are joined outside the lock, their exit callback takes it
        while True:
            with self._lock:
                prior = self._streams.pop(session.id, None)
                if prior is None:
                    self._streams[session.id] = stream
                    session.start()
                    worker.start()
                    break
            self.logger.info(f"Live session {session.id}: cancelling the previous worker")
            if not prior.close(self.settings.cancel_grace_seconds):
                self.logger.warning(
                    f"Live session {session.id}: previous worker did not stop within "
                    f"{self.settings.cancel_grace_seconds}s"
                )

        self.logger.info(
            f"Live session {session.id}: {target.algorithm.value} target, "
            f"{generator.keyspace} candidates up to length {generator.max_length}"
        )
        return stream

    def cancel(self, session_id: str) -> bool:
        """Cancel a live session; False if the id is unknown"""
        with self._lock:
            stream = self._streams.pop(session_id, None)
        if stream is None:
            return False
        return stream.close()

    def _release(self, worker: LiveBruteForceWorker):
        with self._lock:
            stream = self._streams.get(worker.session.id)
            if stream is not None and stream.worker is worker:
                del self._streams[worker.session.id]

    def active_sessions(self) -> List[str]:
        with self._lock:
            return [sid for sid, stream in self._streams.items() if stream.is_active()]

    def registered_sessions(self) -> List[str]:
        """Session ids whose worker has not finished yet"""
        with self._lock:
            return list(self._streams)

    def shutdown(self):
        with self._lock:
            streams = list(self._streams.values())
            self._streams.clear()
        for stream in streams:
            stream.close()
