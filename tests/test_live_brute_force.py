"""
Unit tests for live brute force streaming
"""

import queue
import threading
import time
import unittest
from unittest.mock import patch

import pytest

from cracking_toolkit.config import CrackLabSettings
from cracking_toolkit.resources import initialize_engine
from cracking_toolkit.attack_engines.hash_cracking import digest, HashTarget
from cracking_toolkit.models.progress import ProgressEvent
from cracking_toolkit.attack_engines.brute_force import IncrementalBruteForceGenerator
from cracking_toolkit.models.attack import AttackSession
from cracking_toolkit.services.live_brute_force import (
    LiveBruteForceService, LiveBruteForceWorker, ProgressChannel
)
from cracking_toolkit.services.result_reporter import ResultReporter
from cracking_toolkit.interfaces import (
    GeneratorKind, ProgressEventType, SessionStatus, InvalidHashFormat, InvalidAttackOptions,
    PhaseGeneratorError
)


def make_event(event_type, attempts=0):
    return ProgressEvent(
        session_id='s1', type=event_type, attempts_so_far=attempts,
        elapsed_ms=0.0, hashes_per_second=0.0,
    )


class TestProgressChannel:
    """Test the bounded event channel"""

    def test_progress_coalescing(self):
        """Test a full channel replaces the oldest progress event"""
        channel = ProgressChannel(capacity=2)
        for attempts in (1, 2, 3):
            assert channel.put(make_event(ProgressEventType.PROGRESS, attempts))

        assert len(channel) == 2
        assert channel.dropped == 1
        assert [channel.get().attempts_so_far for _ in range(2)] == [2, 3]

    def test_critical_event_displaces_progress(self):
        """Test a phase event makes room by dropping progress"""
        channel = ProgressChannel(capacity=1)
        channel.put(make_event(ProgressEventType.PROGRESS, 1))

        assert channel.put(make_event(ProgressEventType.PHASE_COMPLETE, 2))
        assert channel.dropped == 1
        assert channel.get().type is ProgressEventType.PHASE_COMPLETE

    def test_progress_dropped_behind_critical_events(self):
        """Test progress is dropped when only critical events are queued"""
        channel = ProgressChannel(capacity=1)
        channel.put(make_event(ProgressEventType.PHASE_COMPLETE, 1))

        assert not channel.put(make_event(ProgressEventType.PROGRESS, 2))
        assert channel.dropped == 1
        assert len(channel) == 1

    def test_critical_event_blocks_until_consumed(self):
        """Test terminal events wait for room instead of being dropped"""
        channel = ProgressChannel(capacity=1)
        channel.put(make_event(ProgressEventType.PHASE_COMPLETE, 1))
        delivered = []

        producer = threading.Thread(
            target=lambda: delivered.append(channel.put(make_event(ProgressEventType.CRACKED, 2)))
        )
        producer.start()
        time.sleep(0.05)
        assert producer.is_alive()

        assert channel.get(timeout=1).type is ProgressEventType.PHASE_COMPLETE
        producer.join(timeout=1)
        assert delivered == [True]
        assert channel.get(timeout=1).type is ProgressEventType.CRACKED
        assert channel.dropped == 0

    def test_close_releases_blocked_producer(self):
        """Test closing the channel unblocks a waiting producer"""
        channel = ProgressChannel(capacity=1)
        channel.put(make_event(ProgressEventType.PHASE_COMPLETE, 1))
        delivered = []

        producer = threading.Thread(
            target=lambda: delivered.append(channel.put(make_event(ProgressEventType.EXHAUSTED, 2)))
        )
        producer.start()
        channel.close()
        producer.join(timeout=1)

        assert delivered == [False]
        assert channel.get() is None
        assert not channel.put(make_event(ProgressEventType.PROGRESS))

    def test_finish_drains_then_ends(self):
        """Test queued events survive finish"""
        channel = ProgressChannel(capacity=4)
        channel.put(make_event(ProgressEventType.EXHAUSTED, 5))
        channel.finish()

        assert channel.get().attempts_so_far == 5
        assert channel.get() is None

    def test_get_timeout(self):
        """Test an idle channel times out"""
        channel = ProgressChannel()
        with pytest.raises(queue.Empty):
            channel.get(timeout=0.01)

    def test_invalid_capacity(self):
        """Test zero capacity is rejected"""
        with pytest.raises(InvalidAttackOptions):
            ProgressChannel(capacity=0)


class TestLiveBruteForceService(unittest.TestCase):
    """Test live brute force sessions"""

    @classmethod
    def setUpClass(cls):
        settings = CrackLabSettings()
        settings.live.progress_every_attempts = 500
        settings.live.cancel_grace_seconds = 5.0
        cls.resources = initialize_engine(settings)

    def setUp(self):
        self.service = LiveBruteForceService(self.resources)

    def tearDown(self):
        self.service.shutdown()

    def collect(self, stream):
        return list(stream)

    def test_cracked_stream(self):
        """Test a crack ends the stream with a Cracked event"""
        stream = self.service.start_live_brute_force(digest('md5', 'ab'), 'md5', max_length=3, charset='abc')
        events = self.collect(stream)

        self.assertEqual([e.type for e in events],
                         [ProgressEventType.PHASE_COMPLETE, ProgressEventType.CRACKED])
        cracked = events[-1]
        self.assertEqual(cracked.candidate, 'ab')
        self.assertEqual(cracked.attempts_so_far, 5)
        self.assertEqual(cracked.current_length, 2)

        stream.wait(timeout=5)
        self.assertEqual(stream.result.password, 'ab')
        self.assertEqual(stream.result.method, 'Brute-Force')
        self.assertEqual(stream.session.status, SessionStatus.CRACKED)

    def test_exhausted_stream(self):
        """Test an exhausted keyspace reports every tier"""
        stream = self.service.start_live_brute_force(digest('sha1', 'dddd'), 'sha1', max_length=3, charset='abc')
        events = self.collect(stream)

        self.assertEqual([e.type for e in events].count(ProgressEventType.PHASE_COMPLETE), 3)
        self.assertEqual(events[-1].type, ProgressEventType.EXHAUSTED)
        self.assertEqual(events[-1].reason, 'exhausted')
        self.assertEqual(events[-1].attempts_so_far, 39)

        stream.wait(timeout=5)
        self.assertFalse(stream.result.cracked)
        self.assertEqual(stream.result.attempts, 39)

    def test_progress_is_monotonic(self):
        """Test attempt counts never go backwards"""
        stream = self.service.start_live_brute_force(digest('md5', 'zzzzzz'), 'md5',
                                                     max_length=5, charset='abcdef')
        events = self.collect(stream)
        attempts = [e.attempts_so_far for e in events]

        self.assertEqual(attempts, sorted(attempts))
        self.assertIn(ProgressEventType.PROGRESS, [e.type for e in events])
        self.assertEqual(attempts[-1], 6 + 36 + 216 + 1296 + 7776)

    def test_cancel_stops_worker(self):
        """Test closing the stream stops the worker and ends events"""
        stream = self.service.start_live_brute_force(digest('md5', 'absent!'), 'md5',
                                                     max_length=8, charset='mixed')
        first = stream.next_event(timeout=5)
        self.assertIsNotNone(first)

        self.assertTrue(stream.close(timeout=5))
        self.assertIsNone(stream.next_event())
        self.assertFalse(stream.is_active())
        self.assertEqual(stream.session.status, SessionStatus.CANCELLED)
        self.assertEqual(stream.result.reason, 'cancelled')

    def test_service_cancel(self):
        """Test cancelling by session id"""
        stream = self.service.start_live_brute_force(digest('md5', 'absent!'), 'md5', max_length=8,
                                                     charset='mixed', session_id='live-1')
        self.assertIn('live-1', self.service.active_sessions())

        self.assertTrue(self.service.cancel('live-1'))
        self.assertFalse(stream.is_active())
        self.assertFalse(self.service.cancel('live-1'))

    def test_same_session_id_replaces_worker(self):
        """Test at most one worker runs per session id"""
        first = self.service.start_live_brute_force(digest('md5', 'absent!'), 'md5', max_length=8,
                                                    charset='mixed', session_id='shared')
        second = self.service.start_live_brute_force(digest('md5', 'b'), 'md5', max_length=2,
                                                     charset='abc', session_id='shared')

        self.assertFalse(first.is_active())
        self.assertEqual(first.session.status, SessionStatus.CANCELLED)
        events = self.collect(second)
        self.assertEqual(events[-1].type, ProgressEventType.CRACKED)
        self.assertEqual(second.session_id, 'shared')

    def test_time_budget(self):
        """Test the wall-clock budget ends the stream"""
        stream = self.service.start_live_brute_force(digest('md5', 'absent!'), 'md5', max_length=8,
                                                     charset='mixed', time_budget_seconds=0.2)
        events = self.collect(stream)

        self.assertEqual(events[-1].type, ProgressEventType.EXHAUSTED)
        self.assertEqual(events[-1].reason, 'timed out')
        stream.wait(timeout=5)
        self.assertEqual(stream.result.reason, 'timed out')

    def test_invalid_requests(self):
        """Test bad input fails before a worker starts"""
        with self.assertRaises(InvalidHashFormat):
            self.service.start_live_brute_force('xyz')
        with self.assertRaises(InvalidAttackOptions):
            self.service.start_live_brute_force(digest('md5', 'a'), max_length=0)
        with self.assertRaises(InvalidAttackOptions):
            self.service.start_live_brute_force(digest('md5', 'a'), time_budget_seconds=-1)
        self.assertEqual(self.service.active_sessions(), [])

    def test_worker_thread_starts(self):
        """Test a worker runs as a plain thread outside the service"""
        session = AttackSession(HashTarget.create(digest('md5', 'ba')), (GeneratorKind.BRUTE_FORCE,))
        generator = IncrementalBruteForceGenerator(charset='ab', max_length=2)
        finished = []
        worker = LiveBruteForceWorker(session, generator, ProgressChannel(), ResultReporter(),
                                      self.resources.settings.live, on_finished=finished.append)

        session.start()
        worker.start()
        worker.join(timeout=5)

        self.assertFalse(worker.is_alive())
        self.assertIsNone(worker.error)
        self.assertEqual(worker.result.password, 'ba')
        self.assertEqual(finished, [worker])

    def test_finished_sessions_are_released(self):
        """Test completed sessions leave the registry"""
        streams = [
            self.service.start_live_brute_force(digest('md5', 'a'), 'md5', max_length=1, charset='ab'),
            self.service.start_live_brute_force(digest('md5', 'zz'), 'md5', max_length=1, charset='ab'),
            self.service.start_live_brute_force(digest('md5', 'absent!'), 'md5', max_length=8,
                                                charset='mixed', time_budget_seconds=0.1),
        ]
        for stream in streams:
            stream.wait(timeout=5)

        self.assertEqual([s.session.status for s in streams],
                         [SessionStatus.CRACKED, SessionStatus.EXHAUSTED, SessionStatus.EXHAUSTED])
        self.assertEqual(self.service.registered_sessions(), [])
        self.assertEqual(self.service.active_sessions(), [])

    def test_worker_fault_is_wrapped(self):
        """Test an internal worker failure surfaces as a phase error with a partial result"""
        with patch.object(IncrementalBruteForceGenerator, 'passwords_for_length',
                          side_effect=RuntimeError('charset table corrupted')):
            stream = self.service.start_live_brute_force(digest('md5', 'a'), 'md5',
                                                         max_length=2, charset='ab')
            events = self.collect(stream)
            stream.wait(timeout=5)

        self.assertEqual(events[-1].type, ProgressEventType.EXHAUSTED)
        self.assertEqual(events[-1].reason, 'aborted')
        self.assertIsInstance(stream.error, PhaseGeneratorError)
        self.assertIsInstance(stream.error.__cause__, RuntimeError)
        self.assertEqual(stream.error.phase_name, 'Brute-Force')
        self.assertTrue(stream.error.partial_result.partial)
        self.assertEqual(stream.error.to_dict()['partialResult']['reason'], 'aborted')
        self.assertEqual(stream.session.status, SessionStatus.CANCELLED)


if __name__ == '__main__':
    unittest.main()
