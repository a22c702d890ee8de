"""
Unit tests for the attack orchestrator
"""

import threading
import unittest
from unittest.mock import Mock

from cracking_toolkit.config import CrackLabSettings
from cracking_toolkit.resources import initialize_engine
from cracking_toolkit.services.attack_orchestrator import AttackOrchestrator
from cracking_toolkit.services.result_reporter import ResultReporter
from cracking_toolkit.attack_engines.hash_cracking import digest
from cracking_toolkit.attack_engines.markov_chain import MarkovGenerator
from cracking_toolkit.models.attack import AttackOptions
from cracking_toolkit.models.profile import TargetProfile
from cracking_toolkit.interfaces import (
    CandidateGenerator, Candidate, GeneratorKind, SessionStatus, ErrorKind,
    InvalidHashFormat, InvalidAttackOptions, PhaseGeneratorError, UnsupportedAlgorithm
)


MD5_PASSWORD = "5f4dcc3b5aa765d61d8327deb882cf99"


class FaultyGenerator(CandidateGenerator):
    """Generator that fails after its first batch"""

    kind = GeneratorKind.DICTIONARY

    def _generate(self):
        yield Candidate(password='first', source=self.kind)
        raise RuntimeError("wordlist backend went away")


class TestAttackOrchestrator(unittest.TestCase):
    """Test multi-phase attack sessions"""

    @classmethod
    def setUpClass(cls):
        settings = CrackLabSettings()
        settings.attack.brute_force_max_length = 2
        cls.resources = initialize_engine(settings)

    def setUp(self):
        self.reporter = ResultReporter()
        self.orchestrator = AttackOrchestrator(self.resources, self.reporter)

    def tearDown(self):
        self.orchestrator.shutdown()

    def test_dictionary_round_trip(self):
        """Test MD5('password') cracks in the Dictionary phase"""
        result = self.orchestrator.run_attack(
            MD5_PASSWORD, 'md5', AttackOptions(wordlist=['hello', 'password', 'world'], phases=['dictionary'])
        )

        self.assertTrue(result.cracked)
        self.assertEqual(result.password, 'password')
        self.assertEqual(result.method, 'Dictionary')
        self.assertEqual(result.status, SessionStatus.CRACKED)
        self.assertEqual(result.reason, 'cracked')
        self.assertEqual(len(result.phases), 1)
        self.assertEqual(result.phases[0].attempts_attempted, 2)
        self.assertEqual(result.phase_dicts()[0]['crackedWith'], 'password')

    def test_default_plan_cracks_123456_by_lookup(self):
        """Test the default plan answers '123456' from the lookup table"""
        result = self.orchestrator.run_attack("e10adc3949ba59abbe56e057f20f883e")

        self.assertTrue(result.cracked)
        self.assertEqual(result.password, '123456')
        self.assertEqual(result.method, 'Lookup-Table')
        self.assertEqual(result.attempts, 1)
        self.assertEqual([p.name for p in result.phases], ['Lookup-Table'])

    def test_lookup_covers_expanded_variants(self):
        """Test capitalized words with common suffixes are precomputed"""
        result = self.orchestrator.run_attack(digest('sha256', 'Dragon99'), 'sha256',
                                              AttackOptions(phases=['lookup']))

        self.assertEqual(result.password, 'Dragon99')
        self.assertEqual(result.phase_dicts()[0]['crackedWith'], 'Dragon99')
        self.assertEqual(result.phase_dicts()[0]['subPhases'][0]['name'], 'SHA256 table')

    def test_lookup_miss_falls_through(self):
        """Test a lookup miss costs no attempts and the next phase runs"""
        result = self.orchestrator.run_attack(
            digest('md5', 'zebra-crossing'), 'md5',
            AttackOptions(wordlist=['zebra-crossing'], phases=['lookup', 'dictionary'])
        )

        self.assertEqual(result.method, 'Dictionary')
        self.assertEqual(result.phases[0].attempts_attempted, 0)
        self.assertFalse(result.phases[0].success)
        self.assertEqual(result.attempts, 1)

    def test_first_matching_phase_wins(self):
        """Test later phases never start after a match"""
        result = self.orchestrator.run_attack(
            digest('md5', 'Password1'), None,
            AttackOptions(wordlist=['password'], phases=['dictionary', 'rule_mutation', 'brute_force'])
        )

        self.assertEqual(result.method, 'Rule-Mutation')
        self.assertEqual([p.name for p in result.phases], ['Dictionary', 'Rule-Mutation'])
        winning = result.phase_dicts()[1]
        self.assertEqual(winning['baseWord'], 'password')
        self.assertEqual(winning['rule'], 'capitalize_append_1')
        self.assertTrue(winning['success'])
        self.assertFalse(result.phase_dicts()[0]['success'])

    def test_attempts_sum_and_ordinals(self):
        """Test total attempts equal the phase sum and ordinals increase"""
        result = self.orchestrator.run_attack(
            digest('sha1', 'not-in-any-phase'), 'sha1',
            AttackOptions(wordlist=['alpha', 'beta'], phases=['dictionary', 'rule_mutation', 'hybrid'])
        )

        self.assertEqual(result.status, SessionStatus.EXHAUSTED)
        self.assertEqual(result.reason, 'exhausted')
        self.assertFalse(result.cracked)
        self.assertIsNone(result.method)
        self.assertEqual(result.attempts, sum(p.attempts_attempted for p in result.phases))
        self.assertEqual([p.ordinal for p in result.phases], [1, 2, 3])
        self.assertEqual(result.phases[0].attempts_attempted, 2)

    def test_brute_force_phase(self):
        """Test brute force attempt counting"""
        result = self.orchestrator.run_attack(
            digest('md5', '7a'), 'md5', AttackOptions(phases=['brute_force'])
        )

        self.assertTrue(result.cracked)
        self.assertEqual(result.method, 'Brute-Force')
        self.assertEqual(result.attempts, 36 + 33 * 36 + 1)

    def test_markov_phase(self):
        """Test the most likely Markov candidate cracks on the first attempt"""
        attack = self.resources.settings.attack
        top = MarkovGenerator(
            self.resources.markov_model, beam_width=attack.markov_beam_width,
            max_candidates=attack.markov_max_candidates, min_length=attack.markov_min_length,
            max_length=attack.markov_max_length,
        ).next_batch(1)[0].password

        result = self.orchestrator.run_attack(digest('sha256', top), 'sha256', AttackOptions(phases=['markov']))

        self.assertEqual(result.method, 'Markov-Chain')
        self.assertEqual(result.attempts, 1)

    def test_profile_phase(self):
        """Test profile-derived passwords crack in the profile phase"""
        options = AttackOptions(
            profile=TargetProfile(name='John Smith', dob='1990-05-15'),
            phases=['profile_heuristic'],
        )
        result = self.orchestrator.run_attack(digest('md5', 'john1990'), 'md5', options)

        self.assertEqual(result.method, 'Profile-Heuristic')
        self.assertTrue(result.phase_dicts()[0]['subPhases'])

    def test_external_phase_metadata(self):
        """Test external candidates keep their metadata"""
        options = AttackOptions(
            phases=['external'],
            external_candidates=['nope', {'password': 'password', 'rank': 1}],
        )
        result = self.orchestrator.run_attack(MD5_PASSWORD, 'md5', options)

        self.assertEqual(result.method, 'External-List')
        self.assertEqual(result.phases[0].found_candidate.metadata, {'rank': 1})

    def test_default_plan(self):
        """Test the default phase order"""
        self.assertEqual(self.orchestrator.build_plan(AttackOptions()), (
            GeneratorKind.LOOKUP, GeneratorKind.DICTIONARY, GeneratorKind.RULE_MUTATION,
            GeneratorKind.MARKOV, GeneratorKind.HYBRID, GeneratorKind.BRUTE_FORCE,
        ))
        with_profile = self.orchestrator.build_plan(AttackOptions(profile={'name': 'Ann Lee'}))
        self.assertEqual(with_profile[4], GeneratorKind.PROFILE_HEURISTIC)
        self.assertEqual(with_profile[-1], GeneratorKind.BRUTE_FORCE)

    def test_brute_force_must_run_last(self):
        """Test an explicit plan cannot sweep the keyspace before cheaper phases"""
        reporter = Mock(spec=ResultReporter)
        orchestrator = AttackOrchestrator(self.resources, reporter)

        with self.assertRaises(InvalidAttackOptions):
            orchestrator.run_attack(MD5_PASSWORD, 'md5', AttackOptions(phases=['brute_force', 'dictionary']))
        reporter.publish.assert_not_called()

    def test_validation_before_session(self):
        """Test invalid requests fail before anything is reported"""
        reporter = Mock(spec=ResultReporter)
        orchestrator = AttackOrchestrator(self.resources, reporter)

        with self.assertRaises(InvalidHashFormat):
            orchestrator.run_attack('not-a-hash')
        with self.assertRaises(UnsupportedAlgorithm):
            orchestrator.run_attack(MD5_PASSWORD, 'crc32')
        with self.assertRaises(InvalidAttackOptions):
            orchestrator.run_attack(MD5_PASSWORD, options=AttackOptions(
                phases=['external'], external_candidates=[{'rank': 1}]))
        reporter.publish.assert_not_called()

    def test_cancel_event(self):
        """Test a set cancel event ends the session as cancelled"""
        cancel = threading.Event()
        cancel.set()
        result = self.orchestrator.run_attack(MD5_PASSWORD, options=AttackOptions(wordlist=['password']),
                                              cancel_event=cancel)

        self.assertEqual(result.status, SessionStatus.CANCELLED)
        self.assertEqual(result.reason, 'cancelled')
        self.assertFalse(result.cracked)
        self.assertEqual(len(result.phases), 1)

    def test_time_budget(self):
        """Test an expired budget ends the session as timed out"""
        options = AttackOptions(phases=['brute_force'], brute_force_max_length=5, time_budget_seconds=1e-9)
        result = self.orchestrator.run_attack(digest('md5', 'zzzzz'), 'md5', options)

        self.assertEqual(result.status, SessionStatus.EXHAUSTED)
        self.assertEqual(result.reason, 'timed out')

    def test_phase_cap(self):
        """Test a capped phase is reported as capped, not failed"""
        options = AttackOptions(wordlist=['summer'], phases=['rule_mutation'], rule_phase_cap=5)
        result = self.orchestrator.run_attack(digest('md5', 'absent'), 'md5', options)

        self.assertEqual(result.attempts, 5)
        self.assertTrue(result.phases[0].capped)
        self.assertTrue(result.phase_dicts()[0]['capped'])
        self.assertEqual(result.reason, 'exhausted')

    def test_deduplicate_across_phases(self):
        """Test optional de-duplication skips repeated guesses"""
        words = ['password', 'password', 'letmein']
        target = digest('md5', 'absent')

        plain = self.orchestrator.run_attack(target, 'md5', AttackOptions(wordlist=words, phases=['dictionary']))
        deduped = self.orchestrator.run_attack(
            target, 'md5', AttackOptions(wordlist=words, phases=['dictionary'], deduplicate=True)
        )

        self.assertEqual(plain.attempts, 3)
        self.assertEqual(deduped.attempts, 2)

    def test_generator_fault_returns_partial_result(self):
        """Test a generator fault aborts with partial statistics"""
        self.orchestrator._factories[GeneratorKind.DICTIONARY] = lambda options, target: FaultyGenerator()

        with self.assertRaises(PhaseGeneratorError) as context:
            self.orchestrator.run_attack(MD5_PASSWORD, options=AttackOptions(phases=['dictionary', 'brute_force']))

        error = context.exception
        self.assertEqual(error.kind, ErrorKind.INTERNAL_GENERATOR_FAULT)
        self.assertEqual(error.phase_name, 'Dictionary')
        self.assertTrue(error.partial_result.partial)
        self.assertEqual(error.partial_result.reason, 'aborted')
        self.assertEqual(len(error.partial_result.phases), 1)
        self.assertTrue(error.to_dict()['partialResult']['partial'])

    def test_deterministic_attempts(self):
        """Test repeated runs report the same attempt counts"""
        options = dict(wordlist=['alpha', 'beta'], phases=['dictionary', 'rule_mutation'])
        target = digest('md5', 'beta123')

        first = self.orchestrator.run_attack(target, 'md5', AttackOptions(**options))
        second = self.orchestrator.run_attack(target, 'md5', AttackOptions(**options))

        self.assertEqual(first.attempts, second.attempts)
        self.assertEqual(first.phase_dicts()[1]['rule'], second.phase_dicts()[1]['rule'])

    def test_phase_callback(self):
        """Test the phase callback sees every finished phase"""
        seen = []
        self.orchestrator.set_phase_callback(lambda session_id, phase: seen.append(phase.name))
        self.orchestrator.run_attack(
            digest('md5', 'absent'), 'md5', AttackOptions(wordlist=['a'], phases=['dictionary', 'rule_mutation'])
        )

        self.assertEqual(seen, ['Dictionary', 'Rule-Mutation'])

    def test_async_sessions(self):
        """Test independent sessions run in parallel"""
        futures = [
            self.orchestrator.run_attack_async(digest('md5', word), 'md5',
                                               AttackOptions(wordlist=['alpha', 'beta', 'gamma'],
                                                             phases=['dictionary']))
            for word in ('alpha', 'gamma')
        ]
        results = [future.result(timeout=30) for future in futures]

        self.assertEqual([r.password for r in results], ['alpha', 'gamma'])
        self.assertNotEqual(results[0].session_id, results[1].session_id)


if __name__ == '__main__':
    unittest.main()
