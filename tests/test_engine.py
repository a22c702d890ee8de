"""
Unit tests for the CrackingEngine facade
"""

import unittest
from unittest.mock import patch

from cracking_toolkit.engine import CrackingEngine, GuessResult
from cracking_toolkit.config import CrackLabSettings
from cracking_toolkit.models.profile import TargetProfile
from cracking_toolkit.interfaces import (
    HashAlgorithm, GeneratorKind, ProgressEventType, InvalidAttackOptions,
    InvalidHashFormat, MissingRequiredProfileField, PhaseGeneratorError
)


MD5_PASSWORD = "5f4dcc3b5aa765d61d8327deb882cf99"


class TestCrackingEngine(unittest.TestCase):
    """Test the engine's external operations"""

    @classmethod
    def setUpClass(cls):
        cls.engine = CrackingEngine(settings=CrackLabSettings())

    @classmethod
    def tearDownClass(cls):
        cls.engine.shutdown()

    def test_identify_hash(self):
        """Test identification through the facade"""
        identification = self.engine.identify_hash(MD5_PASSWORD.upper())

        self.assertEqual(identification.algorithm, HashAlgorithm.MD5)
        self.assertEqual(identification.length, 32)

    def test_identify_invalid(self):
        """Test validation errors pass through unchanged"""
        with self.assertRaises(InvalidHashFormat):
            self.engine.identify_hash('1234')

    def test_run_attack_with_option_dict(self):
        """Test options may be given as a mapping"""
        result = self.engine.run_attack(MD5_PASSWORD, 'auto', {'wordlist': ['password'], 'phases': ['dictionary']})

        self.assertTrue(result.cracked)
        self.assertEqual(result.attempts, 1)

    def test_run_attack_unknown_option(self):
        """Test unknown option keys are rejected"""
        with self.assertRaises(InvalidAttackOptions):
            self.engine.run_attack(MD5_PASSWORD, options={'turbo': True})

    def test_unexpected_errors_are_wrapped(self):
        """Test only taxonomy errors leave the engine"""
        with patch.object(self.engine.orchestrator, 'run_attack', side_effect=RuntimeError('boom')):
            with self.assertRaises(PhaseGeneratorError) as context:
                self.engine.run_attack(MD5_PASSWORD)

        self.assertIn('run_attack', context.exception.message)
        self.assertIsInstance(context.exception.__cause__, RuntimeError)

    def test_live_brute_force(self):
        """Test starting a live stream through the facade"""
        with self.engine.start_live_brute_force('0cc175b9c0f1b6a831c399e269772661', max_length=1,
                                                charset='abc') as stream:
            events = list(stream)

        self.assertEqual(events[-1].type, ProgressEventType.CRACKED)
        self.assertEqual(events[-1].candidate, 'a')

    def test_generate_guesses_from_wordlist(self):
        """Test wordlist guesses run dictionary then rule mutation"""
        result = self.engine.generate_guesses(wordlist=['alpha', 'beta'])

        self.assertIsInstance(result, GuessResult)
        passwords = [c.password for c in result.guesses]
        self.assertEqual(passwords[:2], ['alpha', 'beta'])
        self.assertEqual(len(passwords), len(set(passwords)))
        self.assertIn('Alpha1', passwords)
        self.assertEqual([p['phase'] for p in result.phases], ['Dictionary', 'Rule-Mutation'])
        self.assertEqual(sum(p['count'] for p in result.phases), len(passwords))
        self.assertFalse(result.truncated)

    def test_generate_guesses_default_wordlist(self):
        """Test the built-in wordlist is used when none is given"""
        result = self.engine.generate_guesses(limit=3)

        self.assertEqual(len(result.guesses), 3)
        self.assertTrue(result.truncated)
        self.assertEqual(result.guesses[0].source, GeneratorKind.DICTIONARY)

    def test_generate_guesses_from_profile(self):
        """Test profile guesses"""
        result = self.engine.generate_guesses(profile={'name': 'John Smith', 'dob': '1990-05-15'})

        passwords = [c.password for c in result.guesses]
        self.assertIn('john1990', passwords)
        self.assertEqual(result.phases[0]['phase'], 'Profile-Heuristic')
        self.assertIn('subPhases', result.phases[0])

        data = result.to_dict()
        self.assertEqual(data['count'], len(passwords))
        self.assertEqual(data['guesses'][0]['source'], 'profile_heuristic')

    def test_generate_guesses_invalid(self):
        """Test invalid guess requests"""
        with self.assertRaises(InvalidAttackOptions):
            self.engine.generate_guesses(wordlist=['a'], profile=TargetProfile(name='Jo Ann'))
        with self.assertRaises(InvalidAttackOptions):
            self.engine.generate_guesses(wordlist=['a'], limit=0)
        with self.assertRaises(InvalidAttackOptions):
            self.engine.generate_guesses(wordlist=[])
        with self.assertRaises(MissingRequiredProfileField):
            self.engine.generate_guesses(profile={'name': ' '})

    def test_predict_strength(self):
        """Test strength prediction through the facade"""
        self.assertEqual(self.engine.predict_strength('Password1').predicted_class, 'Weak')


if __name__ == '__main__':
    unittest.main()
