"""
Unit tests for dictionary, hybrid and external-list generators
"""

import unittest

from cracking_toolkit.attack_engines.dictionary_attack import (
    DictionaryGenerator, HybridGenerator, ExternalListGenerator
)
from cracking_toolkit.attack_engines.rule_mutation import build_rule_catalog
from cracking_toolkit.interfaces import GeneratorKind, InvalidAttackOptions


class TestDictionaryGenerator(unittest.TestCase):
    """Test verbatim wordlist generation"""

    def test_yields_words_in_order(self):
        """Test entries come out verbatim and in insertion order"""
        generator = DictionaryGenerator(['password', 'Secret', 'password'])
        candidates = list(generator)

        self.assertEqual([c.password for c in candidates], ['password', 'Secret', 'password'])
        self.assertTrue(all(c.source == GeneratorKind.DICTIONARY for c in candidates))
        self.assertEqual(candidates[1].base_word, 'Secret')

    def test_batches_and_exhaustion(self):
        """Test batched consumption"""
        generator = DictionaryGenerator(['a', 'b', 'c'])

        self.assertEqual([c.password for c in generator.next_batch(2)], ['a', 'b'])
        self.assertFalse(generator.is_exhausted())
        self.assertEqual([c.password for c in generator.next_batch(2)], ['c'])
        self.assertTrue(generator.is_exhausted())
        self.assertEqual(generator.next_batch(2), [])
        self.assertFalse(generator.capped)

    def test_reset_replays(self):
        """Test reset restarts from the first entry"""
        generator = DictionaryGenerator(['a', 'b'])
        generator.next_batch(5)
        generator.reset()

        self.assertEqual([c.password for c in generator.next_batch(5)], ['a', 'b'])

    def test_invalid_batch_size(self):
        """Test non-positive batch sizes are rejected"""
        with self.assertRaises(InvalidAttackOptions):
            DictionaryGenerator(['a']).next_batch(0)

    def test_negative_limit(self):
        """Test negative limits are rejected"""
        with self.assertRaises(InvalidAttackOptions):
            DictionaryGenerator(['a'], limit=-1)


class TestHybridGenerator(unittest.TestCase):
    """Test dictionary plus rule hybrid generation"""

    def setUp(self):
        self.catalog = build_rule_catalog(2024)
        self.passwords = [c.password for c in HybridGenerator(['alpha', 'beta'], self.catalog)]

    def test_suffix_stage(self):
        """Test words extended by suffix, year and symbol rules"""
        self.assertIn('alpha123', self.passwords)
        self.assertIn('Alpha!', self.passwords)
        self.assertIn('beta2024', self.passwords)

    def test_combination_stage(self):
        """Test word pairs joined by separators and digits"""
        for expected in ('alphabeta', 'alpha_beta', 'beta.alpha', 'AlphaBeta', 'alpha12beta'):
            self.assertIn(expected, self.passwords)

    def test_suffix_stage_runs_first(self):
        """Test all suffix candidates precede combinations"""
        self.assertLess(self.passwords.index('beta2024'), self.passwords.index('alphabeta'))

    def test_combination_provenance(self):
        """Test combination candidates record both base words"""
        candidate = next(c for c in HybridGenerator(['alpha', 'beta'], self.catalog)
                         if c.password == 'alpha_beta')
        self.assertEqual(candidate.base_word, 'alpha+beta')
        self.assertEqual(candidate.rule, 'combination')

    def test_cap(self):
        """Test the hybrid cap"""
        generator = HybridGenerator(['alpha', 'beta'], self.catalog, limit=7)
        self.assertEqual(len(list(generator)), 7)
        self.assertTrue(generator.capped)


class TestExternalListGenerator(unittest.TestCase):
    """Test externally supplied candidate lists"""

    def test_strings_and_mappings(self):
        """Test plain and annotated entries"""
        generator = ExternalListGenerator(
            ['first', {'password': 'second', 'rank': 2, 'score': 0.4}],
            source_name='guess-service'
        )
        candidates = list(generator)

        self.assertEqual([c.password for c in candidates], ['first', 'second'])
        self.assertEqual(candidates[0].pattern, 'guess-service')
        self.assertEqual(candidates[1].metadata, {'rank': 2, 'score': 0.4})
        self.assertEqual(candidates[1].source, GeneratorKind.EXTERNAL)

    def test_entry_without_password(self):
        """Test malformed entries are rejected"""
        with self.assertRaises(InvalidAttackOptions):
            ExternalListGenerator([{'rank': 1}])


if __name__ == '__main__':
    unittest.main()
