"""
Unit tests for the mangling rule catalog and rule-mutation generator
"""

import unittest

from cracking_toolkit.attack_engines.rule_mutation import (
    RuleCatalog, RuleMutationGenerator, Rule, build_rule_catalog
)
from cracking_toolkit.interfaces import GeneratorKind, InvalidAttackOptions


class TestRuleCatalog(unittest.TestCase):
    """Test catalog construction"""

    def setUp(self):
        self.catalog = build_rule_catalog(2024)

    def test_catalog_size(self):
        """Test the catalog carries at least thirty named rules"""
        self.assertGreaterEqual(len(self.catalog), 30)
        self.assertEqual(len(self.catalog.names()), len(set(self.catalog.names())))

    def test_rules_have_descriptions(self):
        """Test every rule exposes name and description"""
        for entry in self.catalog.to_list():
            self.assertTrue(entry['name'])
            self.assertTrue(entry['description'])

    def test_year_rules_follow_reference_year(self):
        """Test year suffix rules span the decade either side"""
        self.assertIn('append_year_2024', self.catalog)
        self.assertIn('append_year_2014', self.catalog)
        self.assertIn('append_year_2034', self.catalog)
        self.assertNotIn('append_year_2013', self.catalog)
        self.assertEqual(self.catalog.reference_year, 2024)

    def test_rule_transforms(self):
        """Test representative rule outputs"""
        expected = {
            'lowercase': 'password',
            'uppercase': 'PASSWORD',
            'capitalize': 'Password',
            'toggle_case': 'PaSsWoRd',
            'leet_basic': 'p455w0rd',
            'leet_advanced': 'p@$$w0rd',
            'append_123': 'password123',
            'append_year_2024': 'password2024',
            'prepend_1': '1password',
            'append_bang': 'password!',
            'capitalize_append_1': 'Password1',
            'reverse': 'drowssap',
            'duplicate': 'passwordpassword',
            'truncate_4': 'pass',
            'drop_last': 'passwor',
        }
        for name, output in expected.items():
            with self.subTest(rule=name):
                self.assertEqual(self.catalog.get(name).apply('password'), output)

    def test_rules_that_do_not_apply(self):
        """Test inapplicable rules return None"""
        self.assertIsNone(self.catalog.get('truncate_4').apply('abc'))
        self.assertIsNone(self.catalog.get('drop_first').apply('a'))
        self.assertIsNone(self.catalog.get('combine_next').apply('abc', None))
        self.assertEqual(self.catalog.get('combine_next').apply('abc', 'def'), 'abcdef')

    def test_by_category(self):
        """Test category filtering"""
        years = self.catalog.by_category('year')
        self.assertTrue(all(rule.category == 'year' for rule in years))
        self.assertEqual(len([r for r in years if r.name.startswith('append_year_')]), 21)

    def test_duplicate_rule_names_rejected(self):
        """Test catalog refuses duplicate names"""
        rule = Rule('same', 'first', lambda w, p: w)
        with self.assertRaises(InvalidAttackOptions):
            RuleCatalog([rule, Rule('same', 'second', lambda w, p: w)], 2024)


class TestRuleMutationGenerator(unittest.TestCase):
    """Test rule application order and caps"""

    def setUp(self):
        self.catalog = build_rule_catalog(2024)

    def test_word_major_order(self):
        """Test every rule runs on the first word before the second"""
        generator = RuleMutationGenerator(['abcdef', 'ghijkl'], self.catalog)
        candidates = list(generator)

        bases = [c.base_word for c in candidates]
        first_second = bases.index('ghijkl')
        self.assertTrue(all(b == 'abcdef' for b in bases[:first_second]))
        self.assertTrue(all(b == 'ghijkl' for b in bases[first_second:]))
        self.assertEqual(candidates[0].password, 'abcdef')
        self.assertEqual(candidates[0].rule, 'lowercase')
        self.assertEqual(candidates[0].source, GeneratorKind.RULE_MUTATION)

    def test_candidate_provenance(self):
        """Test candidates carry rule and base word"""
        generator = RuleMutationGenerator(['password'], self.catalog)
        found = next(c for c in generator if c.password == 'Password1')

        self.assertEqual(found.base_word, 'password')
        self.assertEqual(found.rule, 'capitalize_append_1')
        self.assertEqual(found.pattern, 'capitalize_append_1(password)')

    def test_combination_uses_next_word(self):
        """Test combination rules pair each word with its successor"""
        passwords = [c.password for c in RuleMutationGenerator(['red', 'blue'], self.catalog)]

        self.assertIn('redblue', passwords)
        self.assertIn('bluered', passwords)
        self.assertIn('RedBlue', passwords)

    def test_single_word_skips_combinations(self):
        """Test combination rules do not apply to a single word"""
        rules = {c.rule for c in RuleMutationGenerator(['red'], self.catalog)}
        self.assertNotIn('combine_next', rules)

    def test_deterministic(self):
        """Test repeated runs replay the same order"""
        generator = RuleMutationGenerator(['summer', 'winter'], self.catalog)
        first = [c.password for c in generator]
        second = [c.password for c in generator]
        other = [c.password for c in RuleMutationGenerator(['summer', 'winter'], build_rule_catalog(2024))]

        self.assertEqual(first, second)
        self.assertEqual(first, other)

    def test_limit_caps_generation(self):
        """Test the candidate cap marks the generator as capped"""
        generator = RuleMutationGenerator(['summer', 'winter'], self.catalog, limit=10)
        batch = generator.next_batch(100)

        self.assertEqual(len(batch), 10)
        self.assertTrue(generator.capped)
        self.assertTrue(generator.is_exhausted())
        self.assertEqual(generator.next_batch(100), [])


if __name__ == '__main__':
    unittest.main()
