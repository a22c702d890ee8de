"""
Candidate generators and hash identification
"""

from .hash_cracking import (
    HashTarget, HashIdentification, HashMatcher, identify_hash, digest, parse_algorithm
)
from .dictionary_attack import DictionaryGenerator, HybridGenerator, ExternalListGenerator
from .rule_mutation import Rule, RuleCatalog, RuleMutationGenerator, build_rule_catalog
from .markov_chain import MarkovModel, MarkovGenerator
from .profile_heuristic import ProfileHeuristicGenerator
from .brute_force import (
    IncrementalBruteForceGenerator, resolve_charset, keyspace_size, estimate_seconds
)
from .lookup_table import LookupTable, LookupTableGenerator, expand_dictionary

__all__ = [
    'HashTarget',
    'HashIdentification',
    'HashMatcher',
    'identify_hash',
    'digest',
    'parse_algorithm',
    'DictionaryGenerator',
    'HybridGenerator',
    'ExternalListGenerator',
    'Rule',
    'RuleCatalog',
    'RuleMutationGenerator',
    'build_rule_catalog',
    'MarkovModel',
    'MarkovGenerator',
    'ProfileHeuristicGenerator',
    'IncrementalBruteForceGenerator',
    'resolve_charset',
    'keyspace_size',
    'estimate_seconds',
    'LookupTable',
    'LookupTableGenerator',
    'expand_dictionary',
]
