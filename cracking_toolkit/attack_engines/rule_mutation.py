"""
Mangling rule catalog and rule-mutation candidate generator

Every rule is a named, stateless transformation of a base word. The
catalog is built once per process (see ``resources.initialize_engine``)
and shared read-only between sessions.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from ..interfaces import (
    CandidateGenerator, Candidate, GeneratorKind, InvalidAttackOptions
)


LEET_BASIC = str.maketrans({'a': '4', 'e': '3', 'i': '1', 'o': '0', 's': '5'})
LEET_ADVANCED = str.maketrans({'a': '@', 'e': '3', 'i': '!', 'o': '0', 's': '$', 't': '7'})

# Transform signature: (word, partner) -> mutated word or None when the rule
# does not apply. ``partner`` is the next base word, used by combination rules.
RuleTransform = Callable[[str, Optional[str]], Optional[str]]


@dataclass(frozen=True)
class Rule:
    """Named deterministic transformation"""
    name: str
    description: str
    transform: RuleTransform
    category: str = "transform"

    def apply(self, word: str, partner: Optional[str] = None) -> Optional[str]:
        return self.transform(word, partner)


def _toggle_case(word: str) -> str:
    return ''.join(c.upper() if i % 2 == 0 else c.lower() for i, c in enumerate(word))


def _invert_capitalize(word: str) -> str:
    return word[:1].lower() + word[1:].upper()


def _truncate(length: int) -> RuleTransform:
    return lambda word, partner: word[:length] if len(word) > length else None


def _append(suffix: str) -> RuleTransform:
    return lambda word, partner: word + suffix


def _prepend(prefix: str) -> RuleTransform:
    return lambda word, partner: prefix + word


def _capitalize_append(suffix: str) -> RuleTransform:
    return lambda word, partner: word.capitalize() + suffix


def _combine(word: str, partner: Optional[str]) -> Optional[str]:
    return word + partner if partner else None


def _combine_capitalized(word: str, partner: Optional[str]) -> Optional[str]:
    return word.capitalize() + partner.capitalize() if partner else None


def _year_offsets() -> List[int]:
    # Current year first, then the past decade, then the next one
    return [0] + [-i for i in range(1, 11)] + list(range(1, 11))


class RuleCatalog:
    """Ordered, immutable collection of mangling rules"""

    def __init__(self, rules: Sequence[Rule], reference_year: int):
        names = [rule.name for rule in rules]
        if len(set(names)) != len(names):
            raise InvalidAttackOptions("Rule names must be unique")
        self._rules: Tuple[Rule, ...] = tuple(rules)
        self._by_name = {rule.name: rule for rule in self._rules}
        self.reference_year = reference_year

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Rule:
        return self._by_name[name]

    def names(self) -> List[str]:
        return [rule.name for rule in self._rules]

    def by_category(self, *categories: str) -> List[Rule]:
        return [rule for rule in self._rules if rule.category in categories]

    def to_list(self) -> List[dict]:
        return [
            {'name': rule.name, 'category': rule.category, 'description': rule.description}
            for rule in self._rules
        ]


def build_rule_catalog(reference_year: Optional[int] = None) -> RuleCatalog:
    """
    Build the default mangling rule catalog.

    Args:
        reference_year: Year the year-suffix rules are centred on
            (defaults to the current year)

    Returns:
        RuleCatalog: Catalog in application order
    """
    year = reference_year or datetime.now().year

    rules = [
        Rule('lowercase', 'All characters lowercase', lambda w, p: w.lower(), 'case'),
        Rule('uppercase', 'All characters uppercase', lambda w, p: w.upper(), 'case'),
        Rule('capitalize', 'First character uppercase, rest lowercase', lambda w, p: w.capitalize(), 'case'),
        Rule('invert_capitalize', 'First character lowercase, rest uppercase',
             lambda w, p: _invert_capitalize(w), 'case'),
        Rule('toggle_case', 'Alternate upper and lower case', lambda w, p: _toggle_case(w), 'case'),
        Rule('swap_case', 'Swap the case of every character', lambda w, p: w.swapcase(), 'case'),
        Rule('leet_basic', 'Leet substitution a>4 e>3 i>1 o>0 s>5',
             lambda w, p: w.lower().translate(LEET_BASIC), 'leet'),
        Rule('leet_advanced', 'Leet substitution a>@ e>3 i>! o>0 s>$ t>7',
             lambda w, p: w.lower().translate(LEET_ADVANCED), 'leet'),
        Rule('capitalize_leet', 'Capitalized basic leet substitution',
             lambda w, p: w.lower().translate(LEET_BASIC).capitalize(), 'leet'),
    ]

    for digits in ('1', '12', '123', '1234', '01', '69', '99', '007'):
        rules.append(Rule(f'append_{digits}', f"Append '{digits}'", _append(digits), 'suffix'))

    for offset in _year_offsets():
        suffix = str(year + offset)
        rules.append(Rule(f'append_year_{suffix}', f"Append year {suffix}", _append(suffix), 'year'))

    for digits in ('1', '123'):
        rules.append(Rule(f'prepend_{digits}', f"Prepend '{digits}'", _prepend(digits), 'prefix'))

    for symbol, label in (('!', 'bang'), ('@', 'at'), ('#', 'hash'), ('$', 'dollar'), ('!@#', 'bang_at_hash')):
        rules.append(Rule(f'append_{label}', f"Append '{symbol}'", _append(symbol), 'symbol'))
    for symbol, label in (('!', 'bang'), ('@', 'at')):
        rules.append(Rule(f'prepend_{label}', f"Prepend '{symbol}'", _prepend(symbol), 'symbol'))

    rules.extend([
        Rule('capitalize_append_1', "Capitalize and append '1'", _capitalize_append('1'), 'suffix'),
        Rule('capitalize_append_123', "Capitalize and append '123'", _capitalize_append('123'), 'suffix'),
        Rule('capitalize_append_bang', "Capitalize and append '!'", _capitalize_append('!'), 'symbol'),
        Rule('capitalize_append_year', f"Capitalize and append {year}", _capitalize_append(str(year)), 'year'),
        Rule('reverse', 'Reverse the word', lambda w, p: w[::-1], 'transform'),
        Rule('duplicate', 'Repeat the word twice', lambda w, p: w + w, 'transform'),
        Rule('duplicate_reverse', 'Word followed by its reverse', lambda w, p: w + w[::-1], 'transform'),
        Rule('reflect', 'Reverse followed by the word', lambda w, p: w[::-1] + w, 'transform'),
        Rule('drop_first', 'Remove the first character', lambda w, p: w[1:] if len(w) > 1 else None, 'transform'),
        Rule('drop_last', 'Remove the last character', lambda w, p: w[:-1] if len(w) > 1 else None, 'transform'),
    ])

    for length in range(4, 9):
        rules.append(Rule(f'truncate_{length}', f"Keep the first {length} characters",
                          _truncate(length), 'truncate'))

    rules.extend([
        Rule('combine_next', 'Concatenate with the next base word', _combine, 'combination'),
        Rule('combine_next_capitalized', 'Concatenate capitalized word pair', _combine_capitalized, 'combination'),
    ])

    return RuleCatalog(rules, year)


class RuleMutationGenerator(CandidateGenerator):
    """
    Applies every catalog rule to every base word.

    Order is word-major: all rules for the first word, then all rules for
    the second, and so on. Rules that do not apply to a word (e.g.
    truncating a word that is already short) are skipped.
    """

    kind = GeneratorKind.RULE_MUTATION

    def __init__(self, words: Sequence[str], catalog: RuleCatalog,
                 limit: Optional[int] = None, logger: Optional[logging.Logger] = None):
        super().__init__(limit)
        self.words = tuple(words)
        self.catalog = catalog
        self.logger = logger or logging.getLogger(__name__)

    @property
    def description(self) -> str:
        return f"{len(self.words)} base words x {len(self.catalog)} rules"

    def _generate(self) -> Iterator[Candidate]:
        word_count = len(self.words)
        for index, word in enumerate(self.words):
            partner = self.words[(index + 1) % word_count] if word_count > 1 else None
            for rule in self.catalog:
                mutated = rule.apply(word, partner)
                if mutated is None:
                    continue
                yield Candidate(
                    password=mutated,
                    source=self.kind,
                    pattern=f"{rule.name}({word})",
                    base_word=word,
                    rule=rule.name,
                )
