"""
Dictionary, hybrid and external-list candidate generators

Wordlist-driven strategies: verbatim dictionary entries, dictionary words
extended with catalog suffix rules and word pair combinations, and
candidate lists supplied by an outside guess source.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from ..interfaces import (
    CandidateGenerator, Candidate, GeneratorKind, InvalidAttackOptions
)
from .rule_mutation import RuleCatalog


COMBINATION_SEPARATORS = ('', '_', '-', '.', '@')
COMBINATION_JOINERS = ('1', '2', '12', '123', '0', '69', '99')
HYBRID_RULE_CATEGORIES = ('suffix', 'year', 'symbol')


class DictionaryGenerator(CandidateGenerator):
    """Yields wordlist entries verbatim in insertion order"""

    kind = GeneratorKind.DICTIONARY

    def __init__(self, words: Sequence[str], limit: Optional[int] = None,
                 logger: Optional[logging.Logger] = None):
        super().__init__(limit)
        self.words = tuple(words)
        self.logger = logger or logging.getLogger(__name__)

    @property
    def description(self) -> str:
        return f"{len(self.words)} wordlist entries"

    def _generate(self) -> Iterator[Candidate]:
        for word in self.words:
            yield Candidate(password=word, source=self.kind, pattern="dictionary", base_word=word)


class HybridGenerator(CandidateGenerator):
    """
    Dictionary words combined with rules.

    Two stages, in order:
    1. every word (as given, then capitalized) with each suffix, year and
       symbol rule from the catalog
    2. ordered pairs of distinct words joined by separators and digits
    """

    kind = GeneratorKind.HYBRID

    def __init__(self, words: Sequence[str], catalog: RuleCatalog,
                 limit: Optional[int] = None, logger: Optional[logging.Logger] = None):
        super().__init__(limit)
        self.words = tuple(words)
        self.catalog = catalog
        self.logger = logger or logging.getLogger(__name__)

    @property
    def description(self) -> str:
        return f"{len(self.words)} words with suffix rules and pair combinations"

    def _generate(self) -> Iterator[Candidate]:
        yield from self._generate_suffix_candidates()
        yield from self._generate_combinations()

    def _generate_suffix_candidates(self) -> Iterator[Candidate]:
        rules = self.catalog.by_category(*HYBRID_RULE_CATEGORIES)
        for word in self.words:
            variants = [word]
            if word.capitalize() != word:
                variants.append(word.capitalize())
            for variant in variants:
                for rule in rules:
                    mutated = rule.apply(variant)
                    if mutated is None:
                        continue
                    yield Candidate(
                        password=mutated,
                        source=self.kind,
                        pattern=f"hybrid:{rule.name}",
                        base_word=word,
                        rule=rule.name,
                    )

    def _generate_combinations(self) -> Iterator[Candidate]:
        for i, first in enumerate(self.words):
            for j, second in enumerate(self.words):
                if i == j:
                    continue
                w1, w2 = first.lower(), second.lower()
                joined = [w1 + sep + w2 for sep in COMBINATION_SEPARATORS]
                joined.append(w1.capitalize() + w2.capitalize())
                joined.extend(w1 + digits + w2 for digits in COMBINATION_JOINERS)
                for password in joined:
                    yield Candidate(
                        password=password,
                        source=self.kind,
                        pattern="hybrid:combination",
                        base_word=f"{first}+{second}",
                        rule="combination",
                    )


class ExternalListGenerator(CandidateGenerator):
    """
    Candidate list produced by an outside guess source.

    Entries are plain strings or mappings with a ``password`` key; any
    other keys (for example a ranking) are carried through untouched as
    metadata.
    """

    kind = GeneratorKind.EXTERNAL

    def __init__(self, entries: Sequence[Union[str, Dict[str, Any]]], source_name: str = "external",
                 limit: Optional[int] = None, logger: Optional[logging.Logger] = None):
        super().__init__(limit)
        self.source_name = source_name
        self.logger = logger or logging.getLogger(__name__)
        self.entries = self._normalize(entries)

    @staticmethod
    def _normalize(entries) -> List[Dict[str, Any]]:
        normalized = []
        for index, entry in enumerate(entries):
            if isinstance(entry, str):
                normalized.append({'password': entry})
            elif isinstance(entry, dict) and isinstance(entry.get('password'), str):
                normalized.append(dict(entry))
            else:
                raise InvalidAttackOptions(f"External candidate #{index} has no password string")
        return normalized

    @property
    def description(self) -> str:
        return f"{len(self.entries)} candidates from {self.source_name}"

    def _generate(self) -> Iterator[Candidate]:
        for entry in self.entries:
            metadata = {k: v for k, v in entry.items() if k not in ('password', 'pattern')}
            yield Candidate(
                password=entry['password'],
                source=self.kind,
                pattern=entry.get('pattern', self.source_name),
                metadata=metadata,
            )
