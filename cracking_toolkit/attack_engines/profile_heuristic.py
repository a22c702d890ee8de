"""
Profile-heuristic candidate generator

Builds guesses from personal details the way people tend to build their
own passwords: name and pet fragments, dates of birth, phone digits,
leet substitutions, fragment pairs, common suffixes and case changes.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..interfaces import CandidateGenerator, Candidate, GeneratorKind
from ..models.profile import TargetProfile


LEET_MAP = str.maketrans({'a': '@', 'e': '3', 'i': '1', 'o': '0', 's': '$', 't': '7', 'l': '1', 'g': '9', 'b': '8'})
LEET_MAP_HEAVY = str.maketrans({'a': '4', 'e': '3', 'i': '!', 'o': '0', 's': '5', 't': '7', 'l': '1',
                                'g': '9', 'b': '8', 'z': '2'})
COMBINATION_SEPARATORS = ('', '@', '_', '.', '#')
PROFILE_SUFFIXES = ('!', '123', '1', '12', '1234', '@', '#', '!!', '@123', '!@#', '007', '99', '01')

DATE_SPLIT = re.compile(r'[-/. ]+')


@dataclass(frozen=True)
class SubPhase:
    name: str
    description: str


SUB_PHASES = (
    SubPhase('Raw Fragments', 'Name, pet, company, date of birth and phone fragments'),
    SubPhase('Leet Substitution', 'Leet-speak variants of word fragments'),
    SubPhase('Fragment Combinations', 'Pairs of distinct fragments joined directly or by a separator'),
    SubPhase('Common Suffixes', "Word fragments followed by common suffixes such as '!', '123' and the current year"),
    SubPhase('Case Variants', 'Capitalized and uppercase forms of word fragments and combinations'),
)


def _expand_year(year: str) -> str:
    if len(year) == 2:
        return ('19' if int(year) > 50 else '20') + year
    return year


def date_fragments(dob: str) -> List[str]:
    """
    Decompose a date of birth into the digit groups people reuse.

    Accepts ``YYYY-MM-DD``, ``DD/MM/YYYY``, ``DD-MM-YYYY``, ``MM/DD/YYYY``,
    ``DDMMYYYY``/``YYYYMMDD`` and a bare year. Two-digit years above 50
    map to 19xx, otherwise 20xx. Unparseable input contributes only its
    digits.
    """
    digits = re.sub(r'[^0-9]', '', dob)
    if not digits:
        return []
    fragments = [digits]

    parts = [p for p in DATE_SPLIT.split(dob.strip()) if p]
    year = month = day = None
    if len(parts) >= 3 and all(p.isdigit() for p in parts[:3]):
        p1, p2, p3 = parts[:3]
        if len(p1) == 4:
            year, month, day = p1, p2, p3
        elif int(p1) > 12:
            day, month, year = p1, p2, _expand_year(p3)
        elif int(p2) > 12:
            month, day, year = p1, p2, _expand_year(p3)
        else:
            day, month, year = p1, p2, _expand_year(p3)
    elif len(digits) == 8:
        if digits[:2] in ('19', '20') and 1 <= int(digits[4:6]) <= 12:
            year, month, day = digits[:4], digits[4:6], digits[6:]
        else:
            day, month, year = digits[:2], digits[2:4], digits[4:]
    elif len(digits) == 4 and digits[:2] in ('19', '20'):
        return [digits, digits[2:]]

    if year is None:
        return fragments

    day, month = day.zfill(2), month.zfill(2)
    short_year = year[-2:]
    fragments.extend([
        year, short_year, day, month,
        day + month, month + day,
        day + month + year, month + day + year, year + month + day,
        day + month + short_year, month + day + short_year,
        month + year, year + month,
    ])
    return fragments


def _unique(values) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def extract_fragments(profile: TargetProfile) -> Tuple[List[str], List[str]]:
    """
    Split a profile into word fragments and numeric fragments.

    Returns:
        Tuple[List[str], List[str]]: (word fragments, number fragments),
        each de-duplicated in first-seen order
    """
    words = []

    parts = profile.name.strip().lower().split()
    words.append(''.join(parts))
    for part in parts:
        words.append(part)
        if len(part) > 3:
            words.extend([part[:3], part[:4], part[:5]])
    if len(parts) > 1:
        words.append(''.join(p[0] for p in parts))

    if profile.pet_name and profile.pet_name.strip():
        pet = profile.pet_name.strip().lower()
        words.append(pet.replace(' ', ''))
        if len(pet) > 3:
            words.extend([pet[:3], pet[:4]])

    if profile.company and profile.company.strip():
        company_words = profile.company.strip().lower().split()
        words.append(''.join(company_words))
        words.extend(company_words)
        if len(company_words) > 1:
            words.append(''.join(w[0] for w in company_words))

    numbers = []
    if profile.dob and profile.dob.strip():
        numbers.extend(date_fragments(profile.dob))
    if profile.phone:
        phone_digits = re.sub(r'[^0-9]', '', profile.phone)
        if len(phone_digits) >= 4:
            numbers.extend([phone_digits[-4:], phone_digits[-6:]])
        numbers.append(phone_digits)

    return _unique(words), _unique(numbers)


def leet_variants(word: str) -> List[str]:
    """Light, heavy and first-vowel-only leet forms that differ from ``word``"""
    variants = [word.translate(LEET_MAP), word.translate(LEET_MAP_HEAVY)]
    match = re.search(r'[aeiou]', word)
    if match:
        vowel = match.group(0)
        variants.append(word[:match.start()] + vowel.translate(LEET_MAP) + word[match.end():])
    return [v for v in _unique(variants) if v != word]


class ProfileHeuristicGenerator(CandidateGenerator):
    """
    Generates profile-based guesses through five ordered sub-phases.

    Candidates are de-duplicated across sub-phases (first occurrence
    wins) and filtered to ``[min_length, max_length]``. Per sub-phase
    counts are available from ``sub_phase_summary`` once generation has
    run.
    """

    kind = GeneratorKind.PROFILE_HEURISTIC

    def __init__(self, profile: TargetProfile, reference_year: Optional[int] = None,
                 min_length: int = 4, max_length: int = 30, limit: Optional[int] = None,
                 logger: Optional[logging.Logger] = None):
        profile.validate()
        super().__init__(limit)
        self.profile = profile
        self.reference_year = reference_year or datetime.now().year
        self.min_length = min_length
        self.max_length = max_length
        self.logger = logger or logging.getLogger(__name__)
        self.word_fragments, self.number_fragments = extract_fragments(profile)
        self._counts: Dict[str, int] = {}

    @property
    def description(self) -> str:
        return f"profile guesses from {len(self.word_fragments) + len(self.number_fragments)} fragments"

    def reset(self):
        super().reset()
        self._counts = {}

    def sub_phase_summary(self) -> List[Dict[str, object]]:
        return [
            {'name': sp.name, 'description': sp.description, 'count': self._counts.get(sp.name, 0)}
            for sp in SUB_PHASES
        ]

    def _sub_phase_sources(self) -> Sequence[Tuple[SubPhase, Iterator[Tuple[str, str]]]]:
        return (
            (SUB_PHASES[0], self._raw_fragments()),
            (SUB_PHASES[1], self._leet_fragments()),
            (SUB_PHASES[2], self._combinations()),
            (SUB_PHASES[3], self._suffixed()),
            (SUB_PHASES[4], self._case_variants()),
        )

    def _generate(self) -> Iterator[Candidate]:
        self._counts = {sp.name: 0 for sp in SUB_PHASES}
        seen = set()

        for sub_phase, source in self._sub_phase_sources():
            for password, pattern in source:
                if password in seen or not self.min_length <= len(password) <= self.max_length:
                    continue
                seen.add(password)
                self._counts[sub_phase.name] += 1
                yield Candidate(
                    password=password,
                    source=self.kind,
                    pattern=pattern,
                    metadata={'subPhase': sub_phase.name},
                )
            self.logger.debug(f"Profile sub-phase '{sub_phase.name}': {self._counts[sub_phase.name]} candidates")

    def _raw_fragments(self) -> Iterator[Tuple[str, str]]:
        for fragment in self.word_fragments:
            yield fragment, "fragment"
        for fragment in self.number_fragments:
            yield fragment, "number fragment"

    def _leet_fragments(self) -> Iterator[Tuple[str, str]]:
        for fragment in self.word_fragments:
            for variant in leet_variants(fragment):
                yield variant, f"leet({fragment})"

    def _pairs(self) -> Iterator[Tuple[str, str]]:
        fragments = self.word_fragments + self.number_fragments
        for first in self.word_fragments:
            for second in fragments:
                if first != second:
                    yield first, second
        for first in self.number_fragments:
            for second in self.word_fragments:
                yield first, second

    def _combinations(self) -> Iterator[Tuple[str, str]]:
        for first, second in self._pairs():
            for separator in COMBINATION_SEPARATORS:
                yield first + separator + second, f"{first}+{second}"

    def _suffixed(self) -> Iterator[Tuple[str, str]]:
        suffixes = PROFILE_SUFFIXES[:2] + (str(self.reference_year),) + PROFILE_SUFFIXES[2:]
        for fragment in self.word_fragments:
            for suffix in suffixes:
                yield fragment + suffix, f"{fragment}+suffix"

    def _case_variants(self) -> Iterator[Tuple[str, str]]:
        for fragment in self.word_fragments:
            yield fragment.capitalize(), f"capitalize({fragment})"
            yield fragment.upper(), f"upper({fragment})"
        for first, second in self._pairs():
            yield first.capitalize() + second.capitalize(), f"capitalize({first}+{second})"
        year = str(self.reference_year)
        for fragment in self.word_fragments:
            for suffix in ('!', '123', year):
                yield fragment.capitalize() + suffix, f"capitalize({fragment})+suffix"
