"""
Character n-gram Markov model and beam-search candidate generator

The model counts next-character transitions for every context of length
1..order over a lowercased training corpus, padded with start and end
tokens. Once built it is read-only and safe to share across sessions
without locking.
"""

import json
import logging
import math
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..interfaces import (
    CandidateGenerator, Candidate, GeneratorKind, InvalidAttackOptions,
    MissingMarkovModel, InvalidModelArtifact
)


START_TOKEN = '\x02'
END_TOKEN = '\x03'
UNSEEN_PROBABILITY = 1e-10
HUMAN_SCORE_THRESHOLD = -3.0

# (next_char, probability, log_probability), most probable first
Transition = Tuple[str, float, float]


class MarkovModel:
    """Immutable n-gram transition model"""

    def __init__(self, order: int, counts: Mapping[str, Mapping[str, int]], corpus_size: int = 0):
        if order < 1:
            raise InvalidAttackOptions(f"Markov order must be at least 1, got {order}")
        self.order = order
        self.corpus_size = corpus_size
        self._counts = MappingProxyType({ctx: MappingProxyType(dict(nxt)) for ctx, nxt in counts.items()})
        self._distributions = MappingProxyType({
            ctx: self._build_distribution(nxt) for ctx, nxt in self._counts.items()
        })

    @staticmethod
    def _build_distribution(next_counts: Mapping[str, int]) -> Tuple[Transition, ...]:
        total = sum(next_counts.values())
        ranked = sorted(next_counts.items(), key=lambda item: (-item[1], item[0]))
        return tuple((char, count / total, math.log(count / total)) for char, count in ranked)

    @classmethod
    def from_corpus(cls, corpus: Iterable[str], order: int = 3) -> 'MarkovModel':
        """
        Train a model from a password corpus.

        Duplicate corpus entries are counted once.
        """
        counts: Dict[str, Dict[str, int]] = {}
        seen = set()
        for password in corpus:
            if not password or password in seen:
                continue
            seen.add(password)
            padded = START_TOKEN * order + password.lower() + END_TOKEN
            for i in range(order, len(padded)):
                next_char = padded[i]
                for width in range(1, order + 1):
                    context = padded[i - width:i]
                    bucket = counts.setdefault(context, {})
                    bucket[next_char] = bucket.get(next_char, 0) + 1
        return cls(order, counts, corpus_size=len(seen))

    @classmethod
    def load(cls, path: str) -> 'MarkovModel':
        """
        Load a model artifact written by ``save``.

        Raises:
            MissingMarkovModel: If the artifact file does not exist
            InvalidModelArtifact: If the file cannot be parsed
        """
        artifact = Path(path)
        if not artifact.exists():
            raise MissingMarkovModel(f"Markov model artifact not found: {path}")
        try:
            with open(artifact, 'r', encoding='utf-8') as f:
                data = json.load(f)
            order = int(data['order'])
            counts = {
                str(ctx): {str(ch): int(n) for ch, n in nxt.items()}
                for ctx, nxt in data['counts'].items()
            }
            return cls(order, counts, corpus_size=int(data.get('corpus_size', 0)))
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise InvalidModelArtifact(f"Invalid Markov model artifact {path}: {e}")

    def save(self, path: str):
        artifact = Path(path)
        artifact.parent.mkdir(parents=True, exist_ok=True)
        data = {
            'order': self.order,
            'corpus_size': self.corpus_size,
            'counts': {ctx: dict(nxt) for ctx, nxt in self._counts.items()},
        }
        with open(artifact, 'w', encoding='utf-8') as f:
            json.dump(data, f, sort_keys=True)

    def distribution(self, context: str) -> Tuple[Transition, ...]:
        """Next-character distribution, backing off to shorter contexts"""
        context = context[-self.order:]
        while context:
            found = self._distributions.get(context)
            if found:
                return found
            context = context[1:]
        return ()

    def probability(self, context: str, next_char: str) -> float:
        """Exact-context transition probability (0.0 when unseen)"""
        next_counts = self._counts.get(context)
        if not next_counts:
            return 0.0
        return next_counts.get(next_char, 0) / sum(next_counts.values())

    def score(self, password: str) -> Dict[str, Any]:
        """
        Score how human-like a password is under the model.

        Returns:
            Dict with logProbability, normalizedScore (per transition),
            perplexity and isLikelyHumanPassword
        """
        padded = START_TOKEN * self.order + password.lower() + END_TOKEN
        log_probability = 0.0
        transitions = 0
        for i in range(self.order, len(padded)):
            probability = self.probability(padded[i - self.order:i], padded[i])
            log_probability += math.log(probability if probability > 0 else UNSEEN_PROBABILITY)
            transitions += 1

        normalized = log_probability / transitions
        return {
            'logProbability': log_probability,
            'normalizedScore': normalized,
            'perplexity': math.exp(-normalized),
            'isLikelyHumanPassword': normalized > HUMAN_SCORE_THRESHOLD,
        }

    def info(self) -> Dict[str, Any]:
        vocabulary = set()
        total = 0
        full_contexts = 0
        for context, next_counts in self._counts.items():
            if len(context) == self.order:
                full_contexts += 1
                total += sum(next_counts.values())
            vocabulary.update(ch for ch in next_counts if ch != END_TOKEN)
        return {
            'order': self.order,
            'contexts': full_contexts,
            'vocabularySize': len(vocabulary),
            'totalTransitions': total,
            'corpusSize': self.corpus_size,
        }


class MarkovGenerator(CandidateGenerator):
    """
    Beam search over a Markov model.

    At each step every beam is expanded by every possible next character,
    then the expansions are pruned back to the ``beam_width`` most likely.
    A beam that can emit the end token yields a finished candidate when
    its length is within ``[min_length, max_length]``. Finished candidates
    are returned most likely first.
    """

    kind = GeneratorKind.MARKOV

    def __init__(self, model: MarkovModel, beam_width: int = 200, max_candidates: int = 5000,
                 min_length: int = 3, max_length: int = 16, limit: Optional[int] = None,
                 logger: Optional[logging.Logger] = None):
        super().__init__(limit)
        if model is None:
            raise MissingMarkovModel("Markov phase requires a loaded model")
        if beam_width < 1 or max_candidates < 1:
            raise InvalidAttackOptions("Beam width and candidate cap must be positive")
        if not 1 <= min_length <= max_length:
            raise InvalidAttackOptions(f"Invalid Markov length range {min_length}..{max_length}")
        self.model = model
        self.beam_width = min(beam_width, max_candidates)
        self.max_candidates = max_candidates
        self.min_length = min_length
        self.max_length = max_length
        self.logger = logger or logging.getLogger(__name__)

    @property
    def description(self) -> str:
        return f"beam search (order {self.model.order}, width {self.beam_width})"

    def beam_search(self) -> List[Tuple[str, float]]:
        """Run the search and return (password, log_probability) pairs"""
        finished: List[Tuple[str, float]] = []
        beams: List[Tuple[str, float]] = [('', 0.0)]
        start = START_TOKEN * self.model.order

        for _ in range(self.max_length + 1):
            expansions: List[Tuple[str, float]] = []
            for text, log_prob in beams:
                for char, _, char_log_prob in self.model.distribution(start + text):
                    score = log_prob + char_log_prob
                    if char == END_TOKEN:
                        if self.min_length <= len(text) <= self.max_length:
                            finished.append((text, score))
                    elif len(text) < self.max_length:
                        expansions.append((text + char, score))

            if not expansions:
                break
            expansions.sort(key=lambda beam: (-beam[1], beam[0]))
            beams = expansions[:self.beam_width]

        finished.sort(key=lambda item: (-item[1], item[0]))
        return finished[:self.max_candidates]

    def _generate(self) -> Iterator[Candidate]:
        results = self.beam_search()
        self.logger.debug(f"Markov beam search produced {len(results)} candidates")
        for rank, (password, log_prob) in enumerate(results, 1):
            yield Candidate(
                password=password,
                source=self.kind,
                pattern="markov",
                metadata={'logProbability': log_prob, 'rank': rank},
            )
