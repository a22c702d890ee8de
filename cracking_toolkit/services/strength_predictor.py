"""
Password strength classifier (inference only)

A fixed 15 -> 32 -> 16 -> 4 feedforward network with ReLU hidden layers
and a softmax output. Weights are either the built-in calibrated set or
an ``.npz`` artifact, loaded once and kept read-only. Predictions also
carry a crack time estimate and the weaknesses found in the features.
"""

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from ..interfaces import (
    InputValidationError, InvalidModelArtifact, UnsupportedConfigurationError
)
from ..attack_engines.brute_force import keyspace_size, estimate_seconds
from ..data.wordlists import STRENGTH_DICTIONARY, KEYBOARD_ROWS


CLASS_NAMES = ('Very Weak', 'Weak', 'Moderate', 'Strong')

FEATURE_NAMES = (
    'length', 'has_lower', 'has_upper', 'has_digits', 'has_special',
    'diversity', 'digit_ratio', 'special_ratio', 'upper_ratio',
    'repeat_ratio', 'sequential_ratio', 'dictionary_match', 'keyboard_walk',
    'entropy', 'char_type_transitions',
)

LAYER_SIZES = (15, 32, 16, 4)

# Feature weights of the strength score the built-in network computes.
POSITIVE_WEIGHTS = {
    'length': 6.0, 'has_lower': 0.5, 'has_upper': 0.5, 'has_digits': 0.5, 'has_special': 0.5,
    'entropy': 1.5, 'diversity': 1.0, 'char_type_transitions': 1.0, 'special_ratio': 0.5,
}
PENALTY_WEIGHTS = {
    'dictionary_match': 2.0, 'keyboard_walk': 1.0, 'repeat_ratio': 1.5, 'sequential_ratio': 1.0,
}
# Score thresholds between classes fall at 2.5, 5.8 and 8.0
CLASS_OFFSETS = (0.0, 2.5, 8.3, 16.3)
OUTPUT_SHARPNESS = 1.5
SCORE_SHIFT = 6.0

# Offline guessing rate assumed by crack time estimates
ASSUMED_HASHES_PER_SECOND = 1e10

# (feature, threshold, multiplier): patterns a guesser tries long before brute force
PATTERN_ADJUSTMENTS = (
    ('dictionary_match', 0.0, 1e-4),
    ('keyboard_walk', 0.3, 1e-2),
    ('repeat_ratio', 0.5, 0.1),
    ('sequential_ratio', 0.5, 0.1),
)

_REPEAT_RUN = re.compile(r'(.)\1+')


def _char_type(char: str) -> int:
    if 'a' <= char <= 'z':
        return 0
    if 'A' <= char <= 'Z':
        return 1
    if char.isdigit():
        return 2
    return 3


def extract_features(password: str) -> np.ndarray:
    """
    Compute the 15-dimension feature vector, each value in [0, 1]

    Raises:
        InputValidationError: If the password is empty
    """
    if not password:
        raise InputValidationError("Password cannot be empty", "EMPTY_PASSWORD")

    length = len(password)
    lower = password.lower()

    digits = sum(1 for c in password if c.isdigit())
    uppers = sum(1 for c in password if 'A' <= c <= 'Z')
    specials = sum(1 for c in password if not c.isalnum())

    runs = [m.group(0) for m in _REPEAT_RUN.finditer(password)]
    max_run = max((len(run) for run in runs), default=0)

    pairs = length - 1
    sequential = sum(1 for a, b in zip(password, password[1:]) if abs(ord(a) - ord(b)) == 1)
    transitions = sum(1 for a, b in zip(password, password[1:]) if _char_type(a) != _char_type(b))

    walks = sum(
        1 for row in KEYBOARD_ROWS for i in range(len(row) - 2) if row[i:i + 3] in lower
    )

    entropy = -sum((n / length) * math.log2(n / length) for n in Counter(password).values())

    features = [
        min(length / 20, 1.0),
        1.0 if any('a' <= c <= 'z' for c in password) else 0.0,
        1.0 if uppers else 0.0,
        1.0 if digits else 0.0,
        1.0 if specials else 0.0,
        len(set(password)) / length,
        digits / length,
        specials / length,
        uppers / length,
        max_run / length,
        sequential / pairs if pairs > 0 else 0.0,
        1.0 if any(word in lower for word in STRENGTH_DICTIONARY) else 0.0,
        min(walks / 3, 1.0),
        min(entropy / 5, 1.0),
        transitions / pairs if pairs > 0 else 0.0,
    ]
    return np.array(features, dtype=np.float64)


def charset_size(password: str) -> int:
    """Size of the character classes a password draws from"""
    size = 0
    if any('a' <= c <= 'z' for c in password):
        size += 26
    if any('A' <= c <= 'Z' for c in password):
        size += 26
    if any(c.isdigit() for c in password):
        size += 10
    if any(not c.isalnum() for c in password):
        size += 33
    return size


def format_duration(seconds: float) -> str:
    if math.isinf(seconds):
        return "Effectively never"
    if seconds < 0.001:
        return "Instant"
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f} seconds"
    if seconds < 3600:
        return f"{seconds / 60:.1f} minutes"
    if seconds < 86400:
        return f"{seconds / 3600:.1f} hours"
    years = seconds / (86400 * 365)
    if years < 1:
        return f"{seconds / 86400:.1f} days"
    if years < 1e6:
        return f"{years:.1f} years"
    return f"{years / 1e6:.0f}M years"


def _finite(seconds: float) -> Optional[float]:
    return seconds if math.isfinite(seconds) else None


@dataclass(frozen=True)
class CrackTimeEstimate:
    """Worst-case offline guessing time"""
    charset_size: int
    combinations: int
    brute_force_seconds: float
    adjusted_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'charsetSize': self.charset_size,
            'combinations': self.combinations,
            'bruteForceSeconds': _finite(self.brute_force_seconds),
            'bruteForce': format_duration(self.brute_force_seconds),
            'adjustedSeconds': _finite(self.adjusted_seconds),
            'adjusted': format_duration(self.adjusted_seconds),
        }


@dataclass(frozen=True)
class Vulnerability:
    name: str
    severity: str
    detail: str

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.name, 'severity': self.severity, 'detail': self.detail}


def estimate_crack_time(password: str, features: Sequence[float],
                        hashes_per_second: float = ASSUMED_HASHES_PER_SECOND) -> CrackTimeEstimate:
    """
    Estimate how long guessing the password would take.

    The brute force time covers every string of the password's length over
    the character classes it uses. The adjusted time shrinks it for each
    pattern feature that lets a guesser find the password early.
    """
    size = charset_size(password)
    combinations = keyspace_size(size, len(password), min_length=len(password))
    seconds = estimate_seconds(combinations, hashes_per_second)

    named = dict(zip(FEATURE_NAMES, features))
    adjustment = 1.0
    for name, threshold, multiplier in PATTERN_ADJUSTMENTS:
        if named[name] > threshold:
            adjustment *= multiplier

    return CrackTimeEstimate(
        charset_size=size,
        combinations=combinations,
        brute_force_seconds=seconds,
        adjusted_seconds=seconds * adjustment,
    )


def find_vulnerabilities(password: str, features: Sequence[float]) -> Tuple[Vulnerability, ...]:
    """Weaknesses visible in the feature vector, most severe first"""
    named = dict(zip(FEATURE_NAMES, features))
    found = []

    if named['dictionary_match'] > 0:
        found.append(Vulnerability('Dictionary Word', 'Critical', 'Contains a common dictionary password'))
    if named['length'] < 0.4:
        found.append(Vulnerability('Short Length', 'High',
                                   f'Only {len(password)} characters, at least 12 recommended'))
    if named['keyboard_walk'] > 0.2:
        found.append(Vulnerability('Keyboard Walk', 'High', 'Contains a keyboard walk such as qwerty or asdf'))
    if named['diversity'] < 0.5:
        found.append(Vulnerability('Low Diversity', 'Medium', 'Too many repeated characters'))
    if named['repeat_ratio'] > 0.3:
        found.append(Vulnerability('Character Repetition', 'Medium', 'Contains long runs of one character'))
    if named['sequential_ratio'] > 0.3:
        found.append(Vulnerability('Sequential Pattern', 'Medium', 'Contains sequential characters'))
    if named['has_special'] == 0:
        found.append(Vulnerability('No Special Characters', 'Medium', 'Add symbols such as !@#$%^&*'))
    if named['has_upper'] == 0:
        found.append(Vulnerability('No Uppercase', 'Low', 'Mix in uppercase letters'))

    return tuple(found)


@dataclass(frozen=True)
class StrengthPrediction:
    predicted_class: str
    confidence: float
    class_probabilities: Tuple[float, ...]
    features: Tuple[float, ...]
    crack_time: CrackTimeEstimate
    vulnerabilities: Tuple[Vulnerability, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'predictedClass': self.predicted_class,
            'confidence': self.confidence,
            'classProbabilities': [
                {'class': name, 'probability': p} for name, p in zip(CLASS_NAMES, self.class_probabilities)
            ],
            'features': [
                {'name': name, 'value': v} for name, v in zip(FEATURE_NAMES, self.features)
            ],
            'crackTime': self.crack_time.to_dict(),
            'vulnerabilities': [v.to_dict() for v in self.vulnerabilities],
        }


class StrengthModel:
    """Immutable network weights and forward inference"""

    ARRAY_NAMES = ('W1', 'b1', 'W2', 'b2', 'W3', 'b3')

    def __init__(self, layers: Sequence[Tuple[np.ndarray, np.ndarray]]):
        if len(layers) != 3:
            raise InvalidModelArtifact(f"Expected 3 weight layers, got {len(layers)}")
        frozen = []
        for index, (weights, bias) in enumerate(layers):
            fan_in, fan_out = LAYER_SIZES[index], LAYER_SIZES[index + 1]
            weights = np.array(weights, dtype=np.float64)
            bias = np.array(bias, dtype=np.float64)
            if weights.shape != (fan_out, fan_in) or bias.shape != (fan_out,):
                raise InvalidModelArtifact(
                    f"Layer {index + 1} has shape {weights.shape}/{bias.shape}, "
                    f"expected {(fan_out, fan_in)}/{(fan_out,)}"
                )
            weights.setflags(write=False)
            bias.setflags(write=False)
            frozen.append((weights, bias))
        self.layers: Tuple[Tuple[np.ndarray, np.ndarray], ...] = tuple(frozen)

    @classmethod
    def default(cls) -> 'StrengthModel':
        """
        Built-in calibrated weights.

        The first hidden layer separates strength-adding and
        strength-reducing features, the second combines them into a single
        shifted score, and the output layer maps the score onto four
        ordered classes.
        """
        w1 = np.zeros((32, 15))
        for name, weight in POSITIVE_WEIGHTS.items():
            w1[0, FEATURE_NAMES.index(name)] = weight
        for name, weight in PENALTY_WEIGHTS.items():
            w1[1, FEATURE_NAMES.index(name)] = weight
        b1 = np.zeros(32)

        w2 = np.zeros((16, 32))
        w2[0, 0], w2[0, 1] = 1.0, -1.0
        b2 = np.zeros(16)
        b2[0] = SCORE_SHIFT

        w3 = np.zeros((4, 16))
        b3 = np.zeros(4)
        for k, offset in enumerate(CLASS_OFFSETS):
            w3[k, 0] = OUTPUT_SHARPNESS * k
            b3[k] = -OUTPUT_SHARPNESS * (SCORE_SHIFT * k + offset)

        return cls([(w1, b1), (w2, b2), (w3, b3)])

    @classmethod
    def load(cls, path: str) -> 'StrengthModel':
        """Load weights from an ``.npz`` archive with W1, b1, W2, b2, W3, b3"""
        artifact = Path(path)
        if not artifact.exists():
            raise UnsupportedConfigurationError(f"Strength weights not found: {path}", "MISSING_STRENGTH_MODEL")
        try:
            with np.load(artifact) as data:
                arrays = [data[name] for name in cls.ARRAY_NAMES]
        except (OSError, ValueError, KeyError) as e:
            raise InvalidModelArtifact(f"Invalid strength weights {path}: {e}")
        return cls([(arrays[0], arrays[1]), (arrays[2], arrays[3]), (arrays[4], arrays[5])])

    def save(self, path: str):
        arrays = {}
        for index, (weights, bias) in enumerate(self.layers, 1):
            arrays[f'W{index}'] = weights
            arrays[f'b{index}'] = bias
        np.savez(path, **arrays)

    def forward(self, features: np.ndarray) -> np.ndarray:
        """Class probabilities for one feature vector"""
        activation = np.asarray(features, dtype=np.float64)
        last = len(self.layers) - 1
        for index, (weights, bias) in enumerate(self.layers):
            activation = weights @ activation + bias
            if index < last:
                activation = np.maximum(activation, 0.0)
        shifted = np.exp(activation - np.max(activation))
        return shifted / shifted.sum()


def predict_strength(password: str, model: Optional[StrengthModel] = None,
                     logger: Optional[logging.Logger] = None) -> StrengthPrediction:
    """
    Classify password strength.

    Args:
        password: Password to score
        model: Network weights; the built-in set when omitted

    Returns:
        StrengthPrediction: Predicted class, confidence, per-class
        probabilities, the feature vector, a crack time estimate and
        the vulnerabilities found
    """
    model = model or StrengthModel.default()
    features = extract_features(password)
    probabilities = model.forward(features)
    best = int(np.argmax(probabilities))

    prediction = StrengthPrediction(
        predicted_class=CLASS_NAMES[best],
        confidence=float(probabilities[best]),
        class_probabilities=tuple(float(p) for p in probabilities),
        features=tuple(float(f) for f in features),
        crack_time=estimate_crack_time(password, features),
        vulnerabilities=find_vulnerabilities(password, features),
    )
    (logger or logging.getLogger(__name__)).debug(
        f"Strength prediction: {prediction.predicted_class} ({prediction.confidence:.2f})"
    )
    return prediction
