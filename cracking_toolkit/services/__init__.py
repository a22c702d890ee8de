"""
Engine services: orchestration, live streaming, reporting and strength
"""

from .result_reporter import ResultReporter
from .strength_predictor import (
    StrengthModel, StrengthPrediction, CrackTimeEstimate, Vulnerability, predict_strength,
    extract_features, estimate_crack_time, find_vulnerabilities, CLASS_NAMES, FEATURE_NAMES
)
from .attack_orchestrator import AttackOrchestrator, DEFAULT_PLAN
from .live_brute_force import (
    LiveBruteForceService, LiveBruteForceWorker, ProgressChannel, ProgressStream
)

__all__ = [
    'ResultReporter',
    'StrengthModel',
    'StrengthPrediction',
    'CrackTimeEstimate',
    'Vulnerability',
    'predict_strength',
    'extract_features',
    'estimate_crack_time',
    'find_vulnerabilities',
    'CLASS_NAMES',
    'FEATURE_NAMES',
    'AttackOrchestrator',
    'DEFAULT_PLAN',
    'LiveBruteForceService',
    'LiveBruteForceWorker',
    'ProgressChannel',
    'ProgressStream',
]
