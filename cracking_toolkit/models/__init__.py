"""
Data models for attack sessions, profiles and progress events
"""

from .profile import TargetProfile
from .attack import AttackOptions, AttackPhase, AttackSession, AttackResult, hashes_per_second
from .progress import ProgressEvent

__all__ = [
    'TargetProfile',
    'AttackOptions',
    'AttackPhase',
    'AttackSession',
    'AttackResult',
    'hashes_per_second',
    'ProgressEvent',
]
