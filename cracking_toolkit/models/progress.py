"""
Live brute force progress events
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..interfaces import ProgressEventType


@dataclass(frozen=True)
class ProgressEvent:
    """Transient snapshot published by the live brute force worker"""
    session_id: str
    type: ProgressEventType
    attempts_so_far: int
    elapsed_ms: float
    hashes_per_second: float
    candidate: Optional[str] = None
    current_length: Optional[int] = None
    reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.type.is_terminal

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'sessionId': self.session_id,
            'type': self.type.value,
            'attemptsSoFar': self.attempts_so_far,
            'elapsedMs': round(self.elapsed_ms, 3),
            'hashesPerSecond': round(self.hashes_per_second, 2),
        }
        if self.candidate is not None:
            data['candidate'] = self.candidate
        if self.current_length is not None:
            data['currentLength'] = self.current_length
        if self.reason is not None:
            data['reason'] = self.reason
        return data
