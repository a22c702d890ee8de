"""
Result Reporter for attack sessions

Turns a terminal AttackSession into the canonical AttackResult, records
it in the audit log when one is configured, and renders JSON and plain
text forms.
"""

import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..interfaces import InvalidSessionTransition
from ..models.attack import AttackResult, AttackSession
from ..logging_system import AuditLogger


class ResultReporter:
    """Builds and publishes attack results"""

    def __init__(self, audit_logger: Optional[AuditLogger] = None,
                 logger: Optional[logging.Logger] = None):
        self.audit_logger = audit_logger
        self.logger = logger or logging.getLogger(__name__)

    def build(self, session: AttackSession, partial: bool = False) -> AttackResult:
        """
        Build the result for a finished session

        Args:
            session: Session in a terminal status
            partial: True when the session was aborted by a generator fault

        Returns:
            AttackResult: Immutable result snapshot

        Raises:
            InvalidSessionTransition: If the session is still running
        """
        if not session.status.is_terminal:
            raise InvalidSessionTransition(f"Session {session.id} has not finished ({session.status.value})")

        winner = session.found_candidate
        winning_phase = next((phase for phase in session.phases if phase.success), None)

        return AttackResult(
            session_id=session.id,
            hash_value=session.hash_target.raw_hash,
            algorithm=session.algorithm,
            status=session.status,
            reason="aborted" if partial else (session.reason or session.status.value),
            cracked=winner is not None,
            password=winner.password if winner else None,
            method=winning_phase.name if winning_phase else None,
            attempts=session.total_attempts,
            time_ms=session.total_elapsed_ms,
            hashes_per_second=session.hashes_per_second,
            phases=tuple(session.phases),
            partial=partial,
            target=session.hash_target.to_dict(),
            timestamp=session.finished_at or datetime.now(),
        )

    def publish(self, session: AttackSession, partial: bool = False) -> AttackResult:
        """Build the result, attach it to the session and audit it"""
        result = self.build(session, partial=partial)
        session.result = result

        if result.cracked:
            self.logger.info(
                f"Session {result.session_id} cracked via {result.method} after "
                f"{result.attempts} attempts ({result.time_ms:.0f} ms)"
            )
        else:
            self.logger.info(
                f"Session {result.session_id} ended {result.status.value} ({result.reason}) after "
                f"{result.attempts} attempts"
            )

        if self.audit_logger is not None:
            self.audit_logger.record_result(result)
        return result

    @staticmethod
    def to_json(result: AttackResult, indent: Optional[int] = 2) -> str:
        return json.dumps(result.to_dict(), indent=indent)

    def export_json(self, result: AttackResult, output_path: str) -> str:
        """
        Write the result to a JSON file

        Returns:
            str: SHA-256 of the written file for later verification
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            f.write(self.to_json(result))

        with open(path, 'rb') as f:
            file_hash = hashlib.sha256(f.read()).hexdigest()
        self.logger.info(f"Result for session {result.session_id} exported to {path}")
        return file_hash

    @staticmethod
    def render_text(result: AttackResult) -> str:
        """Human readable summary"""
        lines = [
            f"Session:   {result.session_id}",
            f"Target:    {result.hash_value} ({result.algorithm.value}, {result.target.get('strength', 'unrated')})",
            f"Status:    {result.status.value} ({result.reason})",
        ]
        if result.cracked:
            lines.append(f"Password:  {result.password}")
            lines.append(f"Method:    {result.method}")
        lines.append(
            f"Attempts:  {result.attempts} in {result.time_ms / 1000:.2f}s "
            f"({result.hashes_per_second:,.0f} H/s)"
        )
        lines.append("Phases:")
        for phase in result.phases:
            marker = "+" if phase.success else "-"
            detail = f" cracked with '{phase.found_candidate.password}'" if phase.found_candidate else ""
            capped = " [cap reached]" if phase.capped else ""
            lines.append(
                f"  {marker} {phase.ordinal}. {phase.name}: {phase.attempts_attempted} attempts, "
                f"{phase.elapsed_ms:.1f} ms{capped}{detail}"
            )
        if result.partial:
            lines.append("Result is partial: the session was aborted by a generator fault")
        return "\n".join(lines)
