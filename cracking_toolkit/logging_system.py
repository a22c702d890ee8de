"""
Logging infrastructure with an integrity-checked session audit trail
"""

import logging
import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, asdict
from cryptography.fernet import Fernet, InvalidToken
import threading


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
ROOT_LOGGER_NAME = 'cracking_toolkit'


def setup_logging(level: str = "INFO", log_directory: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger with console and optional file output.

    Args:
        level: Logging level name
        log_directory: Directory for ``cracklab.log``; console only when None

    Returns:
        logging.Logger: The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(getattr(h, '_cracklab_handler', False) == 'console' for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler._cracklab_handler = 'console'
        logger.addHandler(console_handler)

    if log_directory:
        directory = Path(log_directory)
        directory.mkdir(parents=True, exist_ok=True)
        log_file = str((directory / "cracklab.log").resolve())
        if not any(getattr(h, 'baseFilename', None) == log_file for h in logger.handlers):
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


@dataclass
class AuditEntry:
    """Structured audit entry with integrity verification"""
    timestamp: datetime
    session_id: str
    operation: str
    status: str
    message: str
    metadata: Dict[str, Any]
    hash_value: Optional[str] = None

    def __post_init__(self):
        if self.hash_value is None:
            self.hash_value = self._calculate_hash()

    def _calculate_hash(self) -> str:
        """Calculate SHA-256 hash of the entry"""
        data = {
            'timestamp': self.timestamp.isoformat(),
            'session_id': self.session_id,
            'operation': self.operation,
            'status': self.status,
            'message': self.message,
            'metadata': self.metadata
        }

        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()

    def verify_integrity(self) -> bool:
        return self.hash_value == self._calculate_hash()


class AuditLogger:
    """Append-only audit log of attack sessions, optionally Fernet encrypted"""

    def __init__(self, log_directory: str = "./logs", encrypt_logs: bool = True,
                 logger: Optional[logging.Logger] = None):
        self.log_directory = Path(log_directory)
        self.log_directory.mkdir(parents=True, exist_ok=True)

        self.encrypt_logs = encrypt_logs
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()

        if encrypt_logs:
            self._init_encryption()

        self.audit_log_file = self.log_directory / "audit.log"
        self.integrity_log_file = self.log_directory / "integrity.log"

    def _init_encryption(self):
        """Load or create the audit log encryption key"""
        key_file = self.log_directory / ".audit_key"

        if key_file.exists():
            with open(key_file, 'rb') as f:
                self.encryption_key = f.read()
        else:
            self.encryption_key = Fernet.generate_key()
            with open(key_file, 'wb') as f:
                f.write(self.encryption_key)
            key_file.chmod(0o600)

        self.cipher = Fernet(self.encryption_key)

    def record(self, session_id: str, operation: str, status: str, message: str,
               metadata: Optional[Dict[str, Any]] = None) -> AuditEntry:
        """Append an audit entry and return it"""
        entry = AuditEntry(
            timestamp=datetime.now(),
            session_id=session_id,
            operation=operation,
            status=status,
            message=message,
            metadata=metadata or {}
        )

        with self._lock:
            log_data = asdict(entry)
            log_data['timestamp'] = entry.timestamp.isoformat()
            json_line = json.dumps(log_data, sort_keys=True)

            if self.encrypt_logs:
                with open(self.audit_log_file, 'ab') as f:
                    f.write(self.cipher.encrypt(json_line.encode()) + b'\n')
            else:
                with open(self.audit_log_file, 'a') as f:
                    f.write(json_line + '\n')

            with open(self.integrity_log_file, 'a') as f:
                f.write(json.dumps({
                    'timestamp': log_data['timestamp'],
                    'session_id': session_id,
                    'hash': entry.hash_value
                }) + '\n')

        self.logger.info(f"[{operation}] {message} - Session: {session_id}")
        return entry

    def record_result(self, result) -> AuditEntry:
        """Audit a finished attack result"""
        return self.record(
            session_id=result.session_id,
            operation='ATTACK_SESSION',
            status=result.status.value,
            message=f"Session finished: {result.reason}",
            metadata={
                'algorithm': result.algorithm.value if result.algorithm else None,
                'method': result.method,
                'attempts': result.attempts,
                'time_ms': result.time_ms,
                'cracked': result.cracked,
                'password': result.password,
                'partial': result.partial,
                'phases': [phase['phase'] for phase in result.phase_dicts()],
            }
        )

    def read_entries(self, session_id: Optional[str] = None) -> List[AuditEntry]:
        """Read audit entries, optionally filtered by session id"""
        entries = []
        if not self.audit_log_file.exists():
            return entries

        with open(self.audit_log_file, 'rb') as f:
            for line_number, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    if self.encrypt_logs:
                        line = self.cipher.decrypt(line)
                    json_data = json.loads(line.decode())
                except (InvalidToken, ValueError) as e:
                    self.logger.error(f"Unreadable audit entry at line {line_number}: {e}")
                    continue

                json_data['timestamp'] = datetime.fromisoformat(json_data['timestamp'])
                entry = AuditEntry(**json_data)
                if session_id is None or entry.session_id == session_id:
                    entries.append(entry)

        return entries

    def verify_log_integrity(self, session_id: Optional[str] = None) -> Dict[str, Any]:
        """Verify integrity hashes of recorded entries"""
        results = {
            'total_entries': 0,
            'verified_entries': 0,
            'failed_entries': 0,
            'corrupted_entries': [],
            'session_id': session_id
        }

        for entry in self.read_entries(session_id):
            results['total_entries'] += 1
            if entry.verify_integrity():
                results['verified_entries'] += 1
            else:
                results['failed_entries'] += 1
                results['corrupted_entries'].append({
                    'timestamp': entry.timestamp.isoformat(),
                    'session_id': entry.session_id,
                    'expected_hash': entry._calculate_hash(),
                    'actual_hash': entry.hash_value
                })

        return results
