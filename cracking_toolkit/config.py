"""
Configuration management for attack, live streaming and logging settings
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict, field


CHARSETS = {
    'digits': '0123456789',
    'lowercase': 'abcdefghijklmnopqrstuvwxyz',
    'alphanumeric': 'abcdefghijklmnopqrstuvwxyz0123456789',
    'mixed': 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789',
    'full': 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%^&*',
}

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class AttackSettings:
    """Synchronous attack and generator settings"""
    brute_force_max_length: int = 4
    brute_force_charset: str = "alphanumeric"
    rule_phase_cap: int = 250000
    hybrid_phase_cap: int = 100000
    markov_order: int = 3
    markov_beam_width: int = 200
    markov_max_candidates: int = 5000
    markov_min_length: int = 3
    markov_max_length: int = 16
    profile_min_length: int = 4
    profile_max_length: int = 30
    time_budget_seconds: Optional[float] = None
    deduplicate_across_phases: bool = False
    batch_size: int = 1000
    wordlist_path: Optional[str] = None
    markov_model_path: Optional[str] = None
    markov_training_path: Optional[str] = None
    strength_weights_path: Optional[str] = None
    reference_year: Optional[int] = None
    lookup_table_words: int = 5000


@dataclass
class LiveSettings:
    """Live brute force streaming settings"""
    max_length: int = 4
    charset: str = "alphanumeric"
    progress_every_attempts: int = 10000
    progress_interval_seconds: float = 0.25
    channel_capacity: int = 64
    cancel_grace_seconds: float = 2.0


@dataclass
class LoggingSettings:
    """Logging and audit trail settings"""
    log_level: str = "INFO"
    log_directory: Optional[str] = None
    audit_enabled: bool = False
    encrypt_audit_log: bool = True


@dataclass
class CrackLabSettings:
    attack: AttackSettings = field(default_factory=AttackSettings)
    live: LiveSettings = field(default_factory=LiveSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConfigManager:
    """Configuration manager for the cracking engine"""

    def __init__(self, config_path: str = "./config/cracklab_config.json",
                 logger: Optional[logging.Logger] = None):
        self.config_path = Path(config_path)
        self.logger = logger or logging.getLogger(__name__)
        self.settings = CrackLabSettings()

        self.load_config()

    def load_config(self) -> bool:
        """Load configuration from file, keeping defaults for missing sections"""
        if not self.config_path.exists():
            return False

        try:
            with open(self.config_path, 'r') as f:
                config_data = json.load(f)

            if 'attack' in config_data:
                self.settings.attack = AttackSettings(**config_data['attack'])
            if 'live' in config_data:
                self.settings.live = LiveSettings(**config_data['live'])
            if 'logging' in config_data:
                self.settings.logging = LoggingSettings(**config_data['logging'])

            return True
        except (OSError, ValueError, TypeError) as e:
            self.logger.error(f"Error loading config {self.config_path}: {e}")
            return False

    def save_config(self) -> bool:
        """Save configuration to file"""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as f:
                json.dump(self.settings.to_dict(), f, indent=2)
            return True
        except OSError as e:
            self.logger.error(f"Error saving config {self.config_path}: {e}")
            return False

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)"""
        problems = []
        attack = self.settings.attack
        live = self.settings.live

        if attack.brute_force_charset not in CHARSETS:
            problems.append(f"attack.brute_force_charset: unknown charset '{attack.brute_force_charset}'")
        if live.charset not in CHARSETS:
            problems.append(f"live.charset: unknown charset '{live.charset}'")
        if attack.brute_force_max_length < 1 or live.max_length < 1:
            problems.append("brute force max length must be at least 1")
        if attack.markov_order < 1:
            problems.append("attack.markov_order must be at least 1")
        if attack.markov_beam_width < 1:
            problems.append("attack.markov_beam_width must be at least 1")
        if not 1 <= attack.markov_min_length <= attack.markov_max_length:
            problems.append("attack.markov_min_length must be between 1 and markov_max_length")
        if not 1 <= attack.profile_min_length <= attack.profile_max_length:
            problems.append("attack.profile_min_length must be between 1 and profile_max_length")
        if attack.time_budget_seconds is not None and attack.time_budget_seconds <= 0:
            problems.append("attack.time_budget_seconds must be positive")
        if attack.batch_size < 1:
            problems.append("attack.batch_size must be at least 1")
        if attack.lookup_table_words < 0:
            problems.append("attack.lookup_table_words cannot be negative")
        if live.channel_capacity < 2:
            problems.append("live.channel_capacity must be at least 2")
        if live.progress_every_attempts < 1 or live.progress_interval_seconds <= 0:
            problems.append("live progress cadence must be positive")
        if self.settings.logging.log_level.upper() not in LOG_LEVELS:
            problems.append(f"logging.log_level: unknown level '{self.settings.logging.log_level}'")

        for name in ('wordlist_path', 'markov_model_path', 'markov_training_path', 'strength_weights_path'):
            path = getattr(attack, name)
            if path and not Path(path).exists():
                problems.append(f"attack.{name}: file not found: {path}")

        return problems

    def update_setting(self, category: str, setting: str, value: Any) -> bool:
        """Update a specific setting and persist the configuration"""
        section = getattr(self.settings, category, None)
        if section is None or not hasattr(section, setting):
            return False
        setattr(section, setting, value)
        return self.save_config()
