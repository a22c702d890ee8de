"""
Process-wide immutable engine state

``initialize_engine`` builds the rule catalog, Markov model, strength
model, digest lookup table and default wordlist exactly once and returns
them in a single handle that is passed to every orchestrator and live
worker.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from .config import CrackLabSettings
from .interfaces import HashAlgorithm
from .attack_engines.rule_mutation import RuleCatalog, build_rule_catalog
from .attack_engines.markov_chain import MarkovModel
from .attack_engines.lookup_table import LookupTable
from .data.wordlists import COMMON_PASSWORDS, MARKOV_TRAINING_CORPUS
from .data.loader import load_wordlist
from .logging_system import AuditLogger
from .services.strength_predictor import StrengthModel


@dataclass(frozen=True)
class EngineResources:
    """Shared read-only state for all sessions"""
    settings: CrackLabSettings
    rule_catalog: RuleCatalog
    markov_model: MarkovModel
    strength_model: StrengthModel
    wordlist: Tuple[str, ...]
    lookup_table: LookupTable
    reference_year: int
    audit_logger: Optional[AuditLogger] = None


def initialize_engine(settings: Optional[CrackLabSettings] = None,
                      logger: Optional[logging.Logger] = None) -> EngineResources:
    """
    Build the shared engine state.

    Args:
        settings: Engine settings (defaults when omitted)
        logger: Logger for load diagnostics

    Returns:
        EngineResources: Immutable handle shared by every session

    Raises:
        MissingMarkovModel: Configured Markov artifact does not exist
        UnsupportedConfigurationError: A configured file cannot be loaded
    """
    logger = logger or logging.getLogger(__name__)
    settings = settings or CrackLabSettings()
    attack = settings.attack
    year = attack.reference_year or datetime.now().year

    catalog = build_rule_catalog(year)

    if attack.markov_model_path:
        markov_model = MarkovModel.load(attack.markov_model_path)
        logger.info(f"Loaded Markov model artifact {attack.markov_model_path}")
    else:
        corpus = list(MARKOV_TRAINING_CORPUS)
        if attack.markov_training_path:
            corpus.extend(load_wordlist(attack.markov_training_path))
        markov_model = MarkovModel.from_corpus(corpus, attack.markov_order)

    if attack.wordlist_path:
        wordlist = tuple(load_wordlist(attack.wordlist_path))
    else:
        wordlist = COMMON_PASSWORDS

    lookup_table = LookupTable.from_wordlist(
        wordlist[:attack.lookup_table_words], years=(year - 2, year - 1, year), logger=logger
    )

    if attack.strength_weights_path:
        strength_model = StrengthModel.load(attack.strength_weights_path)
    else:
        strength_model = StrengthModel.default()

    audit_logger = None
    log_settings = settings.logging
    if log_settings.audit_enabled and log_settings.log_directory:
        audit_logger = AuditLogger(log_settings.log_directory, encrypt_logs=log_settings.encrypt_audit_log)

    info = markov_model.info()
    logger.info(
        f"Engine initialized: {len(catalog)} rules, {len(wordlist)} wordlist entries, "
        f"Markov order {info['order']} with {info['contexts']} contexts, "
        f"{lookup_table.size(HashAlgorithm.MD5)} lookup digests per algorithm"
    )

    return EngineResources(
        settings=settings,
        rule_catalog=catalog,
        markov_model=markov_model,
        strength_model=strength_model,
        wordlist=wordlist,
        lookup_table=lookup_table,
        reference_year=year,
        audit_logger=audit_logger,
    )
