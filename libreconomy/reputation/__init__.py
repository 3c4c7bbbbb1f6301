"""Reputation and trust: Beta beliefs, transaction log, update and decay systems."""

from .events import (
    HearsayReport,
    LogEntry,
    Outcome,
    TransactionArchive,
    TransactionEvent,
    TransactionLog,
)
from .systems import (
    DecayMode,
    ReputationDecayConfig,
    ReputationDecaySystem,
    ReputationUpdateConfig,
    ReputationUpdateSystem,
)
from .view import (
    NEUTRAL_ALPHA,
    NEUTRAL_BETA,
    NEUTRAL_SCORE,
    Provenance,
    ReputationBook,
    ReputationKey,
    ReputationView,
)

__all__ = [
    "HearsayReport",
    "LogEntry",
    "Outcome",
    "TransactionArchive",
    "TransactionEvent",
    "TransactionLog",
    "DecayMode",
    "ReputationDecayConfig",
    "ReputationDecaySystem",
    "ReputationUpdateConfig",
    "ReputationUpdateSystem",
    "NEUTRAL_ALPHA",
    "NEUTRAL_BETA",
    "NEUTRAL_SCORE",
    "Provenance",
    "ReputationBook",
    "ReputationKey",
    "ReputationView",
]
