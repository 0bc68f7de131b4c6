# tbx/models/__init__.py

from tbx.models.account import (
    Account,
    AccountStatus,
    NewAccountResult,
)
from tbx.models.classification import (
    UNCATEGORIZED,
    ClassificationResult,
    Evidence,
    EvidenceMethod,
    serialize_evidence,
)
from tbx.models.config import (
    ClassificationConfig,
    KeywordRule,
    Thresholds,
    Weights,
)
from tbx.models.memory import MemoryMapping

__all__ = [
    # Account
    "Account",
    "AccountStatus",
    "NewAccountResult",
    # Classification
    "UNCATEGORIZED",
    "ClassificationResult",
    "Evidence",
    "EvidenceMethod",
    "serialize_evidence",
    # Config
    "ClassificationConfig",
    "KeywordRule",
    "Thresholds",
    "Weights",
    # Memory
    "MemoryMapping",
]
