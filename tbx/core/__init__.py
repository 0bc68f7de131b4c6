# tbx/core/__init__.py

from tbx.core.classification import ClassificationEngine
from tbx.core.config_loader import load_classification_config
from tbx.core.memory import MemoryStore, match_exact
from tbx.core.normalizers import normalize_name
from tbx.core.renumbering import DEFAULT_RENUMBER_THRESHOLD, RenumberDetector
from tbx.core.similarity import similarity
from tbx.core.trial_balance import (
    TrialBalanceError,
    classification_results_to_csv,
    parse_trial_balance,
    read_trial_balance,
    write_classification_results,
    write_new_accounts,
)

__all__ = [
    "ClassificationEngine",
    "load_classification_config",
    "MemoryStore",
    "match_exact",
    "normalize_name",
    "DEFAULT_RENUMBER_THRESHOLD",
    "RenumberDetector",
    "similarity",
    "TrialBalanceError",
    "classification_results_to_csv",
    "parse_trial_balance",
    "read_trial_balance",
    "write_classification_results",
    "write_new_accounts",
]
