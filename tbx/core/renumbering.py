# tbx/core/renumbering.py

"""
Renumber detection between two trial balance snapshots.

An account whose code is missing from the previous snapshot is either new,
or the continuation of a previous account under a different code. The
latter is detected by fuzzy name similarity against every previous account.

Cost is O(|current-only| x |previous|). Fine for ledgers of a few thousand
rows; this loop is the first thing to index if ledgers grow past that.
"""

import logging
from typing import Optional

from tbx.models import Account, NewAccountResult
from tbx.core.normalizers import normalize_name
from tbx.core.similarity import similarity

logger = logging.getLogger(__name__)

DEFAULT_RENUMBER_THRESHOLD = 0.90


class RenumberDetector:
    """Flags current-only accounts as new or likely renumbered."""

    def __init__(self, threshold: float = DEFAULT_RENUMBER_THRESHOLD):
        self.threshold = threshold

    def find_source(
        self,
        account: Account,
        previous: list[Account],
    ) -> Optional[Account]:
        """
        Find the previous account this one was most likely renumbered from.

        Scans previous accounts in snapshot order. The running best only
        moves on a strictly higher score, so the first account reaching the
        best score wins ties.
        """
        name_norm = normalize_name(account.account_name)

        best_match: Optional[Account] = None
        best_score = 0.0

        for prev in previous:
            score = similarity(name_norm, normalize_name(prev.account_name))

            if score > best_score and score >= self.threshold:
                best_score = score
                best_match = prev

        if best_match is not None:
            logger.debug(
                "Account %s looks renumbered from %s (score %.2f)",
                account.account_code, best_match.account_code, best_score,
            )

        return best_match

    def detect(
        self,
        previous: list[Account],
        current: list[Account],
    ) -> list[NewAccountResult]:
        """
        Compare two snapshots.

        Returns one row per current account whose code is absent from the
        previous snapshot, in current snapshot order.
        """
        previous_codes = {a.account_code for a in previous}
        results: list[NewAccountResult] = []

        for account in current:
            if account.account_code in previous_codes:
                continue

            source = self.find_source(account, previous)

            results.append(NewAccountResult(
                account_code=account.account_code,
                account_name=account.account_name,
                parent_code=account.parent_code,
                status="likely_renumbered" if source else "new",
                renumbered_from_code=source.account_code if source else None,
                renumbered_from_name=source.account_name if source else None,
            ))

        renumbered = sum(1 for r in results if r.status == "likely_renumbered")
        logger.info(
            "Compared snapshots: %d new, %d likely renumbered",
            len(results) - renumbered, renumbered,
        )

        return results
