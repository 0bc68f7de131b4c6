# tbx/core/classification.py

"""
Multi-signal account classification.

Every account missing from the previous snapshot gets a status (new or
likely renumbered), a suggested category, a 0-100 confidence and a review
flag. Four independent signals are checked, always all of them:

- memory:  exact (name, parent) hit in the client's memory
- keyword: configured keyword contained in the normalized name
- parent:  code-prefix ontology lookup on the account's own code
- fuzzy:   best similarity against the client's memory

Confidence is the weighted sum over every signal that fired. Only the first
signal to fire (in the order above) seeds the suggested category.
"""

import logging
from typing import Optional

from tbx.models import (
    UNCATEGORIZED,
    Account,
    ClassificationConfig,
    ClassificationResult,
    Evidence,
    MemoryMapping,
    serialize_evidence,
)
from tbx.core.memory import MemoryStore, match_exact
from tbx.core.normalizers import normalize_name
from tbx.core.renumbering import RenumberDetector
from tbx.core.similarity import similarity

logger = logging.getLogger(__name__)


class ClassificationEngine:
    """Classifies current-only accounts using memory, keywords and ontology."""

    def __init__(self, memory: MemoryStore, config: ClassificationConfig):
        self.memory = memory
        self.config = config
        self.detector = RenumberDetector(config.thresholds.renumbered_similarity)

    def classify(
        self,
        previous: list[Account],
        current: list[Account],
        client_id: str,
    ) -> list[ClassificationResult]:
        """
        Classify every current account whose code is absent from previous.

        Accounts present in both snapshots are unchanged and produce no row.
        """
        previous_by_code = {a.account_code: a for a in previous}

        # One memory snapshot per run; updates landing mid-run are not seen
        mappings = self.memory.load(client_id)

        results = [
            self._classify_account(account, previous, previous_by_code, mappings)
            for account in current
            if account.account_code not in previous_by_code
        ]

        needs_review = sum(1 for r in results if r.needs_review)
        renumbered = sum(1 for r in results if r.status == "likely_renumbered")
        logger.info(
            "Classified %d accounts for client %r: %d renumbered, %d need review",
            len(results), client_id, renumbered, needs_review,
        )

        return results

    # ============================================
    # Per-account classification
    # ============================================

    def _classify_account(
        self,
        account: Account,
        previous: list[Account],
        previous_by_code: dict[str, Account],
        mappings: list[MemoryMapping],
    ) -> ClassificationResult:
        name_norm = normalize_name(account.account_name)

        parent_norm: Optional[str] = None
        if account.parent_code:
            parent = previous_by_code.get(account.parent_code)
            parent_norm = normalize_name(parent.account_name if parent else "")

        source = self.detector.find_source(account, previous)

        category, confidence, evidence = self._score(
            name_norm, parent_norm, account.account_code, mappings
        )

        logger.debug(
            "Account %s -> %s (%d) via %s",
            account.account_code, category, confidence,
            ", ".join(e.method for e in evidence),
        )

        return ClassificationResult(
            account_code=account.account_code,
            account_name=account.account_name,
            parent_code=account.parent_code,
            status="likely_renumbered" if source else "new",
            suggested_category=category,
            confidence=confidence,
            needs_review=confidence < self.config.thresholds.needs_review_below,
            renumbered_from_code=source.account_code if source else None,
            renumbered_from_name=source.account_name if source else None,
            evidence=serialize_evidence(evidence),
        )

    def _score(
        self,
        name_norm: str,
        parent_norm: Optional[str],
        account_code: str,
        mappings: list[MemoryMapping],
    ) -> tuple[str, int, list[Evidence]]:
        """Run all four signals and combine them into category + confidence."""
        thresholds = self.config.thresholds
        weights = self.config.weights

        evidence: list[Evidence] = []
        total = 0.0

        # ============================================
        # 1. Memory (exact)
        # ============================================
        memory_hit = match_exact(mappings, name_norm, parent_norm)
        if memory_hit is not None:
            evidence.append(Evidence(
                method="memory",
                score=thresholds.memory_exact_match,
                matched_name=name_norm,
                matched_parent=parent_norm or None,
                category=memory_hit.category,
            ))
            total += weights.memory * thresholds.memory_exact_match

        # ============================================
        # 2. Keywords
        # ============================================
        keyword_hit = self._find_keyword(name_norm)
        if keyword_hit is not None:
            keyword, category = keyword_hit
            evidence.append(Evidence(
                method="keyword",
                score=thresholds.keyword_match,
                matched_keyword=keyword,
                category=category,
            ))
            total += weights.keyword * thresholds.keyword_match

        # ============================================
        # 3. Code-prefix ontology
        # ============================================
        ontology_hit = self._find_ontology_category(account_code)
        if ontology_hit is not None:
            evidence.append(Evidence(
                method="parent",
                score=thresholds.parent_match,
                matched_parent=account_code,
                category=ontology_hit,
            ))
            total += weights.parent * thresholds.parent_match

        # ============================================
        # 4. Fuzzy memory
        # ============================================
        fuzzy_hit = self._find_fuzzy_memory(name_norm, mappings)
        if fuzzy_hit is not None:
            mapping, score = fuzzy_hit
            evidence.append(Evidence(
                method="fuzzy",
                score=score,
                matched_name=mapping.name_norm,
                category=mapping.category,
            ))
            total += weights.fuzzy * score

        if not evidence:
            evidence.append(Evidence(
                method="uncategorized",
                score=0.0,
                category=UNCATEGORIZED,
            ))
            return UNCATEGORIZED, 0, evidence

        # First signal to fire seeds the category
        category = evidence[0].category or UNCATEGORIZED
        # Halves round up: 62.5 -> 63
        confidence = min(100, int(total * 100 + 0.5))

        return category, confidence, evidence

    # ============================================
    # Signals
    # ============================================

    def _find_keyword(self, name_norm: str) -> Optional[tuple[str, str]]:
        """First (keyword, category) whose normalized keyword is in the name."""
        for rule in self.config.keywords:
            for keyword in rule.keywords:
                keyword_norm = normalize_name(keyword)
                if keyword_norm and keyword_norm in name_norm:
                    return keyword, rule.category
        return None

    def _find_ontology_category(self, account_code: str) -> Optional[str]:
        """
        Look up the account's own code in the ontology, then progressively
        shorter prefixes down to one character.

        Reported as the "parent" signal for compatibility with existing
        evidence payloads, although it never looks at the parent account.
        """
        ontology = self.config.ontology
        for length in range(len(account_code), 0, -1):
            category = ontology.get(account_code[:length])
            if category is not None:
                return category
        return None

    def _find_fuzzy_memory(
        self,
        name_norm: str,
        mappings: list[MemoryMapping],
    ) -> Optional[tuple[MemoryMapping, float]]:
        """Most similar mapping in the client's memory, if above threshold."""
        best: Optional[MemoryMapping] = None
        best_score = 0.0

        for mapping in mappings:
            score = similarity(name_norm, mapping.name_norm)
            if score > best_score and score >= self.config.thresholds.fuzzy_match:
                best_score = score
                best = mapping

        if best is None:
            return None
        return best, best_score
