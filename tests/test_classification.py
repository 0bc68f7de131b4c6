# tests/test_classification.py

"""
Tests for the multi-signal classification engine.
"""

import pytest

from tbx.models import Account, ClassificationConfig, Thresholds, Weights
from tbx.core.classification import ClassificationEngine
from tbx.core.memory import MemoryStore


# ============================================
# Test Data
# ============================================

def make_account(code: str, name: str, parent_code: str = None) -> Account:
    return Account(account_code=code, account_name=name, parent_code=parent_code)


def make_config(
    keywords: dict = None,
    ontology: dict = None,
    thresholds: dict = None,
    weights: dict = None,
) -> ClassificationConfig:
    return ClassificationConfig(
        keywords=keywords or {},
        ontology=ontology or {},
        thresholds=Thresholds(**(thresholds or {})),
        weights=Weights(**(weights or {})),
    )


@pytest.fixture
def memory(tmp_path):
    return MemoryStore(tmp_path / "memory")


def classify_one(memory, config, account, previous=None, client_id="ACME"):
    engine = ClassificationEngine(memory, config)
    results = engine.classify(previous or [], [account], client_id)
    assert len(results) == 1
    return results[0]


def methods(result) -> list[str]:
    return [e.method for e in result.evidence_items()]


# ============================================
# Scope
# ============================================

class TestScope:
    """Test which accounts are classified."""

    def test_only_current_only_codes_are_classified(self, memory):
        previous = [make_account("1000", "Cash"), make_account("2000", "Payables")]
        current = [
            make_account("1000", "Cash renamed"),
            make_account("2000", "Payables"),
            make_account("3000", "Share Capital"),
            make_account("1050", "Cash"),
        ]

        results = ClassificationEngine(memory, make_config()).classify(previous, current, "ACME")

        assert [r.account_code for r in results] == ["3000", "1050"]

    def test_status_uses_configured_renumber_threshold(self, memory):
        previous = [make_account("1000", "Account Receivable")]
        account = make_account("1200", "Accounts Receivables")

        loose = classify_one(memory, make_config(thresholds={"renumbered_similarity": 0.90}), account, previous)
        strict = classify_one(memory, make_config(thresholds={"renumbered_similarity": 0.99}), account, previous)

        assert loose.status == "likely_renumbered"
        assert loose.renumbered_from_code == "1000"
        assert loose.renumbered_from_name == "Account Receivable"
        assert strict.status == "new"
        assert strict.renumbered_from_code is None

    def test_identifying_fields_are_copied(self, memory):
        result = classify_one(memory, make_config(), make_account("1100", "Petty Cash", parent_code="1000"))

        assert result.account_code == "1100"
        assert result.account_name == "Petty Cash"
        assert result.parent_code == "1000"


# ============================================
# Individual Signals
# ============================================

class TestSignals:
    """Test each evidence signal on its own."""

    def test_no_signal_is_uncategorized(self, memory):
        result = classify_one(memory, make_config(), make_account("9999", "Suspense"))

        assert result.suggested_category == "Uncategorized"
        assert result.confidence == 0
        assert result.needs_review is True

        evidence = result.evidence_items()
        assert len(evidence) == 1
        assert evidence[0].method == "uncategorized"
        assert evidence[0].score == 0
        assert evidence[0].category == "Uncategorized"

    def test_keyword_signal(self, memory):
        config = make_config(keywords={"Cash": ["cash"]})

        result = classify_one(memory, config, make_account("9999", "Petty Cash"))

        assert result.suggested_category == "Cash"
        assert result.confidence == 21  # 0.25 * 0.85
        assert methods(result) == ["keyword"]
        assert result.evidence_items()[0].matched_keyword == "cash"
        assert result.evidence_items()[0].score == 0.85

    def test_keyword_is_normalized_before_matching(self, memory):
        config = make_config(keywords={"Receivables": ["Accounts-Receivable"]})

        result = classify_one(memory, config, make_account("9999", "Accounts Receivable (Trade)"))

        assert result.suggested_category == "Receivables"
        assert result.evidence_items()[0].matched_keyword == "Accounts-Receivable"

    def test_keyword_table_order_breaks_ties(self, memory):
        config = make_config(keywords={
            "Bank": ["overdraft", "bank"],
            "Cash": ["cash"],
        })

        result = classify_one(memory, config, make_account("9999", "Cash at Bank"))

        assert result.suggested_category == "Bank"
        assert result.evidence_items()[0].matched_keyword == "bank"

    def test_blank_keyword_never_matches(self, memory):
        config = make_config(keywords={"Everything": [" ", "--"]})

        result = classify_one(memory, config, make_account("9999", "Suspense"))

        assert result.suggested_category == "Uncategorized"

    def test_ontology_longest_prefix_wins(self, memory):
        config = make_config(ontology={"1": "Assets", "11": "Cash and Equivalents"})

        cash = classify_one(memory, config, make_account("1150", "Suspense"))
        other = classify_one(memory, config, make_account("1999", "Suspense"))
        none = classify_one(memory, config, make_account("2000", "Suspense"))

        assert cash.suggested_category == "Cash and Equivalents"
        assert other.suggested_category == "Assets"
        assert none.suggested_category == "Uncategorized"

    def test_ontology_keys_off_own_code_not_parent(self, memory):
        """The "parent" signal looks up the account's own code prefix."""
        config = make_config(ontology={"2": "Liabilities"})
        previous = [make_account("2000", "Liabilities")]

        result = classify_one(memory, config, make_account("1100", "Suspense", parent_code="2000"), previous)

        assert result.suggested_category == "Uncategorized"

        result = classify_one(memory, config, make_account("2100", "Suspense"))
        evidence = result.evidence_items()[0]
        assert evidence.method == "parent"
        assert evidence.matched_parent == "2100"
        assert result.confidence == 12  # 0.15 * 0.80

    def test_memory_exact_signal(self, memory):
        memory.remember("ACME", "Petty Cash", "Cash")

        result = classify_one(memory, make_config(), make_account("9999", "PETTY-CASH"))

        assert result.suggested_category == "Cash"
        # Exact hit also scores 1.0 on fuzzy: 0.5 * 1.0 + 0.1 * 1.0
        assert methods(result) == ["memory", "fuzzy"]
        assert result.confidence == 60

    def test_memory_uses_parent_name_from_previous(self, memory):
        memory.remember("ACME", "Petty Cash", "Generic Cash")
        memory.remember("ACME", "Petty Cash", "Branch Cash", parent_name="Branch Assets")
        previous = [make_account("1000", "Branch Assets")]

        result = classify_one(memory, make_config(), make_account("1100", "Petty Cash", parent_code="1000"), previous)

        assert result.suggested_category == "Branch Cash"
        assert result.evidence_items()[0].matched_parent == "branchassets"

    def test_missing_parent_falls_back_to_name(self, memory):
        memory.remember("ACME", "Petty Cash", "Generic Cash")
        memory.remember("ACME", "Petty Cash", "Branch Cash", parent_name="Branch Assets")

        result = classify_one(memory, make_config(), make_account("1100", "Petty Cash", parent_code="4242"))

        assert result.suggested_category == "Generic Cash"
        assert result.evidence_items()[0].matched_parent is None

    def test_fuzzy_signal_reports_actual_similarity(self, memory):
        memory.remember("ACME", "Account Receivable", "Receivables")

        result = classify_one(memory, make_config(), make_account("9999", "Accounts Receivable"))

        evidence = result.evidence_items()
        assert [e.method for e in evidence] == ["fuzzy"]
        assert evidence[0].category == "Receivables"
        assert evidence[0].matched_name == "accountreceivable"
        assert 0.95 < evidence[0].score < 1.0
        assert result.suggested_category == "Receivables"
        assert result.confidence == round(10 * evidence[0].score)

    def test_fuzzy_below_threshold_does_not_fire(self, memory):
        memory.remember("ACME", "Cash", "Cash")

        result = classify_one(memory, make_config(), make_account("9999", "Accounts Payable"))

        assert result.suggested_category == "Uncategorized"

    def test_memory_not_shared_by_colliding_client_ids(self, memory):
        memory.remember("ACME Corp", "Petty Cash", "Cash")

        result = classify_one(memory, make_config(), make_account("9999", "Petty Cash"), client_id="ACME_Corp")

        assert result.suggested_category == "Uncategorized"
        assert methods(result) == ["uncategorized"]

    def test_memory_is_client_scoped(self, memory):
        memory.remember("GLOBEX", "Petty Cash", "Cash")

        result = classify_one(memory, make_config(), make_account("9999", "Petty Cash"), client_id="ACME")

        assert result.suggested_category == "Uncategorized"


# ============================================
# Combining Evidence
# ============================================

class TestEvidenceCombination:
    """Test category seeding and confidence arithmetic."""

    def test_all_signals_fire_and_sum(self, memory):
        memory.remember("ACME", "Petty Cash", "Cash")
        config = make_config(keywords={"Cash": ["cash"]}, ontology={"1": "Assets"})

        result = classify_one(memory, config, make_account("1100", "Petty Cash"))

        assert methods(result) == ["memory", "keyword", "parent", "fuzzy"]
        # 0.5 * 1.0 + 0.25 * 0.85 + 0.15 * 0.80 + 0.10 * 1.0
        assert result.confidence == 93
        assert result.needs_review is False

    def test_first_signal_seeds_category(self, memory):
        """Signals may disagree; the first to fire names the category."""
        config = make_config(keywords={"Cash": ["cash"]}, ontology={"1": "Assets"})

        result = classify_one(memory, config, make_account("1100", "Petty Cash"))

        assert result.suggested_category == "Cash"
        assert [e.category for e in result.evidence_items()] == ["Cash", "Assets"]
        assert result.confidence == 33  # 0.2125 + 0.12

    def test_exact_memory_beats_fuzzy_neighbour(self, memory):
        memory.remember("ACME", "Petty Cashs", "Other")
        memory.remember("ACME", "Petty Cash", "Cash")

        result = classify_one(memory, make_config(), make_account("9999", "Petty Cash"))

        assert result.suggested_category == "Cash"
        assert result.evidence_items()[0].method == "memory"

    def test_adding_signals_never_lowers_confidence(self, memory):
        account = make_account("1100", "Petty Cash")
        configs = [
            make_config(),
            make_config(keywords={"Cash": ["cash"]}),
            make_config(keywords={"Cash": ["cash"]}, ontology={"1": "Assets"}),
        ]

        scores = [classify_one(memory, c, account).confidence for c in configs]
        memory.remember("ACME", "Petty Cash", "Cash")
        scores.append(classify_one(memory, configs[-1], account).confidence)

        assert scores == sorted(scores)
        assert scores[0] < scores[-1]

    def test_two_weak_signals_outrank_one(self, memory):
        config = make_config(keywords={"Cash": ["cash"]}, ontology={"1": "Assets"})

        both = classify_one(memory, config, make_account("1100", "Petty Cash"))
        keyword_only = classify_one(memory, config, make_account("9100", "Petty Cash"))

        assert both.confidence > keyword_only.confidence

    def test_confidence_capped_at_100(self, memory):
        memory.remember("ACME", "Petty Cash", "Cash")
        config = make_config(
            keywords={"Cash": ["cash"]},
            ontology={"1": "Assets"},
            weights={"memory": 1.0, "keyword": 1.0, "parent": 1.0, "fuzzy": 1.0},
        )

        result = classify_one(memory, config, make_account("1100", "Petty Cash"))

        assert result.confidence == 100

    def test_half_confidence_rounds_up(self, memory):
        config = make_config(
            keywords={"Cash": ["cash"]},
            thresholds={"keyword_match": 0.625},
            weights={"memory": 0, "keyword": 1.0, "parent": 0, "fuzzy": 0},
        )

        result = classify_one(memory, config, make_account("9999", "Petty Cash"))

        assert result.confidence == 63  # 62.5


# ============================================
# Review Flag
# ============================================

class TestNeedsReview:
    """Test the review cutoff boundary."""

    def _config(self, memory_weight: float) -> ClassificationConfig:
        return make_config(weights={"memory": memory_weight, "keyword": 0, "parent": 0, "fuzzy": 0})

    def test_confidence_at_cutoff_needs_no_review(self, memory):
        memory.remember("ACME", "Petty Cash", "Cash")

        result = classify_one(memory, self._config(0.70), make_account("9999", "Petty Cash"))

        assert result.confidence == 70
        assert result.needs_review is False

    def test_confidence_below_cutoff_needs_review(self, memory):
        memory.remember("ACME", "Petty Cash", "Cash")

        result = classify_one(memory, self._config(0.69), make_account("9999", "Petty Cash"))

        assert result.confidence == 69
        assert result.needs_review is True

    def test_cutoff_is_configurable(self, memory):
        config = make_config(keywords={"Cash": ["cash"]}, thresholds={"needs_review_below": 20})

        result = classify_one(memory, config, make_account("9999", "Petty Cash"))

        assert result.confidence == 21
        assert result.needs_review is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
