# tbx/models/classification.py

import json
from typing import Optional, Literal
from pydantic import BaseModel, Field

from tbx.models.account import AccountStatus


UNCATEGORIZED = "Uncategorized"

EvidenceMethod = Literal["memory", "keyword", "parent", "fuzzy", "uncategorized"]


# ============================================
# Evidence
# ============================================

class Evidence(BaseModel):
    """One signal that contributed to a classification decision."""

    method: EvidenceMethod
    score: float = Field(ge=0, le=1)
    matched_name: Optional[str] = None
    matched_parent: Optional[str] = None
    matched_keyword: Optional[str] = None
    category: Optional[str] = None


def serialize_evidence(evidence: list[Evidence]) -> str:
    """Serialize an evidence list to the JSON blob stored on results."""
    return json.dumps([e.model_dump() for e in evidence])


# ============================================
# Classification Result
# ============================================

class ClassificationResult(BaseModel):
    """Classification of one account missing from the previous snapshot."""

    account_code: str
    account_name: str
    parent_code: Optional[str] = None
    status: AccountStatus
    suggested_category: Optional[str] = UNCATEGORIZED
    confidence: int = Field(ge=0, le=100)
    needs_review: bool
    renumbered_from_code: Optional[str] = None
    renumbered_from_name: Optional[str] = None
    evidence: str = "[]"

    def evidence_items(self) -> list[Evidence]:
        """Parse the serialized evidence back into models."""
        return [Evidence.model_validate(item) for item in json.loads(self.evidence)]
