# tbx/models/account.py

from typing import Optional, Literal
from pydantic import BaseModel, Field


AccountStatus = Literal["new", "likely_renumbered"]


class Account(BaseModel):
    """A single row of a trial balance snapshot."""

    account_code: str = Field(min_length=1)
    account_name: str = Field(min_length=1)
    parent_code: Optional[str] = None

    # Ledger fields are carried through as read, never interpreted
    level: Optional[str] = None
    opening_balance: Optional[str] = None
    debit: Optional[str] = None
    credit: Optional[str] = None
    closing_balance: Optional[str] = None
    currency: Optional[str] = None


class NewAccountResult(BaseModel):
    """Comparison-only result for an account missing from the previous snapshot."""

    account_code: str
    account_name: str
    parent_code: Optional[str] = None
    status: AccountStatus
    renumbered_from_code: Optional[str] = None
    renumbered_from_name: Optional[str] = None
