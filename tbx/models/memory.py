# tbx/models/memory.py

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryMapping(BaseModel):
    """
    A confirmed name -> category mapping for one client.

    Keyed by (name_norm, parent_norm). An empty parent is stored as None so
    that "" and a missing parent compare equal.
    """

    client_id: str
    name_norm: str
    parent_norm: Optional[str] = None
    category: str
    source: str = "api"
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("parent_norm", mode="before")
    @classmethod
    def _blank_parent_is_none(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return value

    @property
    def key(self) -> tuple[str, Optional[str]]:
        return (self.name_norm, self.parent_norm)
