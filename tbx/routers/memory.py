# tbx/routers/memory.py

"""
Memory routes: record a confirmed category, list a client's mappings.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from tbx.core import MemoryStore, normalize_name
from tbx.dependencies import get_memory_store
from tbx.models import MemoryMapping

router = APIRouter()


class MemoryUpdateRequest(BaseModel):
    client_id: str = ""
    name_norm: str = ""
    parent_norm: Optional[str] = None
    category: str = ""
    source: Optional[str] = None
    updated_at: Optional[datetime] = None


@router.post("/update")
async def update_memory(
    request: MemoryUpdateRequest,
    memory: MemoryStore = Depends(get_memory_store),
):
    """
    Record a user-confirmed category.

    Names are normalized again on the way in, which is a no-op for names
    that already are.
    """
    name_norm = normalize_name(request.name_norm)

    if not request.client_id.strip() or not name_norm or not request.category.strip():
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: client_id, name_norm, category",
        )

    memory.upsert(MemoryMapping(
        client_id=request.client_id,
        name_norm=name_norm,
        parent_norm=normalize_name(request.parent_norm),
        category=request.category,
        source=request.source or "api",
        updated_at=request.updated_at or datetime.now(timezone.utc),
    ))

    return {"success": True, "message": "Memory updated successfully"}


@router.get("/{client_id}")
async def get_memory(
    client_id: str,
    memory: MemoryStore = Depends(get_memory_store),
):
    """List every mapping stored for a client."""
    mappings = memory.load(client_id)

    return {
        "client_id": client_id,
        "count": len(mappings),
        "mappings": [m.model_dump(mode="json") for m in mappings],
    }
