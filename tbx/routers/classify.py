# tbx/routers/classify.py

"""
Classification routes.

Upload two trial balances, get back the accounts that are new in the
current one, classified or merely compared.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response

from tbx.core import (
    ClassificationEngine,
    MemoryStore,
    RenumberDetector,
    TrialBalanceError,
    classification_results_to_csv,
    parse_trial_balance,
)
from tbx.dependencies import get_classification_config, get_memory_store
from tbx.models import Account, ClassificationConfig

logger = logging.getLogger(__name__)
router = APIRouter()


async def _read_upload(upload: UploadFile, label: str) -> list[Account]:
    """Decode and validate an uploaded trial balance."""
    raw = await upload.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail=f"File '{label}' is not valid UTF-8")

    try:
        return parse_trial_balance(text, source=upload.filename or label)
    except TrialBalanceError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ============================================
# Classify
# ============================================

@router.post("/classify")
async def classify_accounts(
    prev: Optional[UploadFile] = File(None),
    curr: Optional[UploadFile] = File(None),
    client_id: Optional[str] = Form(None),
    format: Optional[str] = Query(None, description="Set to 'csv' for a CSV download"),
    memory: MemoryStore = Depends(get_memory_store),
    config: ClassificationConfig = Depends(get_classification_config),
):
    """
    Classify accounts that appear only in the current trial balance.

    1. Parses both uploaded CSVs
    2. Runs the classification engine against the client's memory
    3. Returns JSON, or CSV when format=csv
    """
    if prev is None or curr is None or not client_id:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: prev, curr, client_id",
        )

    start_time = datetime.now()

    previous = await _read_upload(prev, "prev")
    current = await _read_upload(curr, "curr")

    engine = ClassificationEngine(memory, config)
    results = engine.classify(previous, current, client_id)

    duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
    logger.info("Classification for %r finished in %dms", client_id, duration_ms)

    if format == "csv":
        return Response(
            content=classification_results_to_csv(results),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="NewAccounts.csv"'},
        )

    return {
        "client_id": client_id,
        "count": len(results),
        "new_accounts": len([r for r in results if r.status == "new"]),
        "renumbered_accounts": len([r for r in results if r.status == "likely_renumbered"]),
        "needs_review": len([r for r in results if r.needs_review]),
        "results": [r.model_dump() for r in results],
    }


# ============================================
# Compare only
# ============================================

@router.post("/compare")
async def compare_trial_balances(
    prev: Optional[UploadFile] = File(None),
    curr: Optional[UploadFile] = File(None),
):
    """
    Flag accounts new in the current trial balance as new or renumbered,
    without categorizing them.
    """
    if prev is None or curr is None:
        raise HTTPException(status_code=400, detail="Missing required fields: prev, curr")

    previous = await _read_upload(prev, "prev")
    current = await _read_upload(curr, "curr")

    results = RenumberDetector().detect(previous, current)

    return {
        "count": len(results),
        "new_accounts": len([r for r in results if r.status == "new"]),
        "renumbered_accounts": len([r for r in results if r.status == "likely_renumbered"]),
        "results": [r.model_dump() for r in results],
    }
