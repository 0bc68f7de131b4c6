# tbx/routers/config.py

from fastapi import APIRouter, Depends

from tbx.dependencies import get_classification_config
from tbx.models import ClassificationConfig

router = APIRouter()


@router.get("/config")
async def get_config(config: ClassificationConfig = Depends(get_classification_config)):
    """Effective classification config, defaults included."""
    return config.model_dump()
