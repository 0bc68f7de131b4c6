# tbx/dependencies.py

"""
Shared FastAPI dependencies: API key auth, the memory store and the
classification config.
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from tbx.config import Settings, get_settings
from tbx.core import MemoryStore, load_classification_config
from tbx.models import ClassificationConfig

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


def require_api_key(
    authorization: str | None = Depends(api_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject requests without a valid "Authorization: ApiKey <key>" header."""
    if not authorization or not authorization.startswith("ApiKey "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
        )

    if authorization[len("ApiKey "):] != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )


@lru_cache()
def get_memory_store() -> MemoryStore:
    """
    Single MemoryStore for the process.

    Shared so that per-client upsert locks apply across requests.
    """
    return MemoryStore(get_settings().memory_dir)


def get_classification_config(
    settings: Settings = Depends(get_settings),
) -> ClassificationConfig:
    """Classification config, reloaded once per request."""
    return load_classification_config(settings.classification_config_path)
