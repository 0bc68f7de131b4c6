# tbx/main.py

import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tbx.config import get_settings
from tbx.dependencies import require_api_key
from tbx.routers import health, classify, memory, config

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

# ============================================
# Create FastAPI app
# ============================================

app = FastAPI(
    title=settings.app_name,
    description="Classifies new and renumbered accounts between two trial balances",
    version="2.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# ============================================
# CORS middleware
# ============================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================
# Include routers
# ============================================

protected = [Depends(require_api_key)]

app.include_router(health.router, tags=["Health"])
app.include_router(classify.router, tags=["Classification"], dependencies=protected)
app.include_router(memory.router, prefix="/memory", tags=["Memory"], dependencies=protected)
app.include_router(config.router, tags=["Config"], dependencies=protected)

# ============================================
# Root endpoint
# ============================================

@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": "2.0.0",
        "status": "running",
        "docs": "/docs" if settings.debug else None,
    }
