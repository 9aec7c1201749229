"""
Health Check Route - GET /health
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fsmatcher.api.dependencies import get_config_store
from fsmatcher.core.config_store import ConfigStore
from fsmatcher.core.facade import DATE, VERSION

router = APIRouter()


@router.get("/health")
async def health(store: ConfigStore = Depends(get_config_store)):
    """Health check endpoint."""
    config_version = store.get().config_version if store.initialized else ""
    return {
        "status": "ok",
        "initialized": store.initialized,
        "config_version": config_version,
        "version": f"{DATE} ({VERSION})",
    }
