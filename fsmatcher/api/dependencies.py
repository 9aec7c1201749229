"""
FastAPI Dependencies - shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from fsmatcher.core.config_store import ConfigStore, global_store


@lru_cache
def get_config_store() -> ConfigStore:
    """Process-wide rule configuration store."""
    return global_store
