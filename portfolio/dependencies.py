"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from portfolio.config import get_settings
from portfolio.db import DatabaseStorage, InMemoryStorage, Storage
from portfolio.seed import seed_demo_data

logger = logging.getLogger(__name__)

_storage: Storage | None = None


def get_storage() -> Storage:
    """
    Return a singleton storage so state persists across requests.
    """
    global _storage
    if _storage is not None:
        return _storage

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        storage = InMemoryStorage()
        if settings.seed_demo_data:
            seed_demo_data(storage)
        logger.info("Using in-memory storage")
    else:
        storage = DatabaseStorage(settings.database_url)
        logger.info("Using database storage (%s)", storage.engine.url.get_backend_name())
    _storage = storage
    return _storage


def reset_storage() -> None:
    """Drop the cached storage so the next request rebuilds it from settings."""
    global _storage
    _storage = None
