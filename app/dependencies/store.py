"""
Store dependencies for FastAPI routes.

Resolves the ProjectStore a request should use. ``STORE_BACKEND=sql`` (the
default) wraps the request's database session; ``STORE_BACKEND=memory`` hands
out one process-wide InMemoryProjectStore so the API runs without a database.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.services.project_store import (
    InMemoryProjectStore,
    ProjectStore,
    SqlProjectStore,
)

logger = logging.getLogger(__name__)

_memory_store: Optional[InMemoryProjectStore] = None


def get_memory_store() -> InMemoryProjectStore:
    """Return the process-wide in-memory store, creating it on first use."""
    global _memory_store
    if _memory_store is None:
        _memory_store = InMemoryProjectStore()
        logger.info("Using in-memory project store")
    return _memory_store


async def get_project_store(db: AsyncSession = Depends(get_db)) -> ProjectStore:
    """Project store for the current request, selected by STORE_BACKEND."""
    if settings.STORE_BACKEND == "memory":
        return get_memory_store()
    return SqlProjectStore(db)
