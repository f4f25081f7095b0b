"""
SQL persistence plumbing for the project store.

One async engine per process, built from ``settings.DATABASE_URL``; request
handlers get a session through the ``get_db`` dependency.
"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from typing import AsyncGenerator
import logging

from app.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    pool_pre_ping=True,
    # connections are not shared across event loops (tests, CLI runs)
    poolclass=NullPool,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Declarative base shared by app.models.database_models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session scoped to one request.

    The session commits when the handler returns and rolls back if it
    raises, so a failed project insert never leaves a partial row behind.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as exc:
            await session.rollback()
            logger.error("Project store session rolled back: %s", exc)
            raise


async def init_db() -> None:
    """Create the ``projects`` table if it does not exist yet."""
    # registers Project on Base.metadata
    from app.models import database_models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as exc:
        logger.error("Could not create project tables: %s", exc)
        raise
    logger.info("Project tables ready")


async def close_db() -> None:
    """Dispose of the engine's connections on shutdown."""
    await engine.dispose()
    logger.info("Database engine disposed")
