"""
Shared fixtures for the website generator tests.

Tests run against SQLite through aiosqlite: each test function gets its own
database file, created with ``Base.metadata.create_all`` and thrown away
afterwards, so no PostgreSQL server is needed.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Override DATABASE_URL *before* any app module is imported, so that
# settings.DATABASE_URL and the global engine never point at a real server.
_SCRATCH_DIR = tempfile.mkdtemp(prefix="website-generator-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_SCRATCH_DIR}/app.db"
os.environ["STORE_BACKEND"] = "sql"

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import database_models  # noqa: E402,F401


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_session(tmp_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session on a fresh SQLite database for each test."""
    engine = create_async_engine(sqlite_url(tmp_path / "test.db"), echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the DB dependency
    overridden to use the per-test session.
    """

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
