"""
Project store: durable create/read of Project records.

Provides:
- ProjectRecord: immutable value returned by every store
- ProjectStore: abstract create / list_all / get_by_id contract
- SqlProjectStore: SQLAlchemy async implementation over the ``projects`` table
- InMemoryProjectStore: dict-backed implementation (tests, demo mode)

Stores are handed to their callers explicitly (see ``app.dependencies.store``)
rather than being discovered through framework wiring.
"""
from __future__ import annotations

import abc
import dataclasses
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFound, StorageError, ValidationError
from app.models.database_models import Project
from app.services.sections import derive_sections

logger = logging.getLogger(__name__)

_PROJECT_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclasses.dataclass(frozen=True)
class ProjectRecord:
    id: str
    website_idea: str
    sections: Tuple[str, ...]
    created_at: datetime


def new_project_id() -> str:
    return uuid.uuid4().hex


def validate_project_id(project_id: str) -> str:
    """Return *project_id* unchanged, or raise ValidationError if malformed."""
    if not isinstance(project_id, str) or not _PROJECT_ID_RE.match(project_id):
        raise ValidationError(f"Invalid project id: {project_id!r}")
    return project_id


def validate_idea(idea_text: str) -> str:
    if idea_text is None or not idea_text.strip():
        raise ValidationError("Please enter a website idea")
    return idea_text


class ProjectStore(abc.ABC):
    """Create-then-read-only persistence contract for projects."""

    @abc.abstractmethod
    async def create(self, idea_text: str) -> ProjectRecord:
        """Derive sections for *idea_text*, persist and return the record."""

    @abc.abstractmethod
    async def list_all(self) -> List[ProjectRecord]:
        """All projects, most recently created first."""

    @abc.abstractmethod
    async def get_by_id(self, project_id: str) -> ProjectRecord:
        """The project with *project_id*; NotFound if it does not exist."""


# ---------------------------------------------------------------------------
# SQLAlchemy implementation
# ---------------------------------------------------------------------------

class SqlProjectStore(ProjectStore):
    """Project store backed by an async SQLAlchemy session."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session = session
        self._clock = clock

    @staticmethod
    def _to_record(row: Project) -> ProjectRecord:
        return ProjectRecord(
            id=row.id,
            website_idea=row.website_idea,
            sections=tuple(row.sections or ()),
            created_at=row.created_at,
        )

    async def create(self, idea_text: str) -> ProjectRecord:
        validate_idea(idea_text)
        row = Project(
            id=new_project_id(),
            website_idea=idea_text,
            sections=derive_sections(idea_text),
            created_at=self._clock(),
        )
        try:
            self._session.add(row)
            await self._session.commit()
        except (SQLAlchemyError, OSError) as exc:
            await self._session.rollback()
            logger.error("Failed to store project: %s", exc)
            raise StorageError(f"Could not store project: {exc}") from exc

        logger.info("Created project id=%s sections=%d", row.id, len(row.sections))
        return self._to_record(row)

    async def list_all(self) -> List[ProjectRecord]:
        try:
            result = await self._session.execute(
                select(Project).order_by(Project.created_at.desc())
            )
            rows = result.scalars().all()
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Failed to list projects: %s", exc)
            raise StorageError(f"Could not list projects: {exc}") from exc
        return [self._to_record(r) for r in rows]

    async def get_by_id(self, project_id: str) -> ProjectRecord:
        validate_project_id(project_id)
        try:
            result = await self._session.execute(
                select(Project).where(Project.id == project_id)
            )
            row = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Failed to load project %s: %s", project_id, exc)
            raise StorageError(f"Could not load project: {exc}") from exc

        if row is None:
            raise NotFound(f"Project {project_id} not found")
        return self._to_record(row)


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

class InMemoryProjectStore(ProjectStore):
    """Process-local store with the same contract as SqlProjectStore."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._records: Dict[str, ProjectRecord] = {}
        # insertion order breaks created_at ties
        self._order: List[str] = []

    async def create(self, idea_text: str) -> ProjectRecord:
        validate_idea(idea_text)
        record = ProjectRecord(
            id=new_project_id(),
            website_idea=idea_text,
            sections=tuple(derive_sections(idea_text)),
            created_at=self._clock(),
        )
        self._records[record.id] = record
        self._order.append(record.id)
        logger.info("Created project id=%s sections=%d", record.id, len(record.sections))
        return record

    async def list_all(self) -> List[ProjectRecord]:
        ordered = [self._records[pid] for pid in reversed(self._order)]
        return sorted(ordered, key=lambda r: r.created_at, reverse=True)

    async def get_by_id(self, project_id: str) -> ProjectRecord:
        validate_project_id(project_id)
        record = self._records.get(project_id)
        if record is None:
            raise NotFound(f"Project {project_id} not found")
        return record
