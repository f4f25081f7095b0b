"""
Project endpoints.

Route summary
-------------
POST   /api/projects          — store an idea and derive its sections
GET    /api/projects          — list projects, newest first
GET    /api/projects/{id}     — project detail

Every route answers with the ``{success, data | error}`` envelope. Errors
raised by the store are converted by the handlers registered in ``app.main``.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from app.dependencies.store import get_project_store
from app.models.schemas import ApiResponse, ProjectCreateRequest, ProjectResponse
from app.services.project_store import ProjectRecord, ProjectStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(record: ProjectRecord) -> ProjectResponse:
    return ProjectResponse(
        id=record.id,
        website_idea=record.website_idea,
        sections=list(record.sections),
        created_at=record.created_at,
    )


@router.post(
    "",
    response_model=ApiResponse[ProjectResponse],
    response_model_exclude_none=True,
)
async def create_project(
    body: ProjectCreateRequest,
    store: ProjectStore = Depends(get_project_store),
) -> ApiResponse[ProjectResponse]:
    """Create a project from a website idea."""
    record = await store.create(body.website_idea)
    return ApiResponse[ProjectResponse](success=True, data=_to_response(record))


@router.get(
    "",
    response_model=ApiResponse[List[ProjectResponse]],
    response_model_exclude_none=True,
)
async def list_projects(
    store: ProjectStore = Depends(get_project_store),
) -> ApiResponse[List[ProjectResponse]]:
    """List all projects, newest first."""
    records = await store.list_all()
    return ApiResponse[List[ProjectResponse]](
        success=True,
        data=[_to_response(r) for r in records],
    )


@router.get(
    "/{project_id}",
    response_model=ApiResponse[ProjectResponse],
    response_model_exclude_none=True,
)
async def get_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> ApiResponse[ProjectResponse]:
    """Get a single project by id."""
    record = await store.get_by_id(project_id)
    return ApiResponse[ProjectResponse](success=True, data=_to_response(record))
