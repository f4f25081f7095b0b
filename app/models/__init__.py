"""Database and schema models for the website generator."""
from app.models.database_models import Project
from app.models.schemas import (
    ApiResponse,
    HealthCheckResponse,
    ProjectCreateRequest,
    ProjectResponse,
)

__all__ = [
    # Database models
    "Project",
    # Pydantic schemas
    "ApiResponse",
    "HealthCheckResponse",
    "ProjectCreateRequest",
    "ProjectResponse",
]
