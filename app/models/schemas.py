"""
Pydantic schemas for request/response validation.

Field names follow the JSON the web client speaks (``websiteIdea``,
``createdAt``, ``_id``) through aliases; Python code uses snake_case.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Generic, List, Optional, TypeVar
from datetime import datetime

T = TypeVar("T")


# Project Schemas
class ProjectCreateRequest(BaseModel):
    """Schema for creating a new project."""

    website_idea: str = Field(..., alias="websiteIdea", max_length=2000)

    model_config = ConfigDict(populate_by_name=True)


class ProjectResponse(BaseModel):
    """Schema for project responses."""

    id: str = Field(..., alias="_id")
    website_idea: str = Field(..., alias="websiteIdea")
    sections: List[str]
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# Envelope
class ApiResponse(BaseModel, Generic[T]):
    """
    Uniform response envelope.

    ``{"success": true, "data": ...}`` on success,
    ``{"success": false, "error": "..."}`` on failure.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """Schema for health check endpoint."""

    status: str
    database: str
    store_backend: str
    timestamp: datetime
    version: str = "0.1.0"
