"""
Error taxonomy shared by the project store and the API layer.

Every error raised below the HTTP boundary derives from ``ProjectError`` so
the exception handlers in ``app.main`` can turn it into the uniform
``{"success": false, "error": ...}`` envelope.
"""
from __future__ import annotations


class ProjectError(Exception):
    """Base class for project store / API errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ProjectError):
    """Missing or malformed input (blank idea, malformed project id)."""


class NotFound(ProjectError):
    """No project matches the requested id."""


class StorageError(ProjectError):
    """The underlying store could not be reached or failed mid-operation."""
