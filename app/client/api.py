"""
Async HTTP client for the projects API.

Unwraps the ``{success, data, error}`` envelope: a ``success: false`` answer
raises ApiError, a transport failure raises NetworkError. Cancellation
(``asyncio.CancelledError``) is never wrapped and propagates untouched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """Base class for client-side failures that are shown to the user."""


class ApiError(ClientError):
    """The API answered with ``success: false``."""


class NetworkError(ClientError):
    """The API could not be reached or answered with something unusable."""


@dataclass
class RemoteProject:
    id: str
    website_idea: str
    sections: List[str]
    created_at: str

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "RemoteProject":
        try:
            return cls(
                id=payload["_id"],
                website_idea=payload["websiteIdea"],
                sections=list(payload["sections"]),
                created_at=payload["createdAt"],
            )
        except (KeyError, TypeError) as exc:
            raise NetworkError(f"Malformed project in server response: {exc}") from exc


class ProjectsClient:
    """Thin wrapper over ``httpx.AsyncClient`` for ``/api/projects``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "ProjectsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            resp = await self._http.request(method, path, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"Could not reach the server: {exc}") from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise NetworkError(
                f"Unexpected response from server (status {resp.status_code})"
            ) from exc

        if not isinstance(body, dict) or "success" not in body:
            raise NetworkError(f"Unexpected response from server (status {resp.status_code})")
        if not body["success"]:
            raise ApiError(body.get("error") or "An unknown error occurred")
        return body.get("data")

    async def create_project(self, website_idea: str) -> RemoteProject:
        data = await self._request("POST", "/api/projects", json={"websiteIdea": website_idea})
        return RemoteProject.from_json(data)

    async def get_project(self, project_id: str) -> RemoteProject:
        data = await self._request("GET", f"/api/projects/{project_id}")
        return RemoteProject.from_json(data)

    async def list_projects(self) -> List[RemoteProject]:
        data = await self._request("GET", "/api/projects")
        return [RemoteProject.from_json(p) for p in data or []]
