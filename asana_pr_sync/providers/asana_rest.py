"""Asana provider implementation using direct REST API calls."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

import httpx
import structlog

from asana_pr_sync.exceptions import AuthorizationError, ExternalServiceError
from asana_pr_sync.models.domain import Comment, Project, Section, Task
from asana_pr_sync.providers.base import TaskTrackerProvider
from asana_pr_sync.utils.connection_pool import HTTPConnectionPool

log = structlog.get_logger(__name__)

ASANA_API_URL = "https://app.asana.com/api/1.0"

# Asana rejects page sizes above 100
MAX_PAGE_SIZE = 100

STORY_FIELDS = "text,type,resource_subtype,is_pinned,created_at,created_by.name"
TASK_FIELDS = "name,completed,projects.name"


class AsanaRestProvider(TaskTrackerProvider):
    """Asana implementation using direct REST API calls."""

    def __init__(
        self,
        token: str,
        base_url: str = ASANA_API_URL,
        timeout: float = 30.0,
    ):
        """Initialize Asana provider.

        Args:
            token: Asana personal access token
            base_url: API base URL
            timeout: Per-request timeout in seconds
        """
        self.token = token.strip() if token else token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._pool: HTTPConnectionPool | None = None

    async def connect(self) -> None:
        """Create the connection pool and verify the token."""
        self._pool = HTTPConnectionPool(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Accept": "application/json",
            },
        )
        await self._pool.initialize()

        try:
            response = await self._pool.get("/users/me", params={"opt_fields": "name"})
        except ExternalServiceError as e:
            if e.status_code in (401, 403):
                raise AuthorizationError(
                    "Asana client authorization failed",
                    status_code=e.status_code,
                    response_text=e.response_text,
                ) from e
            raise

        user = self._data(response)
        log.info("asana_connected", base_url=self.base_url, user=user.get("name"))

    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None

    async def get_comments(self, task_id: str, limit: int = 200) -> list[Comment]:
        """Retrieve up to ``limit`` stories of a task, keeping the comments.

        Follows Asana's offset pagination until ``limit`` stories have been
        read or there are no more pages.
        """
        log.info("get_comments", task_id=task_id, limit=limit)

        stories: list[dict[str, Any]] = []
        offset: str | None = None
        while len(stories) < limit:
            params: dict[str, Any] = {
                "limit": min(MAX_PAGE_SIZE, limit - len(stories)),
                "opt_fields": STORY_FIELDS,
            }
            if offset:
                params["offset"] = offset

            response = await self._client.get(f"/tasks/{task_id}/stories", params=params)
            payload = self._payload(response)
            stories.extend(payload.get("data") or [])

            offset = self._next_offset(payload)
            if offset is None:
                break

        with _decoding(f"stories of task {task_id}"):
            return [
                self._parse_comment(story) for story in stories[:limit] if story.get("type", "comment") == "comment"
            ]

    async def add_comment(self, task_id: str, body: str, is_pinned: bool = False) -> Comment:
        """Add comment story to task."""
        log.info("add_comment", task_id=task_id, is_pinned=is_pinned)

        response = await self._client.post(
            f"/tasks/{task_id}/stories",
            params={"opt_fields": STORY_FIELDS},
            json={"data": {"text": body, "is_pinned": is_pinned}},
        )
        with _decoding(f"new story on task {task_id}"):
            return self._parse_comment(self._data(response))

    async def delete_comment(self, comment_id: str) -> None:
        """Delete a story."""
        log.info("delete_comment", comment_id=comment_id)

        await self._client.delete(f"/stories/{comment_id}")

    async def get_task(self, task_id: str) -> Task:
        """Get task with its project memberships."""
        log.info("get_task", task_id=task_id)

        response = await self._client.get(f"/tasks/{task_id}", params={"opt_fields": TASK_FIELDS})
        with _decoding(f"task {task_id}"):
            return self._parse_task(self._data(response))

    async def set_task_completed(self, task_id: str, completed: bool) -> None:
        """Update the completion flag of a task."""
        log.info("set_task_completed", task_id=task_id, completed=completed)

        await self._client.put(f"/tasks/{task_id}", json={"data": {"completed": completed}})

    async def get_sections(self, project_id: str) -> list[Section]:
        """List all sections of a project."""
        log.info("get_sections", project_id=project_id)

        sections: list[Section] = []
        offset: str | None = None
        while True:
            params: dict[str, Any] = {"limit": MAX_PAGE_SIZE, "opt_fields": "name"}
            if offset:
                params["offset"] = offset

            response = await self._client.get(f"/projects/{project_id}/sections", params=params)
            payload = self._payload(response)
            with _decoding(f"sections of project {project_id}"):
                sections.extend(self._parse_section(item) for item in payload.get("data") or [])

            offset = self._next_offset(payload)
            if offset is None:
                return sections

    async def add_task_to_section(self, section_id: str, task_id: str) -> None:
        """Add a task to a section, removing it from other sections of that project."""
        log.info("add_task_to_section", section_id=section_id, task_id=task_id)

        await self._client.post(f"/sections/{section_id}/addTask", json={"data": {"task": task_id}})

    @property
    def _client(self) -> HTTPConnectionPool:
        if self._pool is None:
            raise ExternalServiceError("Asana provider is not connected")
        return self._pool

    def _parse_comment(self, data: dict[str, Any]) -> Comment:
        """Parse Asana story payload into a Comment."""
        created_at = data.get("created_at")
        created_by = data.get("created_by") or {}
        return Comment(
            id=data["gid"],
            body=data.get("text") or "",
            is_pinned=bool(data.get("is_pinned", False)),
            created_at=datetime.fromisoformat(created_at.replace("Z", "+00:00")) if created_at else None,
            author=created_by.get("name", ""),
        )

    def _parse_task(self, data: dict[str, Any]) -> Task:
        """Parse Asana task payload into a Task."""
        return Task(
            id=data["gid"],
            name=data.get("name", ""),
            completed=bool(data.get("completed", False)),
            projects=[Project(id=project["gid"], name=project.get("name", "")) for project in data.get("projects") or []],
        )

    def _parse_section(self, data: dict[str, Any]) -> Section:
        return Section(id=data["gid"], name=data.get("name", ""))

    def _payload(self, response: httpx.Response) -> dict[str, Any]:
        """Decode a response body, which Asana always wraps in an object."""
        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                f"Asana returned a non-JSON response for {response.request.url.path}",
                status_code=response.status_code,
                response_text=response.text,
            ) from e

        if not isinstance(payload, dict):
            raise ExternalServiceError(
                f"Asana returned an unexpected payload for {response.request.url.path}",
                status_code=response.status_code,
            )
        return payload

    def _data(self, response: httpx.Response) -> dict[str, Any]:
        data = self._payload(response).get("data")
        if not isinstance(data, dict):
            raise ExternalServiceError(
                f"Asana response for {response.request.url.path} has no data object",
                status_code=response.status_code,
            )
        return data

    def _next_offset(self, payload: dict[str, Any]) -> str | None:
        """Offset of the next page, or None on the last page."""
        next_page = payload.get("next_page")
        if not next_page:
            return None
        if not isinstance(next_page, dict) or not next_page.get("offset"):
            raise ExternalServiceError(f"Asana returned a malformed next_page: {next_page!r}")
        return next_page["offset"]


@contextmanager
def _decoding(subject: str) -> Iterator[None]:
    """Turn errors from reading an unexpected payload into ExternalServiceError."""
    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ExternalServiceError(f"Malformed Asana response for {subject}: {e!r}") from e
