"""
Abstract base class for the task tracker provider.

The synchronizer only talks to the tracker through this interface, which
keeps it independent of the HTTP client and lets tests substitute an
in-memory tracker.
"""

from abc import ABC, abstractmethod

from asana_pr_sync.models.domain import Comment, Section, Task


class TaskTrackerProvider(ABC):
    """Abstract base class for task tracker implementations.

    All methods are async to support non-blocking I/O. Every method raises
    ExternalServiceError when the underlying call fails; callers decide
    whether that is fatal.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection and verify the credentials.

        Raises:
            AuthorizationError: If the tracker rejects the token.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the connection."""
        pass

    @abstractmethod
    async def get_comments(self, task_id: str, limit: int = 200) -> list[Comment]:
        """Retrieve the comment stories of a task.

        Args:
            task_id: Task gid
            limit: Maximum number of stories to look at. Stories beyond the
                limit are not fetched.

        Returns:
            Comments in the tracker's native order (oldest first).
        """
        pass

    @abstractmethod
    async def add_comment(self, task_id: str, body: str, is_pinned: bool = False) -> Comment:
        """Post a comment on a task and return it."""
        pass

    @abstractmethod
    async def delete_comment(self, comment_id: str) -> None:
        """Delete a comment story by gid."""
        pass

    @abstractmethod
    async def get_task(self, task_id: str) -> Task:
        """Fetch a task with its completion flag and project memberships."""
        pass

    @abstractmethod
    async def set_task_completed(self, task_id: str, completed: bool) -> None:
        """Set the completion flag of a task."""
        pass

    @abstractmethod
    async def get_sections(self, project_id: str) -> list[Section]:
        """List the sections of a project."""
        pass

    @abstractmethod
    async def add_task_to_section(self, section_id: str, task_id: str) -> None:
        """Move a task into a section."""
        pass

    async def __aenter__(self) -> "TaskTrackerProvider":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.disconnect()
