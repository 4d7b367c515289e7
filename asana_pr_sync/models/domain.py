"""
Domain models for asana-pr-sync.

These are the normalized internal representations of Asana and GitHub
entities. Provider clients convert raw API payloads into these models; the
synchronizer never looks at raw JSON.

Example:
    Converting an Asana story payload::

        comment = Comment(
            id=story["gid"],
            body=story.get("text") or "",
            is_pinned=story.get("is_pinned", False),
            created_at=parse_datetime(story["created_at"]),
            author=story["created_by"]["name"],
        )
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from asana_pr_sync.enums import OutcomeStatus, StatusState, SyncAction


@dataclass(frozen=True)
class TaskLink:
    """One Asana task URL found in a pull request description."""

    task_id: str
    """Task gid, the final digit group of the URL."""

    project_id: str | None
    """Project gid from the URL, when present."""

    url: str
    """The matched URL, without the trigger phrase."""


@dataclass
class Comment:
    """An Asana comment story on a task.

    The tracker owns comments; this object is a read-only snapshot of what
    the API returned.
    """

    id: str
    """Story gid assigned by Asana."""

    body: str
    """Plain-text body of the story."""

    is_pinned: bool = False
    created_at: datetime | None = None
    author: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data


@dataclass
class Project:
    """Asana project a task belongs to."""

    id: str
    name: str


@dataclass
class Section:
    """Section (column) inside an Asana project."""

    id: str
    name: str


@dataclass
class Task:
    """Asana task with its completion flag and project memberships."""

    id: str
    name: str
    completed: bool = False
    projects: list[Project] = field(default_factory=list)

    def find_project(self, name: str) -> Project | None:
        """Return the first project membership with an exactly matching name."""
        return next((project for project in self.projects if project.name == name), None)


class MoveTarget(BaseModel):
    """Desired placement of a task, by human-readable names.

    Names are used instead of gids because gids are not visible when
    browsing a workspace, which makes them impractical to configure.
    """

    project: str = Field(..., min_length=1, description="Project name")
    section: str = Field(..., min_length=1, description="Section name within the project")

    def __str__(self) -> str:
        return f"{self.project}/{self.section}"


@dataclass
class PullRequestContext:
    """The pull request an invocation runs against."""

    body: str
    head_sha: str
    number: int | None = None
    repository: str | None = None


@dataclass
class TaskOutcome:
    """What happened when an action was applied to one task.

    For move-section there is one outcome per (task, target) pair.
    """

    task_id: str
    status: OutcomeStatus
    detail: str | None = None
    target: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != OutcomeStatus.FAILED

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class SyncReport:
    """Result of one invocation.

    ``items`` is the ordered list the action produces: created comments for
    add-comment, removed comment ids for remove-comment, and processed task
    ids for complete-task and move-section. Presence in ``items`` means the
    task was attempted; ``outcomes`` records whether it succeeded.
    """

    action: SyncAction
    task_ids: list[str]
    items: list[Any] = field(default_factory=list)
    outcomes: list[TaskOutcome] = field(default_factory=list)
    status: StatusState | None = None

    @property
    def failed(self) -> list[TaskOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == OutcomeStatus.FAILED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "task_ids": list(self.task_ids),
            "items": [item.to_dict() if isinstance(item, Comment) else item for item in self.items],
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "status": self.status.value if self.status else None,
        }
