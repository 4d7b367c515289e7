"""Pytest configuration and shared fixtures."""

import itertools
import json
import os
from pathlib import Path

import pytest

from asana_pr_sync.exceptions import ExternalServiceError
from asana_pr_sync.models.domain import Comment, Project, Section, Task
from asana_pr_sync.providers.base import TaskTrackerProvider


class FakeTracker(TaskTrackerProvider):
    """In-memory task tracker.

    Failures are injected by adding ids to the ``fail_*`` sets.
    """

    def __init__(self) -> None:
        self.connected = False
        self.tasks: dict[str, Task] = {}
        self.comments: dict[str, list[Comment]] = {}
        self.sections: dict[str, list[Section]] = {}
        self.moves: list[tuple[str, str]] = []
        self.completion_calls: list[tuple[str, bool]] = []
        self.lookback_limits: list[int] = []
        self.fail_get_comments: set[str] = set()
        self.fail_add_comment: set[str] = set()
        self.fail_delete_comment: set[str] = set()
        self.fail_complete: set[str] = set()
        self.fail_get_task: set[str] = set()
        self.fail_sections: set[str] = set()
        self._ids = itertools.count(9000)

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def get_comments(self, task_id: str, limit: int = 200) -> list[Comment]:
        self.lookback_limits.append(limit)
        if task_id in self.fail_get_comments:
            raise ExternalServiceError("stories unavailable", status_code=500)
        return list(self.comments.get(task_id, []))[:limit]

    async def add_comment(self, task_id: str, body: str, is_pinned: bool = False) -> Comment:
        if task_id in self.fail_add_comment:
            raise ExternalServiceError("comment rejected", status_code=403)
        comment = Comment(id=str(next(self._ids)), body=body, is_pinned=is_pinned)
        self.comments.setdefault(task_id, []).append(comment)
        return comment

    async def delete_comment(self, comment_id: str) -> None:
        if comment_id in self.fail_delete_comment:
            raise ExternalServiceError("delete rejected", status_code=403)
        for comments in self.comments.values():
            comments[:] = [c for c in comments if c.id != comment_id]

    async def get_task(self, task_id: str) -> Task:
        if task_id in self.fail_get_task or task_id not in self.tasks:
            raise ExternalServiceError(f"task {task_id} unavailable", status_code=404)
        return self.tasks[task_id]

    async def set_task_completed(self, task_id: str, completed: bool) -> None:
        self.completion_calls.append((task_id, completed))
        if task_id in self.fail_complete:
            raise ExternalServiceError("update rejected", status_code=500)
        if task_id in self.tasks:
            self.tasks[task_id].completed = completed

    async def get_sections(self, project_id: str) -> list[Section]:
        if project_id in self.fail_sections:
            raise ExternalServiceError("sections unavailable", status_code=500)
        return list(self.sections.get(project_id, []))

    async def add_task_to_section(self, section_id: str, task_id: str) -> None:
        self.moves.append((section_id, task_id))


@pytest.fixture
def tracker() -> FakeTracker:
    """Tracker with two tasks in an engineering project and a design project."""
    fake = FakeTracker()
    fake.tasks["222"] = Task(
        id="222",
        name="Implement login",
        projects=[Project(id="111", name="Engineering"), Project(id="333", name="Design")],
    )
    fake.tasks["444"] = Task(id="444", name="Fix logout", projects=[Project(id="111", name="Engineering")])
    fake.sections["111"] = [
        Section(id="s-backlog", name="Backlog"),
        Section(id="s-review", name="In Review"),
        Section(id="s-done", name="Done"),
    ]
    fake.sections["333"] = [Section(id="s-design-review", name="In Review")]
    return fake


@pytest.fixture
def pr_body() -> str:
    """Pull request description linking two tasks."""
    return (
        "Adds SSO login.\n\n"
        "Asana: https://app.asana.com/0/1200000000000000/project/111/task/222\n"
        "Asana: https://app.asana.com/0/1200000000000000/project/111/task/444\n"
    )


@pytest.fixture
def pull_request_event(tmp_path: Path, pr_body: str) -> Path:
    """GitHub pull_request event payload written to disk."""
    event = {
        "action": "opened",
        "pull_request": {
            "number": 17,
            "body": pr_body,
            "head": {"sha": "abc123def456", "ref": "feature/sso"},
        },
        "repository": {"full_name": "acme/webapp"},
    }
    event_path = tmp_path / "event.json"
    event_path.write_text(json.dumps(event))
    return event_path


@pytest.fixture(autouse=True)
def clean_github_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the runner's own GitHub and INPUT_* variables out of the tests."""
    for name in ("GITHUB_EVENT_PATH", "GITHUB_REPOSITORY", "GITHUB_API_URL", "PR_NUMBER", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("INPUT_"):
            monkeypatch.delenv(name, raising=False)
