"""Core domain models for asana-pr-sync.

Key Models:
    - TaskLink: Asana task URL found in a PR description
    - Task, Project, Section: Asana entities touched by the actions
    - Comment: Asana comment story
    - MoveTarget: (project name, section name) placement request
    - PullRequestContext: PR body and head commit
    - TaskOutcome, SyncReport: per-task and per-invocation results
"""

from asana_pr_sync.models.domain import (
    Comment,
    MoveTarget,
    Project,
    PullRequestContext,
    Section,
    SyncReport,
    Task,
    TaskLink,
    TaskOutcome,
)

__all__ = [
    "Comment",
    "MoveTarget",
    "Project",
    "PullRequestContext",
    "Section",
    "SyncReport",
    "Task",
    "TaskLink",
    "TaskOutcome",
]
