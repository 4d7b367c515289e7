"""Provider clients for the task tracker (Asana) and the code host (GitHub)."""

from asana_pr_sync.providers.asana_rest import AsanaRestProvider
from asana_pr_sync.providers.base import TaskTrackerProvider
from asana_pr_sync.providers.github_rest import GitHubRestProvider

__all__ = ["AsanaRestProvider", "GitHubRestProvider", "TaskTrackerProvider"]
