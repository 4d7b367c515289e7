"""Configuration for asana-pr-sync."""

from asana_pr_sync.config.settings import ActionInputs, GitHubEnvironment, parse_targets

__all__ = ["ActionInputs", "GitHubEnvironment", "parse_targets"]
