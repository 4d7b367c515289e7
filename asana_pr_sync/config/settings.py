"""
Configuration for a single invocation.

Action inputs arrive the way GitHub Actions passes them (``INPUT_<NAME>``
environment variables, or the matching CLI options) and are validated here
per action. The GitHub runtime environment (event payload, repository,
``PR_NUMBER``) is read with pydantic-settings.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from asana_pr_sync.enums import SyncAction
from asana_pr_sync.exceptions import ConfigurationError
from asana_pr_sync.models.domain import MoveTarget


class ActionInputs(BaseModel):
    """Inputs of one invocation.

    Only ``asana_pat`` and ``action`` are always required; the rest depend
    on the action and are checked by :meth:`validate_for_action`.
    """

    asana_pat: SecretStr = Field(..., description="Asana personal access token")
    action: SyncAction = Field(..., description="Action to perform")
    trigger_phrase: str = Field(default="", description="Literal text that must precede a task URL")
    github_token: SecretStr | None = Field(default=None, description="GitHub token")
    link_required: bool | None = Field(default=None, description="Fail the link check when no task is linked")
    comment_id: str | None = Field(default=None, description="Marker identifying the comment")
    text: str | None = Field(default=None, description="Comment body")
    is_pinned: bool = Field(default=False, description="Pin the added comment")
    is_complete: bool | None = Field(default=None, description="Completion state to set")
    targets: list[MoveTarget] = Field(default_factory=list, description="Sections to move tasks into")

    def validate_for_action(self) -> ActionInputs:
        """Check that the inputs the selected action needs are present.

        Raises:
            ConfigurationError: If a required input is missing
        """
        missing: list[str] = []

        if self.action == SyncAction.ASSERT_LINK:
            if not self.github_token or not self.github_token.get_secret_value():
                missing.append("github-token")
            if self.link_required is None:
                missing.append("link-required")
        elif self.action == SyncAction.ADD_COMMENT:
            if not self.text:
                missing.append("text")
        elif self.action == SyncAction.REMOVE_COMMENT:
            if not self.comment_id:
                missing.append("comment-id")
        elif self.action == SyncAction.COMPLETE_TASK:
            if self.is_complete is None:
                missing.append("is-complete")
        elif self.action == SyncAction.MOVE_SECTION:
            if not self.targets:
                missing.append("targets")

        if missing:
            raise ConfigurationError(f"Input required and not supplied for {self.action}: {', '.join(missing)}")
        return self

    @classmethod
    def build(cls, **values: Any) -> ActionInputs:
        """Create and validate inputs, converting validation failures.

        Raises:
            ConfigurationError: If values are invalid or required ones are missing
        """
        try:
            inputs = cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid action inputs: {e}") from e
        return inputs.validate_for_action()


def parse_targets(raw: str | None) -> list[MoveTarget]:
    """Parse the ``targets`` input.

    Accepts a JSON array or the equivalent YAML block list of
    ``{project, section}`` mappings.

    Raises:
        ConfigurationError: If the input is not a list of valid targets
    """
    if raw is None or not raw.strip():
        return []

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid targets input: {e}") from e

    if not isinstance(data, list):
        raise ConfigurationError("targets must be a list of {project, section} objects")

    try:
        return [MoveTarget.model_validate(item) for item in data]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid move target: {e}") from e


class GitHubEnvironment(BaseSettings):
    """Runtime values provided by GitHub Actions (or set by hand)."""

    model_config = SettingsConfigDict(case_sensitive=False, env_ignore_empty=True, extra="ignore")

    github_event_path: str | None = Field(default=None, description="Path to the event payload JSON")
    github_repository: str | None = Field(default=None, description="owner/name of the repository")
    github_api_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    pr_number: int | None = Field(default=None, description="Pull request number for manual runs")

    @classmethod
    def load(cls) -> GitHubEnvironment:
        """Read the environment, converting validation failures.

        Raises:
            ConfigurationError: If a variable has an invalid value
        """
        try:
            return cls()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid GitHub environment: {e}") from e

    def load_event(self) -> dict[str, Any]:
        """Read the event payload, or return an empty dict when there is none.

        Raises:
            ConfigurationError: If the payload file exists but cannot be read
        """
        if not self.github_event_path:
            return {}

        event_file = Path(self.github_event_path)
        if not event_file.exists():
            return {}

        try:
            with open(event_file) as f:
                event = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read event payload: {self.github_event_path}") from e

        return event if isinstance(event, dict) else {}
