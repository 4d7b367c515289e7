"""Tests for asana_pr_sync/engine/context.py."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from asana_pr_sync.config.settings import GitHubEnvironment
from asana_pr_sync.engine.context import context_from_event, resolve_pull_request
from asana_pr_sync.exceptions import ConfigurationError, ExternalServiceError
from asana_pr_sync.models.domain import PullRequestContext
from asana_pr_sync.providers.github_rest import GitHubRestProvider


@pytest.fixture
def github() -> AsyncMock:
    """Mock GitHub provider returning PR 42."""
    provider = AsyncMock(spec=GitHubRestProvider)
    provider.get_pull_request = AsyncMock(
        return_value=PullRequestContext(body="Asana: link", head_sha="fff000", number=42, repository="acme/webapp")
    )
    return provider


@pytest.fixture
def github_factory(github: AsyncMock) -> MagicMock:
    return MagicMock(return_value=github)


def test_context_from_event_without_pull_request() -> None:
    """Should return None for non-PR events."""
    assert context_from_event({"ref": "refs/heads/main"}) is None


def test_context_from_event_null_body() -> None:
    """Should treat a null body as empty."""
    context = context_from_event({"pull_request": {"body": None, "head": {"sha": "abc"}, "number": 3}})

    assert context is not None
    assert context.body == ""
    assert context.head_sha == "abc"


@pytest.mark.asyncio
async def test_event_payload_wins(pull_request_event: Path, github_factory: MagicMock) -> None:
    """Should use the payload and not call GitHub."""
    env = GitHubEnvironment(github_event_path=str(pull_request_event), pr_number=99)

    context = await resolve_pull_request(env, "ghp", github_factory)

    assert context.number == 17
    assert context.head_sha == "abc123def456"
    assert context.repository == "acme/webapp"
    github_factory.assert_not_called()


@pytest.mark.asyncio
async def test_fetch_by_pr_number(github_factory: MagicMock, github: AsyncMock) -> None:
    """Should fetch the PR named by PR_NUMBER."""
    env = GitHubEnvironment(github_repository="acme/webapp", pr_number=42)

    context = await resolve_pull_request(env, "ghp", github_factory)

    assert context.number == 42
    github_factory.assert_called_once_with("ghp", "acme/webapp", "https://api.github.com")
    github.get_pull_request.assert_awaited_once_with(42)
    github.disconnect.assert_awaited_once()


@pytest.mark.asyncio
async def test_pr_number_requires_token(github_factory: MagicMock) -> None:
    """Should demand a github-token for manual runs."""
    env = GitHubEnvironment(github_repository="acme/webapp", pr_number=42)

    with pytest.raises(ConfigurationError, match="github-token"):
        await resolve_pull_request(env, None, github_factory)


@pytest.mark.asyncio
async def test_no_context_available(github_factory: MagicMock) -> None:
    """Should fail when there is neither a payload PR nor PR_NUMBER."""
    env = GitHubEnvironment(github_repository="acme/webapp")

    with pytest.raises(ConfigurationError, match="No pull request context"):
        await resolve_pull_request(env, "ghp", github_factory)


@pytest.mark.asyncio
async def test_fetch_failure_is_fatal(github_factory: MagicMock, github: AsyncMock) -> None:
    """Should turn a failed fetch into a configuration error."""
    github.get_pull_request.side_effect = ExternalServiceError("Cannot fetch pull request 42", status_code=404)
    env = GitHubEnvironment(github_repository="acme/webapp", pr_number=42)

    with pytest.raises(ConfigurationError, match="Failed to fetch PR 42"):
        await resolve_pull_request(env, "ghp", github_factory)
    github.disconnect.assert_awaited_once()
