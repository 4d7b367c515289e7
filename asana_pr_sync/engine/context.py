"""Pull request context resolution.

The pull request is taken from the event payload when the workflow was
triggered by a pull request event. Manually dispatched workflows have no
pull request in their payload and name one through ``PR_NUMBER`` instead;
it is then fetched from GitHub.
"""

from collections.abc import Callable
from typing import Any

import structlog

from asana_pr_sync.config.settings import GitHubEnvironment
from asana_pr_sync.exceptions import ConfigurationError, ExternalServiceError
from asana_pr_sync.models.domain import PullRequestContext
from asana_pr_sync.providers.github_rest import GitHubRestProvider

log = structlog.get_logger(__name__)

GitHubFactory = Callable[[str, str, str], GitHubRestProvider]


def repository_name(env: GitHubEnvironment, event: dict[str, Any]) -> str | None:
    """Return ``owner/name`` from the environment or the event payload."""
    if env.github_repository:
        return env.github_repository
    return (event.get("repository") or {}).get("full_name")


def context_from_event(event: dict[str, Any], repository: str | None = None) -> PullRequestContext | None:
    """Build the context from a pull request event payload, if it is one."""
    pull_request = event.get("pull_request")
    if not pull_request:
        return None
    return PullRequestContext(
        body=pull_request.get("body") or "",
        head_sha=pull_request["head"]["sha"],
        number=pull_request.get("number"),
        repository=repository,
    )


async def resolve_pull_request(
    env: GitHubEnvironment,
    github_token: str | None,
    github_factory: GitHubFactory = GitHubRestProvider,
) -> PullRequestContext:
    """Find the pull request this invocation runs against.

    Args:
        env: GitHub runtime environment
        github_token: Token used when the PR has to be fetched
        github_factory: Builds the GitHub provider from (token, repository, api_url)

    Raises:
        ConfigurationError: If there is no pull request context, the token or
            repository needed to fetch it is missing, or the fetch fails
    """
    event = env.load_event()
    repository = repository_name(env, event)

    context = context_from_event(event, repository)
    if context is not None:
        log.info("pull_request_from_event", number=context.number, sha=context.head_sha)
        return context

    if env.pr_number is None:
        raise ConfigurationError(
            "No pull request context available. Either run in a PR context or provide PR_NUMBER environment variable."
        )

    if not github_token:
        raise ConfigurationError(
            "github-token input is required when running from manually dispatched workflows with PR_NUMBER"
        )
    if not repository:
        raise ConfigurationError("GITHUB_REPOSITORY is required to fetch a pull request by number")

    github = github_factory(github_token, repository, env.github_api_url)
    try:
        await github.connect()
        context = await github.get_pull_request(env.pr_number)
    except ExternalServiceError as e:
        raise ConfigurationError(f"Failed to fetch PR {env.pr_number}: {e.message}") from e
    finally:
        await github.disconnect()

    log.info("pull_request_fetched", number=context.number, sha=context.head_sha)
    return context
