"""GitHub provider implementation using PyGithub."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.PullRequest import PullRequest as GHPullRequest  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from asana_pr_sync.enums import StatusState
from asana_pr_sync.exceptions import ExternalServiceError
from asana_pr_sync.models.domain import PullRequestContext

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous PyGithub call in a thread pool."""
    return await asyncio.to_thread(func)


class GitHubRestProvider:
    """Pull request lookup and commit statuses through the GitHub API."""

    def __init__(
        self,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub provider.

        Args:
            token: GitHub token with access to the repository
            repository: Repository in ``owner/name`` form
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.repository = repository
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    async def connect(self) -> None:
        """Initialize GitHub client."""

        def _connect() -> tuple[Github, GHRepository]:
            client = Github(auth=Auth.Token(self.token), base_url=self.base_url)
            return client, client.get_repo(self.repository)

        try:
            self._client, self._repo = await _run_sync(_connect)
        except GithubException as e:
            log.error("github_connect_failed", repository=self.repository, error=str(e))
            raise ExternalServiceError(f"Cannot access repository {self.repository}", status_code=e.status) from e

        log.info("github_connected", base_url=self.base_url, repository=self.repository)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repo = None

    async def get_pull_request(self, pr_number: int) -> PullRequestContext:
        """Get pull request body and head commit by number."""
        log.info("get_pull_request", number=pr_number)

        try:
            gh_pr: GHPullRequest = await _run_sync(lambda: self._repository.get_pull(pr_number))
        except GithubException as e:
            log.error("github_get_pr_failed", number=pr_number, error=str(e))
            raise ExternalServiceError(f"Cannot fetch pull request {pr_number}", status_code=e.status) from e

        return PullRequestContext(
            body=gh_pr.body or "",
            head_sha=gh_pr.head.sha,
            number=gh_pr.number,
            repository=self.repository,
        )

    async def create_commit_status(
        self,
        sha: str,
        state: StatusState,
        context: str,
        description: str,
    ) -> None:
        """Set a commit status on ``sha``."""
        log.info("create_commit_status", sha=sha, state=state.value, context=context)

        def _create_status() -> None:
            commit = self._repository.get_commit(sha)
            commit.create_status(state=state.value, description=description, context=context)

        try:
            await _run_sync(_create_status)
        except GithubException as e:
            log.error("github_create_status_failed", sha=sha, error=str(e))
            raise ExternalServiceError(f"Cannot set commit status on {sha}", status_code=e.status) from e

    @property
    def _repository(self) -> GHRepository:
        if self._repo is None:
            raise ExternalServiceError("GitHub provider is not connected")
        return self._repo
