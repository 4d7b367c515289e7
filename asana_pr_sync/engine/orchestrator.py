"""Invocation orchestrator.

Ties one run together: authorize the Asana client, resolve the pull
request, extract the linked tasks and dispatch the requested action.
"""

from collections.abc import Callable

import structlog

from asana_pr_sync.config.settings import ActionInputs, GitHubEnvironment
from asana_pr_sync.engine.context import GitHubFactory, resolve_pull_request
from asana_pr_sync.engine.extractor import extract_task_ids
from asana_pr_sync.engine.synchronizer import TaskSynchronizer
from asana_pr_sync.enums import SyncAction
from asana_pr_sync.exceptions import ConfigurationError
from asana_pr_sync.models.domain import PullRequestContext, SyncReport
from asana_pr_sync.providers.asana_rest import AsanaRestProvider
from asana_pr_sync.providers.base import TaskTrackerProvider
from asana_pr_sync.providers.github_rest import GitHubRestProvider
from asana_pr_sync.utils.status_reporter import LinkStatusReporter

log = structlog.get_logger(__name__)

TrackerFactory = Callable[[str], TaskTrackerProvider]


class SyncOrchestrator:
    """Run one action against the tasks linked from one pull request."""

    def __init__(
        self,
        inputs: ActionInputs,
        env: GitHubEnvironment,
        tracker_factory: TrackerFactory = AsanaRestProvider,
        github_factory: GitHubFactory = GitHubRestProvider,
    ):
        """Initialize orchestrator.

        Args:
            inputs: Validated action inputs
            env: GitHub runtime environment
            tracker_factory: Builds the tracker provider from the Asana token
            github_factory: Builds the GitHub provider from (token, repository, api_url)
        """
        self.inputs = inputs
        self.env = env
        self.tracker_factory = tracker_factory
        self.github_factory = github_factory

    async def run(self) -> SyncReport:
        """Execute the configured action.

        Raises:
            ConfigurationError: If the pull request cannot be resolved
            AuthorizationError: If Asana rejects the token
        """
        tracker = self.tracker_factory(self.inputs.asana_pat.get_secret_value())
        async with tracker:
            pr = await resolve_pull_request(self.env, self._github_token(), self.github_factory)
            log.info("looking_in_body", trigger_phrase=self.inputs.trigger_phrase, number=pr.number)
            task_ids = extract_task_ids(pr.body, self.inputs.trigger_phrase)

            log.info("calling_action", action=self.inputs.action.value, task_count=len(task_ids))
            report = await self.dispatch(TaskSynchronizer(tracker), task_ids, pr)

        if report.failed:
            log.warning("action_partially_failed", action=report.action.value, failed=len(report.failed))
        return report

    async def dispatch(
        self,
        synchronizer: TaskSynchronizer,
        task_ids: list[str],
        pr: PullRequestContext,
    ) -> SyncReport:
        """Apply the configured action to ``task_ids``."""
        inputs = self.inputs
        action = inputs.action

        if action == SyncAction.ASSERT_LINK:
            report = synchronizer.assert_link(task_ids, bool(inputs.link_required))
            await self._report_link_status(pr, report)
            return report
        if action == SyncAction.ADD_COMMENT:
            return await synchronizer.add_comments(
                task_ids,
                body=inputs.text or "",
                marker=inputs.comment_id,
                is_pinned=inputs.is_pinned,
            )
        if action == SyncAction.REMOVE_COMMENT:
            return await synchronizer.remove_comments(task_ids, inputs.comment_id or "")
        if action == SyncAction.COMPLETE_TASK:
            return await synchronizer.complete_tasks(task_ids, bool(inputs.is_complete))
        if action == SyncAction.MOVE_SECTION:
            return await synchronizer.move_sections(task_ids, inputs.targets)

        raise ConfigurationError(f"unexpected action {action}")

    async def _report_link_status(self, pr: PullRequestContext, report: SyncReport) -> None:
        if report.status is None:
            raise ConfigurationError("assert-link produced no status to report")

        token = self._github_token()
        repository = pr.repository or self.env.github_repository
        if not token or not repository:
            raise ConfigurationError("github-token and a repository are required for assert-link")

        github = self.github_factory(token, repository, self.env.github_api_url)
        await github.connect()
        try:
            await LinkStatusReporter(github).report(pr.head_sha, report.status)
        finally:
            await github.disconnect()

    def _github_token(self) -> str | None:
        if self.inputs.github_token is None:
            return None
        return self.inputs.github_token.get_secret_value() or None
