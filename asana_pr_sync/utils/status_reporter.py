"""Status reporting for the link check."""

import structlog

from asana_pr_sync.enums import StatusState
from asana_pr_sync.providers.github_rest import GitHubRestProvider

log = structlog.get_logger(__name__)

LINK_STATUS_CONTEXT = "asana-link-presence"
LINK_STATUS_DESCRIPTION = "asana link not found"


class LinkStatusReporter:
    """Report whether a pull request links an Asana task as a commit status."""

    def __init__(self, github: GitHubRestProvider) -> None:
        """Initialize with a connected GitHub provider."""
        self.github = github

    async def report(self, sha: str, state: StatusState) -> None:
        """Post the link status for ``sha``."""
        log.info("setting_link_status", sha=sha, state=state.value)
        await self.github.create_commit_status(
            sha=sha,
            state=state,
            context=LINK_STATUS_CONTEXT,
            description=LINK_STATUS_DESCRIPTION,
        )
