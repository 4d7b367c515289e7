"""Tests for asana_pr_sync/utils/status_reporter.py."""

from unittest.mock import AsyncMock

import pytest

from asana_pr_sync.engine.synchronizer import link_status
from asana_pr_sync.enums import StatusState
from asana_pr_sync.exceptions import ExternalServiceError
from asana_pr_sync.providers.github_rest import GitHubRestProvider
from asana_pr_sync.utils.status_reporter import LinkStatusReporter


@pytest.mark.parametrize(
    ("task_count", "link_required", "expected"),
    [
        (0, True, StatusState.ERROR),
        (0, False, StatusState.SUCCESS),
        (1, True, StatusState.SUCCESS),
        (3, False, StatusState.SUCCESS),
    ],
)
def test_link_status(task_count, link_required, expected):
    assert link_status(task_count, link_required) == expected


@pytest.mark.asyncio
async def test_report_posts_fixed_context_and_description():
    """Both states carry the same context and description."""
    github = AsyncMock(spec=GitHubRestProvider)

    await LinkStatusReporter(github).report("abc123", StatusState.SUCCESS)

    github.create_commit_status.assert_awaited_once_with(
        sha="abc123",
        state=StatusState.SUCCESS,
        context="asana-link-presence",
        description="asana link not found",
    )


@pytest.mark.asyncio
async def test_report_failure_propagates():
    github = AsyncMock(spec=GitHubRestProvider)
    github.create_commit_status.side_effect = ExternalServiceError("status rejected", status_code=403)

    with pytest.raises(ExternalServiceError):
        await LinkStatusReporter(github).report("abc123", StatusState.ERROR)
