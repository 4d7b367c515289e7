"""Idempotent synchronization of Asana tasks.

TaskSynchronizer applies one action to every linked task. Tasks are handled
one at a time in the order they were linked, and a failing tracker call for
one task is logged and recorded as a failed outcome without stopping the
rest of the batch. The exception is the comment lookup: if stories cannot
be fetched, the error propagates, because "lookup failed" must not be
mistaken for "no comment yet" (that would post duplicates).
"""

import asyncio

import structlog

from asana_pr_sync.engine.markers import has_marker, tag_body
from asana_pr_sync.enums import OutcomeStatus, StatusState, SyncAction
from asana_pr_sync.exceptions import ExternalServiceError
from asana_pr_sync.models.domain import Comment, MoveTarget, SyncReport, Task, TaskOutcome
from asana_pr_sync.providers.base import TaskTrackerProvider

log = structlog.get_logger(__name__)

COMMENT_LOOKBACK = 200


def link_status(task_count: int, link_required: bool) -> StatusState:
    """Status of the link check for a pull request with ``task_count`` links."""
    if not link_required or task_count > 0:
        return StatusState.SUCCESS
    return StatusState.ERROR


class TaskSynchronizer:
    """Apply actions to Asana tasks linked from a pull request."""

    def __init__(self, tracker: TaskTrackerProvider, comment_lookback: int = COMMENT_LOOKBACK):
        """Initialize synchronizer.

        Args:
            tracker: Connected task tracker provider
            comment_lookback: Number of stories searched for a marker
        """
        self.tracker = tracker
        self.comment_lookback = comment_lookback

    # ------------------------------------------------------------------
    # Comment markers
    # ------------------------------------------------------------------

    async def find_comment(self, task_id: str, marker: str) -> Comment | None:
        """Return the oldest comment on the task carrying ``marker``.

        Only the first ``comment_lookback`` stories are searched.

        Raises:
            ExternalServiceError: If the stories cannot be fetched
        """
        comments = await self.tracker.get_comments(task_id, limit=self.comment_lookback)
        return next((comment for comment in comments if has_marker(comment.body, marker)), None)

    async def add_comment(
        self,
        task_id: str,
        marker: str | None,
        body: str,
        is_pinned: bool = False,
    ) -> Comment | None:
        """Post a comment tagged with ``marker``.

        Returns None, after logging, if the tracker rejects the comment.
        """
        try:
            return await self.tracker.add_comment(task_id, tag_body(body, marker), is_pinned=is_pinned)
        except ExternalServiceError as e:
            log.error("add_comment_failed", task_id=task_id, error=str(e))
            return None

    async def remove_comment(self, task_id: str, marker: str) -> str | None:
        """Delete the comment carrying ``marker``, if there is one.

        Returns:
            Id of the comment found, or None when the task has none
        """
        comment = await self.find_comment(task_id, marker)
        if comment is None:
            return None
        await self._delete_comment(task_id, comment)
        return comment.id

    async def _delete_comment(self, task_id: str, comment: Comment) -> bool:
        log.info("removing_comment", task_id=task_id, comment_id=comment.id)
        try:
            await self.tracker.delete_comment(comment.id)
        except ExternalServiceError as e:
            log.error("delete_comment_failed", task_id=task_id, comment_id=comment.id, error=str(e))
            return False
        return True

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def assert_link(self, task_ids: list[str], link_required: bool) -> SyncReport:
        """Evaluate the link check. No tracker call is made."""
        state = link_status(len(task_ids), link_required)
        log.info("link_check", task_count=len(task_ids), link_required=link_required, state=state.value)
        return SyncReport(action=SyncAction.ASSERT_LINK, task_ids=list(task_ids), status=state)

    async def add_comments(
        self,
        task_ids: list[str],
        body: str,
        marker: str | None = None,
        is_pinned: bool = False,
    ) -> SyncReport:
        """Add a comment to every task, skipping tasks that already have it."""
        report = SyncReport(action=SyncAction.ADD_COMMENT, task_ids=list(task_ids))

        for task_id in task_ids:
            if marker:
                existing = await self.find_comment(task_id, marker)
                if existing:
                    log.info("comment_exists", task_id=task_id, comment_id=existing.id)
                    report.outcomes.append(
                        TaskOutcome(task_id=task_id, status=OutcomeStatus.SKIPPED, detail=existing.id)
                    )
                    continue

            comment = await self.add_comment(task_id, marker, body, is_pinned)
            if comment is None:
                report.outcomes.append(TaskOutcome(task_id=task_id, status=OutcomeStatus.FAILED))
                continue

            report.items.append(comment)
            report.outcomes.append(TaskOutcome(task_id=task_id, status=OutcomeStatus.SUCCEEDED, detail=comment.id))

        return report

    async def remove_comments(self, task_ids: list[str], marker: str) -> SyncReport:
        """Remove the marked comment from every task that has one."""
        report = SyncReport(action=SyncAction.REMOVE_COMMENT, task_ids=list(task_ids))

        for task_id in task_ids:
            comment = await self.find_comment(task_id, marker)
            if comment is None:
                report.outcomes.append(TaskOutcome(task_id=task_id, status=OutcomeStatus.SKIPPED))
                continue

            deleted = await self._delete_comment(task_id, comment)
            report.items.append(comment.id)
            report.outcomes.append(
                TaskOutcome(
                    task_id=task_id,
                    status=OutcomeStatus.SUCCEEDED if deleted else OutcomeStatus.FAILED,
                    detail=comment.id,
                )
            )

        return report

    async def complete_tasks(self, task_ids: list[str], completed: bool) -> SyncReport:
        """Set the completion flag on every task."""
        report = SyncReport(action=SyncAction.COMPLETE_TASK, task_ids=list(task_ids))

        for task_id in task_ids:
            log.info("marking_task", task_id=task_id, completed=completed)
            try:
                await self.tracker.set_task_completed(task_id, completed)
            except ExternalServiceError as e:
                log.error("complete_task_failed", task_id=task_id, error=str(e))
                report.outcomes.append(TaskOutcome(task_id=task_id, status=OutcomeStatus.FAILED, detail=str(e)))
            else:
                report.outcomes.append(TaskOutcome(task_id=task_id, status=OutcomeStatus.SUCCEEDED))
            report.items.append(task_id)

        return report

    async def move_sections(self, task_ids: list[str], targets: list[MoveTarget]) -> SyncReport:
        """Move every task into the configured sections."""
        report = SyncReport(action=SyncAction.MOVE_SECTION, task_ids=list(task_ids))

        for task_id in task_ids:
            report.outcomes.extend(await self.move_task(task_id, targets))
            report.items.append(task_id)

        return report

    async def move_task(self, task_id: str, targets: list[MoveTarget]) -> list[TaskOutcome]:
        """Apply every move target to one task.

        Targets run concurrently and are all awaited; each yields its own
        outcome, so a missing project or section for one target does not
        affect the others. An unexpected error in one target is recorded as a
        failed outcome for that target only.
        """
        try:
            task = await self.tracker.get_task(task_id)
        except ExternalServiceError as e:
            log.error("get_task_failed", task_id=task_id, error=str(e))
            return [
                TaskOutcome(task_id=task_id, status=OutcomeStatus.FAILED, detail=str(e), target=str(target))
                for target in targets
            ]

        results = await asyncio.gather(
            *(self._move_to_target(task, target) for target in targets),
            return_exceptions=True,
        )

        outcomes: list[TaskOutcome] = []
        for target, result in zip(targets, results):
            if isinstance(result, TaskOutcome):
                outcomes.append(result)
                continue
            if not isinstance(result, Exception):
                raise result
            log.error("move_section_failed", task_id=task.id, target=str(target), error=repr(result))
            outcomes.append(
                TaskOutcome(task_id=task.id, status=OutcomeStatus.FAILED, detail=repr(result), target=str(target))
            )
        return outcomes

    async def _move_to_target(self, task: Task, target: MoveTarget) -> TaskOutcome:
        project = task.find_project(target.project)
        if project is None:
            log.info("project_not_found", task_id=task.id, project=target.project)
            return TaskOutcome(
                task_id=task.id,
                status=OutcomeStatus.SKIPPED,
                detail=f'task is not in project "{target.project}"',
                target=str(target),
            )

        try:
            sections = await self.tracker.get_sections(project.id)
            section = next((s for s in sections if s.name == target.section), None)
            if section is None:
                log.error("section_not_found", task_id=task.id, project=target.project, section=target.section)
                return TaskOutcome(
                    task_id=task.id,
                    status=OutcomeStatus.FAILED,
                    detail=f"section {target.section} not found",
                    target=str(target),
                )

            await self.tracker.add_task_to_section(section.id, task.id)
        except ExternalServiceError as e:
            log.error("move_section_failed", task_id=task.id, target=str(target), error=str(e))
            return TaskOutcome(task_id=task.id, status=OutcomeStatus.FAILED, detail=str(e), target=str(target))

        log.info("task_moved", task_id=task.id, target=str(target))
        return TaskOutcome(task_id=task.id, status=OutcomeStatus.SUCCEEDED, target=str(target))
