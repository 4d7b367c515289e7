"""Enumerations for asana-pr-sync actions and results."""

from enum import Enum


class SyncAction(str, Enum):
    """Actions that can be requested for a single invocation."""

    ASSERT_LINK = "assert-link"
    ADD_COMMENT = "add-comment"
    REMOVE_COMMENT = "remove-comment"
    COMPLETE_TASK = "complete-task"
    MOVE_SECTION = "move-section"

    def __str__(self) -> str:
        return self.value


class StatusState(str, Enum):
    """Commit status states posted by the link check."""

    SUCCESS = "success"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class OutcomeStatus(str, Enum):
    """Result of applying an action to one task (or one move target).

    A task listed in a report's items was attempted; its outcome says
    whether the tracker call actually went through.
    """

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value
