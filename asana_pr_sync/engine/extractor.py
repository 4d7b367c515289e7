"""Asana task link extraction.

Finds Asana task URLs in free-form text, typically a pull request
description. A URL only counts when it directly follows the configured
trigger phrase (whitespace in between is allowed); with an empty trigger
phrase every task URL in the text counts.

Recognized URL shape:
    https://app.asana.com/<digits>/<digits>/project/<project>/task/<task>

Key Exports:
    extract_task_ids: Task gids in order of appearance.
    find_task_links: Full TaskLink records in order of appearance.
    build_link_pattern: The compiled pattern for a trigger phrase.

Example:
    >>> extract_task_ids(
    ...     "Asana: https://app.asana.com/0/0/project/111/task/222",
    ...     "Asana:",
    ... )
    ['222']

Every call scans the text from the start with a fresh iterator, so results
do not depend on earlier calls. Duplicate URLs are kept: each occurrence is
reported.
"""

import re

import structlog

from asana_pr_sync.models.domain import TaskLink

log = structlog.get_logger(__name__)

TASK_URL_PATTERN = (
    r"(?P<url>https://app\.asana\.com/(?P<workspace>\d+)/(?P<view>\d+)"
    r"/project/(?P<project>\d+)/task/(?P<task>\d+))"
)


def build_link_pattern(trigger_phrase: str = "") -> re.Pattern[str]:
    """Compile the link pattern for a trigger phrase.

    The trigger phrase is matched literally.
    """
    prefix = re.escape(trigger_phrase) if trigger_phrase else ""
    return re.compile(rf"{prefix}\s*{TASK_URL_PATTERN}")


def find_task_links(text: str | None, trigger_phrase: str = "") -> list[TaskLink]:
    """Return every task link following the trigger phrase, left to right."""
    if not text:
        return []

    pattern = build_link_pattern(trigger_phrase)
    links: list[TaskLink] = []
    for match in pattern.finditer(text):
        task_id = match.group("task")
        if not task_id:
            log.error("invalid_task_url", trigger_phrase=trigger_phrase, match=match.group(0))
            continue
        links.append(TaskLink(task_id=task_id, project_id=match.group("project"), url=match.group("url")))

    return links


def extract_task_ids(text: str | None, trigger_phrase: str = "") -> list[str]:
    """Return the task gids linked in ``text``, duplicates included."""
    task_ids = [link.task_id for link in find_task_links(text, trigger_phrase)]
    log.info("task_links_found", count=len(task_ids), task_ids=task_ids)
    return task_ids
