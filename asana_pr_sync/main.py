"""CLI entry point for asana-pr-sync.

Inside a GitHub Action the inputs arrive as ``INPUT_<NAME>`` environment
variables; every option below falls back to its variable, so the action
only needs to call ``asana-pr-sync run``.
"""

import asyncio
import json
import sys
from typing import TextIO

import click
import structlog

from asana_pr_sync.config.settings import ActionInputs, GitHubEnvironment, parse_targets
from asana_pr_sync.engine.extractor import find_task_links
from asana_pr_sync.engine.orchestrator import SyncOrchestrator
from asana_pr_sync.enums import SyncAction
from asana_pr_sync.exceptions import AsanaSyncError
from asana_pr_sync.models.domain import SyncReport
from asana_pr_sync.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


def _input(name: str) -> str:
    """Environment variable GitHub Actions uses for input ``name``."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


@click.group()
@click.option("--log-level", default="INFO", envvar="LOG_LEVEL", help="Logging level")
@click.option(
    "--log-format",
    type=click.Choice(["json", "console"]),
    default="json",
    help="Log output format",
)
def cli(log_level: str, log_format: str) -> None:
    """asana-pr-sync: keep Asana tasks in step with pull requests."""
    configure_logging(log_level, json_output=log_format == "json")


@cli.command()
@click.option("--asana-pat", envvar=_input("asana-pat"), required=True, help="Asana personal access token")
@click.option(
    "--action",
    "action_name",
    envvar=_input("action"),
    type=click.Choice([action.value for action in SyncAction]),
    required=True,
    help="Action to perform",
)
@click.option("--trigger-phrase", envvar=_input("trigger-phrase"), default="", help="Text preceding task URLs")
@click.option("--github-token", envvar=_input("github-token"), default=None, help="GitHub token")
@click.option("--link-required", envvar=_input("link-required"), type=click.BOOL, default=None)
@click.option("--comment-id", envvar=_input("comment-id"), default=None, help="Comment marker")
@click.option("--text", envvar=_input("text"), default=None, help="Comment body")
@click.option("--is-pinned", envvar=_input("is-pinned"), type=click.BOOL, default=False)
@click.option("--is-complete", envvar=_input("is-complete"), type=click.BOOL, default=None)
@click.option("--targets", envvar=_input("targets"), default=None, help="JSON/YAML list of {project, section}")
def run(
    asana_pat: str,
    action_name: str,
    trigger_phrase: str,
    github_token: str | None,
    link_required: bool | None,
    comment_id: str | None,
    text: str | None,
    is_pinned: bool,
    is_complete: bool | None,
    targets: str | None,
) -> None:
    """Apply an action to every Asana task linked from the pull request."""
    try:
        inputs = ActionInputs.build(
            asana_pat=asana_pat,
            action=action_name,
            trigger_phrase=trigger_phrase or "",
            github_token=github_token or None,
            link_required=link_required,
            comment_id=comment_id or None,
            text=text,
            is_pinned=is_pinned,
            is_complete=is_complete,
            targets=parse_targets(targets),
        )
        report = asyncio.run(SyncOrchestrator(inputs, GitHubEnvironment.load()).run())
    except AsanaSyncError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("run_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    _echo_report(report)


@cli.command()
@click.option("--trigger-phrase", envvar=_input("trigger-phrase"), default="", help="Text preceding task URLs")
@click.argument("source", type=click.File("r"), default="-")
def extract(trigger_phrase: str, source: TextIO) -> None:
    """Print the Asana task links found in SOURCE (default: stdin)."""
    for link in find_task_links(source.read(), trigger_phrase):
        click.echo(f"{link.task_id}\t{link.url}")


def _echo_report(report: SyncReport) -> None:
    click.echo(json.dumps(report.to_dict(), indent=2))


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
