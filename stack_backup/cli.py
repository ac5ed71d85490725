# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Command line interface module."""

import logging
import logging.config
import sys
import warnings
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Callable, Optional, Tuple

import typer

from ._common import file_size, try_do
from ._logging import LogLevel, get_log_level, get_logging_config
from ._version import __version__
from .builder import BackupSetBuilder
from .config import Settings
from .coordinator import RestoreCoordinator, check_backup_path
from .errors import (
    CapabilityDegradedWarning,
    OperatorDeclinedError,
    StackBackupError,
)
from .models import BackupReport
from .privileges import elevate, resolve_identity, running_as_root

APP_NAME = "stack-backup"
APP_HELP = "Back up and restore a self-hosted compose stack"

LOG = logging.getLogger(__name__)

DEFAULT_SETTINGS = Settings.load()

app = typer.Typer(
    name=APP_NAME,
    help=APP_HELP,
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_short=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{APP_NAME} {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    log_level: LogLevel = typer.Option(
        default=get_log_level(),
        help="The log level",
        case_sensitive=False,
    ),
    project_root: Optional[Path] = typer.Option(
        default=DEFAULT_SETTINGS.project_root,
        help="The project root (skips git discovery)",
        show_default=False,
    ),
    elevate_: bool = typer.Option(
        DEFAULT_SETTINGS.elevate,
        "--elevate/--no-elevate",
        help="Re-run under sudo when not root",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Stack backup command line interface."""
    logging.config.dictConfig(get_logging_config(log_level.value))
    # already logged with a timestamp and severity
    warnings.filterwarnings("ignore", category=CapabilityDegradedWarning)
    ctx.obj = DEFAULT_SETTINGS.model_copy(
        update={
            "project_root": project_root,
            "elevate": elevate_,
            "log_level": log_level.value,
        }
    )
    LOG.debug("Effective settings: %s", ctx.obj.model_dump_json(indent=2))


def banner(title: str) -> None:
    """Log the run's header line."""
    LOG.info("=" * 70)
    LOG.info(
        "%s @ %s", title, datetime.now().strftime("%A, %d %B %Y %H:%M")
    )
    LOG.info("=" * 70)


def maybe_elevate(settings: Settings) -> None:
    """Re-execute under sudo if needed and allowed."""
    if settings.elevate and not running_as_root():
        elevate(sys.argv[1:])


def ask_yes_no(question: str) -> bool:
    """Ask the operator a question, only ``y`` or ``Y`` is a yes.

    Parameters
    ----------
    question : str
        The question.

    Returns
    -------
    bool
        Whether the operator agreed.

    Raises
    ------
    OperatorDeclinedError
        If there is no answer at all (closed input).
    """
    try:
        answer = typer.prompt(
            f"{question} (y/N)", default="", show_default=False
        )
    except (typer.Abort, EOFError) as error:
        raise OperatorDeclinedError("No answer given") from error
    return answer in ("y", "Y")


def log_backup_report(report: BackupReport) -> None:
    """Log what a backup run produced."""
    LOG.info("=" * 70)
    for outcome in report.outcomes:
        if outcome.status == "ok" and outcome.path is not None:
            LOG.info(
                "✓ %s: %s (%s)",
                outcome.kind.value,
                outcome.path.name,
                file_size(outcome.path),
            )
            if outcome.sha256:
                LOG.info("  sha256: %s", outcome.sha256)
        elif outcome.status == "failed":
            LOG.error("✗ %s: %s", outcome.kind.value, outcome.message)
        else:
            LOG.warning("- %s: skipped", outcome.kind.value)
    LOG.info(
        "Backup process finished. Backup location: %s",
        report.backup_set.path,
    )
    LOG.info("=" * 70)


def _do_backup(settings: Settings) -> int:
    banner("STACK BACKUP")
    try:
        maybe_elevate(settings)
        identity = resolve_identity(Path.cwd(), settings.project_root)
        report = BackupSetBuilder.from_settings(settings, identity).run()
    except StackBackupError as error:
        LOG.error("✗ %s", error)
        return 1
    log_backup_report(report)
    return 0


def _do_restore(settings: Settings, path: Path | None) -> int:
    banner("STACK RESTORE")
    problem = check_backup_path(path)
    if problem or path is None:
        LOG.error("✗ %s", problem)
        return 1
    path = path.resolve()
    try:
        maybe_elevate(settings)
        identity = resolve_identity(Path.cwd(), settings.project_root)
    except StackBackupError as error:
        LOG.error("✗ %s", error)
        return 1
    coordinator = RestoreCoordinator.from_settings(
        settings, identity, confirm=ask_yes_no
    )
    report = coordinator.run(path)
    LOG.debug("Restore states: %s", [s.value for s in report.history])
    return report.exit_code


def _handlers(
    what: str,
) -> Tuple[Callable[[], None], Callable[[Exception], None]]:
    def on_interrupt() -> None:
        LOG.warning("%s interrupted by user", what)

    def on_error(error: Exception) -> None:
        LOG.error("%s failed: %s", what, error, exc_info=True)

    return on_interrupt, on_error


@app.command()
def backup(ctx: typer.Context) -> None:
    """Create a new backup set under the backups directory."""
    on_interrupt, on_error = _handlers("Backup")
    code = try_do(
        partial(_do_backup, ctx.obj),
        on_interrupt=on_interrupt,
        on_error=on_error,
    )
    raise typer.Exit(code)


@app.command()
def restore(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(
        None,
        help="The backup set directory (backups/backup_YYYYMMDD_HHMMSS)",
        show_default=False,
    ),
) -> None:
    """Restore the stack from a backup set."""
    on_interrupt, on_error = _handlers("Restore")
    code = try_do(
        partial(_do_restore, ctx.obj, path),
        on_interrupt=on_interrupt,
        on_error=on_error,
    )
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
