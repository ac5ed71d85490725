# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Shared helpers."""

from datetime import datetime
from pathlib import Path
from typing import Callable

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def make_timestamp(now: datetime | None = None) -> str:
    """Get a backup timestamp (local time).

    Parameters
    ----------
    now : datetime | None
        The moment to format, defaults to the current local time.

    Returns
    -------
    str
        The ``YYYYMMDD_HHMMSS`` timestamp.
    """
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def format_size(num_bytes: float) -> str:
    """Format bytes into a human-readable string.

    Parameters
    ----------
    num_bytes : float
        The number of bytes.

    Returns
    -------
    str
        The human-readable string.
    """
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if num_bytes < 1024.0:
            return f"{num_bytes:3.1f} {unit}"
        num_bytes /= 1024.0
    return f"{num_bytes:.1f} PB"


def file_size(path: Path) -> str:
    """Get the human-readable size of a file, or '?' if unavailable."""
    try:
        return format_size(path.stat().st_size)
    except OSError:
        return "?"


def try_do(
    what: Callable[[], int],
    on_interrupt: Callable[[], None],
    on_error: Callable[[Exception], None],
) -> int:
    """Try calling a callable.

    Parameters
    ----------
    what : Callable[[], int]
        The callable to try.
    on_interrupt : Callable[[], None]
        The handler for a KeyboardInterrupt
    on_error: Callable[[Exception], None]
        The handler for other exceptions.

    Returns
    -------
    int
        The result of the operation.
    """
    try:
        return what()
    except KeyboardInterrupt:
        on_interrupt()
        return 130  # Standard exit code for SIGINT
    except Exception as e:  # pylint: disable=broad-exception-caught
        on_error(e)
        return 1
