# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Subprocess helpers."""

import logging
import shutil
import subprocess  # nosemgrep # nosec
from pathlib import Path
from typing import Sequence

LOG = logging.getLogger(__name__)

SENSITIVE_TOKENS = (
    "PGPASSWORD=",
    "POSTGRES_PASSWORD=",
    "Authorization:",
    "authorization:",
)
REDACT_FOLLOWING_FLAGS = {
    "--password",
    "--secret",
}


def redact(cmd: Sequence[str]) -> str:
    """Redact sensitive data in a command.

    Parameters
    ----------
    cmd : Sequence[str]
        The command to check.

    Returns
    -------
    str
        The string with sensitive data redacted.
    """
    parts = list(cmd)
    i = 0
    while i < len(parts):
        p = parts[i]
        for tok in SENSITIVE_TOKENS:
            if tok in p:
                parts[i] = p.split(tok, 1)[0] + tok + "***REDACTED***"
        if p in REDACT_FOLLOWING_FLAGS and i + 1 < len(parts):
            parts[i + 1] = "***REDACTED***"
            i += 2
            continue
        i += 1
    return " ".join(parts)


def _cwd(cwd: Path | None) -> str | None:
    return str(cwd) if cwd else None


def run(cmd: Sequence[str], cwd: Path | None = None) -> None:
    """Run a command, failing on a non-zero exit.

    Parameters
    ----------
    cmd : Sequence[str]
        The command and the arguments.
    cwd : Path | None
        The cwd to use for the command.
    """
    LOG.debug("Running: %s", redact(cmd))
    subprocess.run(cmd, check=True, cwd=_cwd(cwd))  # nosemgrep # nosec


def succeeds(cmd: Sequence[str], cwd: Path | None = None) -> bool:
    """Check whether a command exits with zero, hiding its output.

    Parameters
    ----------
    cmd : Sequence[str]
        The command and the arguments.
    cwd : Path | None
        The cwd to use for the command.

    Returns
    -------
    bool
        True if the command ran and exited with zero.
    """
    LOG.debug("Probing: %s", redact(cmd))
    try:
        result = subprocess.run(  # nosemgrep # nosec
            cmd,
            check=False,
            cwd=_cwd(cwd),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError:
        return False
    return result.returncode == 0


def output(cmd: Sequence[str], cwd: Path | None = None) -> str:
    """Run a command and get its (stripped) standard output.

    Parameters
    ----------
    cmd : Sequence[str]
        The command and the arguments.
    cwd : Path | None
        The cwd to use for the command.

    Returns
    -------
    str
        The output of the call.
    """
    LOG.debug("Calling: %s", redact(cmd))
    return (
        subprocess.check_output(cmd, cwd=_cwd(cwd))  # nosemgrep # nosec
        .decode(encoding="utf-8", errors="replace")
        .strip()
    )


def run_to_file(
    cmd: Sequence[str], out_file: Path, cwd: Path | None = None
) -> None:
    """Run a command with its standard output streamed into a file.

    Parameters
    ----------
    cmd : Sequence[str]
        The command and the arguments.
    out_file : Path
        Where stdout goes.
    cwd : Path | None
        The cwd to use for the command.

    Raises
    ------
    subprocess.CalledProcessError
        If the command fails.
    """
    LOG.debug("Running: %s > %s", redact(cmd), out_file)
    with out_file.open("wb") as handle:
        result = subprocess.run(  # nosemgrep # nosec
            cmd, stdout=handle, check=False, cwd=_cwd(cwd)
        )
    if result.returncode != 0:
        raise subprocess.CalledProcessError(result.returncode, list(cmd))


def pipe_run(
    left: Sequence[str], right: Sequence[str], cwd: Path | None = None
) -> None:
    """Run two commands with the first one's stdout as the second's stdin.

    Parameters
    ----------
    left : Sequence[str]
        The producer.
    right : Sequence[str]
        The consumer.
    cwd : Path | None
        The cwd to use for both commands.

    Raises
    ------
    subprocess.CalledProcessError
        If any of the commands fails.
    """
    LOG.debug("Running: %s | %s", redact(left), redact(right))
    # pylint: disable=consider-using-with
    p1 = subprocess.Popen(  # nosemgrep # nosec
        left, stdout=subprocess.PIPE, cwd=_cwd(cwd)
    )
    try:
        p2 = subprocess.Popen(  # nosemgrep # nosec
            right, stdin=p1.stdout, cwd=_cwd(cwd)
        )
    except OSError:
        p1.stdout.close()  # type: ignore
        p1.kill()
        p1.wait()
        raise
    p1.stdout.close()  # type: ignore
    right_code = p2.wait()
    left_code = p1.wait()
    if left_code != 0:
        raise subprocess.CalledProcessError(left_code, list(left))
    if right_code != 0:
        raise subprocess.CalledProcessError(right_code, list(right))


def which(cmd: str) -> bool:
    """Check if a command can be resolved.

    Parameters
    ----------
    cmd : str
        The command to check.

    Returns
    -------
    bool
        True if the command is resolved, False otherwise.
    """
    return shutil.which(cmd) is not None
