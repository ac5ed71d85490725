# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

# pylint: disable=missing-return-doc,missing-param-doc
"""Test stack_backup.runtime._process.*."""

import subprocess  # nosemgrep # nosec
import sys
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from stack_backup.runtime import (
    output,
    pipe_run,
    redact,
    run_to_file,
    succeeds,
    which,
)

PY = sys.executable
REAL_POPEN = subprocess.Popen


def test_redact() -> None:
    """Test secrets never reach the logs."""
    assert redact(["env", "PGPASSWORD=hunter2", "psql"]) == (
        "env PGPASSWORD=***REDACTED*** psql"
    )
    assert redact(["tool", "--password", "hunter2", "-v"]) == (
        "tool --password ***REDACTED*** -v"
    )


def test_succeeds() -> None:
    """Test the probe helper."""
    assert succeeds([PY, "-c", "pass"]) is True
    assert succeeds([PY, "-c", "raise SystemExit(3)"]) is False
    assert succeeds(["surely-not-a-real-command-xyz"]) is False


def test_output() -> None:
    """Test the output is decoded and stripped."""
    assert output([PY, "-c", "print(' abc ')"]) == "abc"


def test_run_to_file(tmp_path: Path) -> None:
    """Test stdout goes to the file, failures raise."""
    out_file = tmp_path / "out.txt"
    run_to_file([PY, "-c", "print('dump')"], out_file)
    assert out_file.read_text(encoding="utf-8").strip() == "dump"
    with pytest.raises(subprocess.CalledProcessError):
        run_to_file([PY, "-c", "raise SystemExit(2)"], out_file)


def test_pipe_run(tmp_path: Path) -> None:
    """Test piping one command into another."""
    target = tmp_path / "piped.txt"
    consumer = [
        PY,
        "-c",
        f"import sys; open({str(target)!r}, 'w').write(sys.stdin.read())",
    ]
    pipe_run([PY, "-c", "print('CREATE TABLE t;')"], consumer)
    assert target.read_text().strip() == "CREATE TABLE t;"


def test_pipe_run_failures() -> None:
    """Test a failure on either side of the pipe raises."""
    ok = [PY, "-c", "import sys; sys.stdin.read()"]
    with pytest.raises(subprocess.CalledProcessError) as exc_info:
        pipe_run([PY, "-c", "raise SystemExit(4)"], ok)
    assert exc_info.value.returncode == 4
    with pytest.raises(subprocess.CalledProcessError) as exc_info:
        pipe_run([PY, "-c", "print(1)"], [PY, "-c", "raise SystemExit(5)"])
    assert exc_info.value.returncode == 5


def test_pipe_run_consumer_missing(
    mocker: MockerFixture, tmp_path: Path
) -> None:
    """Test the producer is stopped when the consumer cannot start."""
    started: list[subprocess.Popen[bytes]] = []

    def popen(*args: object, **kwargs: object) -> subprocess.Popen[bytes]:
        proc = REAL_POPEN(*args, **kwargs)  # type: ignore
        started.append(proc)
        return proc

    mocker.patch(
        "stack_backup.runtime._process.subprocess.Popen", side_effect=popen
    )
    with pytest.raises(OSError):
        pipe_run(
            [PY, "-c", "import time; time.sleep(30)"],
            [str(tmp_path / "no-psql")],
        )
    assert len(started) == 1
    assert started[0].returncode is not None
    assert started[0].stdout is not None and started[0].stdout.closed


def test_which() -> None:
    """Test resolving commands."""
    assert which(PY) is True
    assert which("surely-not-a-real-command-xyz") is False
