# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

# pylint: disable=missing-return-doc,missing-param-doc
"""Test stack_backup.runtime.compose.*."""

import subprocess  # nosemgrep # nosec
from pathlib import Path
from unittest.mock import MagicMock, patch

from stack_backup.runtime import ComposeRuntime, ServiceRuntime

MODULE_TO_PATCH = "stack_backup.runtime.compose"

COMPOSE = ["docker", "compose"]


def test_is_a_service_runtime(tmp_path: Path) -> None:
    """Test the protocol is satisfied."""
    assert isinstance(ComposeRuntime(COMPOSE, tmp_path), ServiceRuntime)


@patch(f"{MODULE_TO_PATCH}.output")
def test_container_id(mock_output: MagicMock, tmp_path: Path) -> None:
    """Test the first listed container is used, stopped ones included."""
    mock_output.return_value = "abc123\ndef456\n"
    runtime = ComposeRuntime(COMPOSE, tmp_path)
    assert runtime.container_id("db") == "abc123"
    mock_output.assert_called_once_with(
        ["docker", "compose", "ps", "-a", "-q", "db"], cwd=tmp_path
    )


@patch(f"{MODULE_TO_PATCH}.output")
def test_container_id_none(mock_output: MagicMock, tmp_path: Path) -> None:
    """Test no container, or no compose at all."""
    runtime = ComposeRuntime(COMPOSE, tmp_path)
    mock_output.return_value = ""
    assert runtime.container_id("db") is None
    mock_output.side_effect = subprocess.CalledProcessError(1, ["docker"])
    assert runtime.container_id("db") is None
    mock_output.side_effect = FileNotFoundError("docker")
    assert runtime.container_id("db") is None


@patch(f"{MODULE_TO_PATCH}.output")
def test_is_running(mock_output: MagicMock, tmp_path: Path) -> None:
    """Test the running check."""
    runtime = ComposeRuntime(COMPOSE, tmp_path)
    mock_output.return_value = "abc123"
    assert runtime.is_running("db") is True
    mock_output.assert_called_with(
        ["docker", "compose", "ps", "--status", "running", "-q", "db"],
        cwd=tmp_path,
    )
    mock_output.return_value = ""
    assert runtime.is_running("db") is False
    mock_output.side_effect = subprocess.CalledProcessError(1, ["docker"])
    assert runtime.is_running("db") is False


@patch(f"{MODULE_TO_PATCH}.run")
def test_start_and_create(mock_run: MagicMock, tmp_path: Path) -> None:
    """Test starting versus only creating a service."""
    runtime = ComposeRuntime(COMPOSE, tmp_path)
    runtime.start("db")
    mock_run.assert_called_with(
        ["docker", "compose", "up", "-d", "db"], cwd=tmp_path
    )
    runtime.create("db")
    mock_run.assert_called_with(
        ["docker", "compose", "up", "--no-start", "db"], cwd=tmp_path
    )


@patch(f"{MODULE_TO_PATCH}.pipe_run")
@patch(f"{MODULE_TO_PATCH}.run_to_file")
@patch(f"{MODULE_TO_PATCH}.succeeds")
def test_exec_variants(
    mock_succeeds: MagicMock,
    mock_run_to_file: MagicMock,
    mock_pipe_run: MagicMock,
    tmp_path: Path,
) -> None:
    """Test commands run inside the service without a tty."""
    runtime = ComposeRuntime(["podman-compose"], tmp_path)
    mock_succeeds.return_value = True
    assert runtime.exec_ok("db", ["pg_isready"]) is True
    mock_succeeds.assert_called_once_with(
        ["podman-compose", "exec", "-T", "db", "pg_isready"], cwd=tmp_path
    )

    out_file = tmp_path / "dump.sql"
    runtime.exec_to_file("db", ["pg_dumpall"], out_file)
    mock_run_to_file.assert_called_once_with(
        ["podman-compose", "exec", "-T", "db", "pg_dumpall"],
        out_file,
        cwd=tmp_path,
    )

    runtime.exec_from(["cat", "x.sql"], "db", ["psql"])
    mock_pipe_run.assert_called_once_with(
        ["cat", "x.sql"],
        ["podman-compose", "exec", "-T", "db", "psql"],
        cwd=tmp_path,
    )
