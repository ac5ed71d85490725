# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.
# pylint: disable=missing-return-doc,missing-yield-doc,missing-param-doc
# pylint: disable=unused-argument
"""Shared fixtures for tests."""

import os
import subprocess  # nosemgrep # nosec
import sys
import tarfile
from collections.abc import Generator
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest

from stack_backup.archive import make_archive
from stack_backup.config import ENV_PREFIX, Settings
from stack_backup.errors import HelperExecutionError
from stack_backup.models import Compression
from stack_backup.privileges import Identity

HERE = Path(__file__).parent

SAMPLE_DUMP = b"CREATE TABLE t (id int);\nINSERT INTO t VALUES (1);\n"


class FakeRuntime:
    """In-memory stand-in for the compose runtime."""

    def __init__(self) -> None:
        self.containers: Dict[str, str] = {"db": "abc123"}
        self.running: Dict[str, bool] = {"db": True}
        self.ready_after = 1
        self.probes = 0
        self.dump = SAMPLE_DUMP
        self.fail_dump = False
        self.fail_replay = False
        self.fail_start = False
        self.create_makes_container = True
        self.replayed: List[bytes] = []
        self.calls: List[Tuple[str, ...]] = []

    def container_id(self, service: str) -> str | None:
        self.calls.append(("container_id", service))
        return self.containers.get(service)

    def is_running(self, service: str) -> bool:
        self.calls.append(("is_running", service))
        return self.running.get(service, False)

    def start(self, service: str) -> None:
        self.calls.append(("start", service))
        if self.fail_start:
            raise subprocess.CalledProcessError(1, ["up", "-d", service])
        self.running[service] = True
        self.containers.setdefault(service, "started0")

    def create(self, service: str) -> None:
        self.calls.append(("create", service))
        if self.create_makes_container:
            self.containers.setdefault(service, "created0")

    def exec_ok(self, service: str, args: Sequence[str]) -> bool:
        self.probes += 1
        return self.probes >= self.ready_after

    def exec_to_file(
        self, service: str, args: Sequence[str], out_file: Path
    ) -> None:
        self.calls.append(("exec_to_file", service, *args))
        out_file.write_bytes(self.dump)
        if self.fail_dump:
            raise subprocess.CalledProcessError(2, list(args))

    def exec_from(
        self, source: Sequence[str], service: str, args: Sequence[str]
    ) -> None:
        self.calls.append(("exec_from", service, *args))
        if self.fail_replay:
            raise subprocess.CalledProcessError(3, list(args))
        self.replayed.append(subprocess.check_output(list(source)))


class FakeBroker:
    """Volume broker that keeps the "volume" in a host directory."""

    def __init__(self, volume_dir: Path) -> None:
        self.volume_dir = volume_dir
        self.fail = False
        self.exports: List[Tuple[str, str, Path, Compression]] = []
        self.imports: List[Tuple[str, str, Path, Compression]] = []

    def export_volume(
        self,
        container_id: str,
        internal_path: str,
        out_file: Path,
        compression: Compression,
    ) -> None:
        self.exports.append(
            (container_id, internal_path, out_file, compression)
        )
        if self.fail:
            raise HelperExecutionError("export", 125)
        if compression is Compression.ZSTD:
            make_archive(compression, out_file, self.volume_dir, ["."])
            return
        with tarfile.open(out_file, "w:gz") as tar:
            tar.add(self.volume_dir, arcname=".")

    def import_volume(
        self,
        container_id: str,
        internal_path: str,
        archive: Path,
        compression: Compression,
    ) -> None:
        self.imports.append((container_id, internal_path, archive, compression))
        if self.fail:
            raise HelperExecutionError("import", 1)


@pytest.fixture(autouse=True, name="clear_env")
def clear_env_fixture() -> Generator[None, None, None]:
    """Remove our settings from the environment during a test."""
    original = {
        key: os.environ.pop(key)
        for key in list(os.environ)
        if key.startswith(ENV_PREFIX)
    }
    original_argv = sys.argv[:]
    sys.argv = [str(HERE / "conftest.py")]
    yield
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            os.environ.pop(key, None)
    os.environ.update(original)
    sys.argv = original_argv


@pytest.fixture(name="project")
def project_fixture(tmp_path: Path) -> Path:
    """A project root with a storage directory and an env file."""
    root = tmp_path / "platform"
    storage = root / "volumes" / "storage" / "bucket"
    storage.mkdir(parents=True)
    (storage / "object.bin").write_bytes(b"\x00\x01\x02")
    (root / ".env").write_text("POSTGRES_PASSWORD=secret\n", encoding="utf-8")
    return root


@pytest.fixture(name="identity")
def identity_fixture(project: Path) -> Identity:
    """An unprivileged identity owning the project."""
    return Identity(owner="tester", project_root=project, is_root=False)


@pytest.fixture(name="settings")
def settings_fixture(project: Path) -> Settings:
    """Settings pointing at the test project."""
    return Settings(project_root=project, elevate=False)


@pytest.fixture(name="runtime")
def runtime_fixture() -> FakeRuntime:
    """A fake, healthy service runtime."""
    return FakeRuntime()


@pytest.fixture(name="broker")
def broker_fixture(tmp_path: Path) -> FakeBroker:
    """A fake volume broker with a small config volume."""
    volume = tmp_path / "config-volume"
    volume.mkdir()
    (volume / "jwt.key").write_text("key\n", encoding="utf-8")
    return FakeBroker(volume)
