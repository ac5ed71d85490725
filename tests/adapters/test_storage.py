# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

# pylint: disable=missing-return-doc,missing-param-doc
"""Test stack_backup.adapters.storage.*."""

import shutil
from pathlib import Path

import pytest

from stack_backup.adapters import StorageArchiver
from stack_backup.errors import PartialArtifactError
from stack_backup.models import Artifact, ArtifactKind, BackupSet, Compression

requires_tar = pytest.mark.skipif(
    shutil.which("tar") is None or shutil.which("gzip") is None,
    reason="host tar/gzip not available",
)


def test_capture_missing_directory(tmp_path: Path) -> None:
    """Test a missing storage directory is skipped."""
    backup_set = BackupSet.create(tmp_path / "backups")
    archiver = StorageArchiver(tmp_path / "volumes" / "storage")
    assert archiver.capture(backup_set, Compression.GZIP) is None
    assert not list(backup_set.path.iterdir())


@requires_tar
def test_capture_and_restore(project: Path, tmp_path: Path) -> None:
    """Test the storage tree survives a capture and a restore."""
    storage = project / "volumes" / "storage"
    backup_set = BackupSet.create(tmp_path / "backups")
    archiver = StorageArchiver(storage, has_zstd=lambda: False)

    artifact = archiver.capture(backup_set, Compression.GZIP)
    assert artifact is not None
    assert artifact.path.name == "storage.tar.gz"

    shutil.rmtree(storage)
    (storage / "bucket").mkdir(parents=True)
    (storage / "bucket" / "new.bin").write_bytes(b"new")
    archiver.restore(artifact)
    assert (storage / "bucket" / "object.bin").read_bytes() == b"\x00\x01\x02"
    # not in the archive, kept as is
    assert (storage / "bucket" / "new.bin").exists()


def test_capture_failure_removes_partial(
    project: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test a failing archiver leaves no partial file."""

    def broken(compression: Compression, out_file: Path, *args: object) -> None:
        out_file.write_bytes(b"partial")
        raise OSError("disk full")

    monkeypatch.setattr("stack_backup.adapters.storage.make_archive", broken)
    backup_set = BackupSet.create(tmp_path / "backups")
    archiver = StorageArchiver(project / "volumes" / "storage")
    with pytest.raises(OSError):
        archiver.capture(backup_set, Compression.GZIP)
    assert not (backup_set.path / "storage.tar.gz").exists()


def test_restore_zstd_without_host_zstd(tmp_path: Path) -> None:
    """Test a zstd archive cannot be restored without zstd."""
    archive = tmp_path / "storage.tar.zst"
    archive.write_bytes(b"zst")
    artifact = Artifact(
        kind=ArtifactKind.OBJECT_STORAGE,
        path=archive,
        compression=Compression.ZSTD,
    )
    archiver = StorageArchiver(tmp_path / "storage", has_zstd=lambda: False)
    with pytest.raises(PartialArtifactError, match="zstd not found"):
        archiver.restore(artifact)
