# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Object-storage directory on the host."""

import logging
from pathlib import Path
from typing import Callable

from ..archive import extract_archive, make_archive
from ..compression import host_has_zstd
from ..errors import PartialArtifactError
from ..models import Artifact, ArtifactKind, BackupSet, Compression

LOG = logging.getLogger(__name__)

KIND = ArtifactKind.OBJECT_STORAGE


class StorageArchiver:
    """Archive the host-mounted storage directory.

    The archive holds the directory itself (``storage/...``) so that
    restoring extracts into the parent directory.
    """

    def __init__(
        self,
        storage_dir: Path,
        has_zstd: Callable[[], bool] = host_has_zstd,
    ) -> None:
        self.storage_dir = storage_dir
        self._has_zstd = has_zstd

    def capture(
        self, backup_set: BackupSet, compression: Compression
    ) -> Artifact | None:
        """Archive the storage directory into the backup set.

        Parameters
        ----------
        backup_set : BackupSet
            Where the artifact goes.
        compression : Compression
            The run's compression strategy.

        Returns
        -------
        Artifact | None
            The archive, or None if there is no storage directory.
        """
        if not self.storage_dir.is_dir():
            LOG.warning(
                "%s directory not found. Skipping storage backup.",
                self.storage_dir,
            )
            return None
        LOG.info("Backing up Storage volume...")
        out_file = backup_set.artifact_path(KIND, compression)
        try:
            make_archive(
                compression,
                out_file,
                self.storage_dir.parent,
                [self.storage_dir.name],
            )
        except Exception:
            out_file.unlink(missing_ok=True)
            raise
        LOG.info("✓ Storage backup successful (%s).", compression.value)
        return Artifact(kind=KIND, path=out_file, compression=compression)

    def restore(self, artifact: Artifact) -> None:
        """Extract a storage archive over the current directory.

        Existing files with the same paths are overwritten, others are kept.

        Parameters
        ----------
        artifact : Artifact
            The storage archive.

        Raises
        ------
        PartialArtifactError
            If the archive is zstd compressed and the host has no zstd.
        """
        compression = artifact.compression or Compression.GZIP
        if compression is Compression.ZSTD and not self._has_zstd():
            raise PartialArtifactError(
                "zstd not found on host. Cannot restore .tar.zst archive."
            )
        LOG.info("Restoring Storage volume from %s...", artifact.path)
        extract_archive(compression, artifact.path, self.storage_dir.parent)
        LOG.info("✓ Storage restored successfully (%s).", compression.value)
