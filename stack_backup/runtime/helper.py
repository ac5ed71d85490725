# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Ephemeral helper containers for root-owned volumes.

The host user cannot read or write the volume directly, so a throwaway
container borrows the volume attachments of the service container
(``--volumes-from``) and streams a tar archive in or out.
"""

import logging
import shlex
import subprocess  # nosemgrep # nosec
from pathlib import Path
from typing import List, Sequence

from ..errors import HelperExecutionError
from ..models import Compression
from ._process import run, run_to_file

LOG = logging.getLogger(__name__)

BACKUP_MOUNT = "/backup"

# install GNU tar (for -I) and zstd only when the image lacks them
_PROVISION_ZSTD = (
    "{ command -v zstd && tar --version | grep -q GNU; } >/dev/null 2>&1"
    " || apk add --no-cache zstd tar >/dev/null 2>&1"
)


def _provision(compression: Compression) -> List[str]:
    if compression is Compression.ZSTD:
        return [_PROVISION_ZSTD]
    return []


def _script(*steps: str) -> str:
    return " && ".join(steps)


class HelperContainerBroker:
    """Volume broker backed by short-lived containers.

    Parameters
    ----------
    container : Sequence[str]
        The container runtime command, e.g. ``["docker"]``.
    image : str
        The helper image (alpine based).
    """

    def __init__(self, container: Sequence[str], image: str) -> None:
        self.container = list(container)
        self.image = image

    def _run_cmd(self, container_id: str, *extra: str) -> List[str]:
        return self.container + [
            "run",
            "--rm",
            "--volumes-from",
            container_id,
            *extra,
        ]

    def export_command(
        self, container_id: str, internal_path: str, compression: Compression
    ) -> List[str]:
        """Build the command that writes an archive of a path to stdout."""
        tar = shlex.join(
            ["tar", *compression.tar_filter, "-cf", "-", "-C", internal_path]
        )
        script = _script(*_provision(compression), f"{tar} .")
        return self._run_cmd(container_id, self.image, "sh", "-c", script)

    def import_command(
        self,
        container_id: str,
        internal_path: str,
        archive: Path,
        compression: Compression,
    ) -> List[str]:
        """Build the command that extracts a mounted archive into a path."""
        mount = f"{archive.parent.resolve()}:{BACKUP_MOUNT}:ro"
        source = f"{BACKUP_MOUNT}/{archive.name}"
        mkdir = shlex.join(["mkdir", "-p", internal_path])
        tar = shlex.join(
            ["tar", *compression.tar_filter, "-xf", source, "-C", internal_path]
        )
        script = _script(*_provision(compression), mkdir, tar)
        return self._run_cmd(
            container_id, "-v", mount, self.image, "sh", "-c", script
        )

    def export_volume(
        self,
        container_id: str,
        internal_path: str,
        out_file: Path,
        compression: Compression,
    ) -> None:
        """Stream an archive of a container path into a host file.

        Parameters
        ----------
        container_id : str
            The container whose volumes are borrowed
        internal_path : str
            The path inside the volume to archive
        out_file : Path
            The host file to write
        compression : Compression
            The compressor to use

        Raises
        ------
        HelperExecutionError
            If the helper container fails.
        OSError
            If the container command cannot be started.
        """
        cmd = self.export_command(container_id, internal_path, compression)
        try:
            run_to_file(cmd, out_file)
        except subprocess.CalledProcessError as error:
            out_file.unlink(missing_ok=True)
            raise HelperExecutionError("export", error.returncode) from error
        except OSError:
            out_file.unlink(missing_ok=True)
            raise

    def import_volume(
        self,
        container_id: str,
        internal_path: str,
        archive: Path,
        compression: Compression,
    ) -> None:
        """Extract a host archive into a container path.

        Parameters
        ----------
        container_id : str
            The container whose volumes are borrowed
        internal_path : str
            The path inside the volume to extract into
        archive : Path
            The host archive to read
        compression : Compression
            The archive's compressor

        Raises
        ------
        HelperExecutionError
            If the helper container fails.
        """
        cmd = self.import_command(
            container_id, internal_path, archive, compression
        )
        try:
            run(cmd)
        except subprocess.CalledProcessError as error:
            raise HelperExecutionError("import", error.returncode) from error
