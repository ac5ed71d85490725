# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

# pylint: disable=unnecessary-ellipsis

"""Collaborator protocols: the service runtime and the volume broker."""

from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from ..models import Compression


@runtime_checkable
class ServiceRuntime(Protocol):  # pragma: no cover
    """The container orchestration surface the core depends on."""

    def container_id(self, service: str) -> str | None:
        """Get the id of a service's container (running or not).

        Parameters
        ----------
        service : str
            The compose service name
        """
        ...

    def is_running(self, service: str) -> bool:
        """Check whether a service is up.

        Parameters
        ----------
        service : str
            The compose service name
        """
        ...

    def start(self, service: str) -> None:
        """Start a service in the background.

        Parameters
        ----------
        service : str
            The compose service name
        """
        ...

    def create(self, service: str) -> None:
        """Create a service's container without starting it.

        Parameters
        ----------
        service : str
            The compose service name
        """
        ...

    def exec_ok(self, service: str, args: Sequence[str]) -> bool:
        """Run a probe inside a running service.

        Parameters
        ----------
        service : str
            The compose service name
        args : Sequence[str]
            The command and its arguments
        """
        ...

    def exec_to_file(
        self, service: str, args: Sequence[str], out_file: Path
    ) -> None:
        """Run a command inside a service, streaming stdout to a host file.

        Parameters
        ----------
        service : str
            The compose service name
        args : Sequence[str]
            The command and its arguments
        out_file : Path
            The host file to write
        """
        ...

    def exec_from(
        self, source: Sequence[str], service: str, args: Sequence[str]
    ) -> None:
        """Pipe a host command's stdout into a command inside a service.

        Parameters
        ----------
        source : Sequence[str]
            The host producer command
        service : str
            The compose service name
        args : Sequence[str]
            The consumer command and its arguments
        """
        ...


@runtime_checkable
class VolumeBroker(Protocol):  # pragma: no cover
    """Moves archives in and out of volumes the host cannot access."""

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
        """
        ...

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
        """
        ...


__all__ = ["ServiceRuntime", "VolumeBroker"]
