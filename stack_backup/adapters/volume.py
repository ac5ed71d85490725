# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Root-owned config volume (keys, custom config) of the database service."""

import logging
import subprocess  # nosemgrep # nosec

from ..errors import ServiceContainerNotFoundError
from ..models import Artifact, ArtifactKind, BackupSet, Compression
from ..runtime import ServiceRuntime, VolumeBroker

LOG = logging.getLogger(__name__)

KIND = ArtifactKind.VOLUME_CONFIG


class PrivilegedVolumeArchiver:
    """Capture and restore a volume path through the volume broker.

    Parameters
    ----------
    runtime : ServiceRuntime
        Finds (or creates) the service container that owns the volume.
    broker : VolumeBroker
        Moves the archive in and out of the volume.
    service : str
        The service whose volumes are borrowed.
    internal_path : str
        The volume's mount path inside the service container.
    """

    def __init__(
        self,
        runtime: ServiceRuntime,
        broker: VolumeBroker,
        service: str = "db",
        internal_path: str = "/etc/postgresql-custom",
    ) -> None:
        self.runtime = runtime
        self.broker = broker
        self.service = service
        self.internal_path = internal_path

    def capture(
        self, backup_set: BackupSet, compression: Compression
    ) -> Artifact:
        """Archive the volume path into the backup set.

        Parameters
        ----------
        backup_set : BackupSet
            Where the artifact goes.
        compression : Compression
            The run's compression strategy.

        Returns
        -------
        Artifact
            The archived volume.

        Raises
        ------
        ServiceContainerNotFoundError
            If the service has no container to borrow volumes from.
        """
        container_id = self.runtime.container_id(self.service)
        if not container_id:
            raise ServiceContainerNotFoundError(self.service)
        out_file = backup_set.artifact_path(KIND, compression)
        LOG.info("Backing up %s volume...", self.internal_path)
        self.broker.export_volume(
            container_id, self.internal_path, out_file, compression
        )
        LOG.info("✓ %s backup successful.", KIND.stem)
        return Artifact(kind=KIND, path=out_file, compression=compression)

    def _container_for_restore(self) -> str:
        container_id = self.runtime.container_id(self.service)
        if container_id:
            return container_id
        # only the volume attachment is needed, so create but do not start
        LOG.info("%s container not found. Creating it...", self.service)
        try:
            self.runtime.create(self.service)
        except (subprocess.CalledProcessError, OSError) as error:
            raise ServiceContainerNotFoundError(self.service) from error
        container_id = self.runtime.container_id(self.service)
        if not container_id:
            raise ServiceContainerNotFoundError(self.service)
        return container_id

    def restore(self, artifact: Artifact) -> None:
        """Extract an archived volume back into the volume path.

        Parameters
        ----------
        artifact : Artifact
            The archived volume.

        Raises
        ------
        ServiceContainerNotFoundError
            If no container can be found or created.
        """
        compression = artifact.compression or Compression.GZIP
        LOG.info("Restoring %s volume from %s...", KIND.stem, artifact.path)
        container_id = self._container_for_restore()
        self.broker.import_volume(
            container_id, self.internal_path, artifact.path, compression
        )
        LOG.info("✓ %s restored successfully.", KIND.stem)
