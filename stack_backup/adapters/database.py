# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""PostgreSQL full-cluster dump and replay through the running service."""

import logging
import subprocess  # nosemgrep # nosec
import time
from typing import Callable, List

from ..archive import make_archive, stream_member_command
from ..errors import (
    CollaboratorUnavailableError,
    DatabaseRestoreError,
    DatabaseUnreachableError,
    PartialArtifactError,
)
from ..models import Artifact, ArtifactKind, BackupSet, Compression
from ..runtime import ServiceRuntime

LOG = logging.getLogger(__name__)

KIND = ArtifactKind.DATABASE_DUMP
DUMP_MEMBER = KIND.filename(Compression.NONE)


class DatabaseSnapshotAdapter:
    """Dump and restore the whole database cluster.

    Nothing is staged inside the container: the dump is streamed over the
    exec boundary, and on restore the decompressor is piped straight into
    ``psql``.
    """

    def __init__(
        self,
        runtime: ServiceRuntime,
        service: str = "db",
        user: str = "postgres",
        *,
        readiness_timeout: float = 60.0,
        readiness_interval: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.runtime = runtime
        self.service = service
        self.user = user
        self.readiness_timeout = readiness_timeout
        self.readiness_interval = readiness_interval
        self._sleep = sleep
        self._clock = clock

    def dump_command(self) -> List[str]:
        """Dump roles and all databases, dropping them first on replay."""
        return ["pg_dumpall", "-c", "--if-exists", "-U", self.user]

    def restore_command(self) -> List[str]:
        """Execute SQL from stdin."""
        return ["psql", "-U", self.user]

    def ready_command(self) -> List[str]:
        """Probe that the server accepts connections."""
        return ["pg_isready", "-U", self.user]

    def capture(
        self, backup_set: BackupSet, compression: Compression
    ) -> Artifact:
        """Dump the database into the backup set and compress it.

        Parameters
        ----------
        backup_set : BackupSet
            Where the artifact goes.
        compression : Compression
            The run's compression strategy.

        Returns
        -------
        Artifact
            The compressed dump.

        Raises
        ------
        DatabaseUnreachableError
            If the service cannot be reached or the dump fails.
        PartialArtifactError
            If compressing fails (the raw ``.sql`` is kept).
        """
        if not self.runtime.is_running(self.service):
            raise DatabaseUnreachableError(
                f"Database backup failed! Is the '{self.service}' "
                "container running?"
            )
        sql_path = backup_set.artifact_path(KIND, Compression.NONE)
        LOG.info("Backing up PostgreSQL database...")
        try:
            self.runtime.exec_to_file(
                self.service, self.dump_command(), sql_path
            )
        except (subprocess.CalledProcessError, OSError) as error:
            sql_path.unlink(missing_ok=True)
            raise DatabaseUnreachableError(
                f"Database dump failed: {error}"
            ) from error
        LOG.info("✓ Database dump created.")
        archive = backup_set.artifact_path(KIND, compression)
        try:
            make_archive(compression, archive, backup_set.path, [DUMP_MEMBER])
        except (subprocess.CalledProcessError, OSError) as error:
            archive.unlink(missing_ok=True)
            raise PartialArtifactError(
                f"Compressing the database dump failed, "
                f"keeping the raw {DUMP_MEMBER}: {error}"
            ) from error
        sql_path.unlink()
        LOG.info("✓ Database backup compressed (%s).", compression.value)
        return Artifact(kind=KIND, path=archive, compression=compression)

    def ensure_ready(self) -> None:
        """Start the service if needed and wait until it accepts connections.

        Raises
        ------
        CollaboratorUnavailableError
            If the service cannot be started or never becomes ready.
        """
        if not self.runtime.is_running(self.service):
            LOG.warning(
                "%s container is not running. Attempting to start it...",
                self.service,
            )
            try:
                self.runtime.start(self.service)
            except (subprocess.CalledProcessError, OSError) as error:
                raise CollaboratorUnavailableError(
                    f"Could not start service '{self.service}': {error}"
                ) from error
        self.wait_until_ready()

    def wait_until_ready(self) -> None:
        """Poll the readiness probe until it passes or the timeout expires.

        Raises
        ------
        CollaboratorUnavailableError
            If the service is not ready in time.
        """
        deadline = self._clock() + self.readiness_timeout
        attempt = 0
        while True:
            attempt += 1
            if self.runtime.exec_ok(self.service, self.ready_command()):
                LOG.debug("%s ready after %d probe(s)", self.service, attempt)
                return
            if self._clock() >= deadline:
                raise CollaboratorUnavailableError(
                    f"Service '{self.service}' not ready after "
                    f"{self.readiness_timeout:.0f}s"
                )
            LOG.debug(
                "%s not ready yet (attempt %d), retrying in %.1fs",
                self.service,
                attempt,
                self.readiness_interval,
            )
            self._sleep(self.readiness_interval)

    def restore(self, artifact: Artifact) -> None:
        """Replay a dump against the live service.

        Parameters
        ----------
        artifact : Artifact
            The dump, compressed or raw.

        Raises
        ------
        DatabaseRestoreError
            If the replay pipeline fails.
        """
        compression = artifact.compression or Compression.NONE
        self.ensure_ready()
        LOG.info("Restoring PostgreSQL database from %s...", artifact.path)
        source = stream_member_command(compression, artifact.path, DUMP_MEMBER)
        try:
            self.runtime.exec_from(
                source, self.service, self.restore_command()
            )
        except (subprocess.CalledProcessError, OSError) as error:
            raise DatabaseRestoreError(
                f"Database restore failed: {error}"
            ) from error
        LOG.info("✓ Database restored successfully.")
