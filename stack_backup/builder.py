# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Create a backup set: database, config volume, storage, env file."""

import logging
import subprocess  # nosemgrep # nosec
from datetime import datetime
from typing import Callable

from ._common import file_size
from .adapters import (
    DatabaseSnapshotAdapter,
    EnvironmentFileCopier,
    PrivilegedVolumeArchiver,
    StorageArchiver,
)
from .archive import verify_archive
from .compression import detect_compression
from .config import Settings
from .errors import (
    ArchiveIntegrityError,
    ServiceContainerNotFoundError,
    StackBackupError,
    StructuralError,
)
from .models import (
    Artifact,
    ArtifactKind,
    ArtifactOutcome,
    BackupReport,
    BackupSet,
    Compression,
)
from .privileges import Identity, fix_ownership
from .runtime import (
    ComposeRuntime,
    HelperContainerBroker,
    ServiceRuntime,
    VolumeBroker,
)

LOG = logging.getLogger(__name__)


class BackupSetBuilder:
    """Capture every artifact of the stack into one new backup set.

    Each capture is independent: a failure is logged and recorded in the
    report, and the next artifact is attempted anyway. Callers check the
    report (or the directory) for what was actually captured.
    """

    def __init__(
        self,
        settings: Settings,
        identity: Identity,
        database: DatabaseSnapshotAdapter,
        volume: PrivilegedVolumeArchiver,
        storage: StorageArchiver,
        environment: EnvironmentFileCopier,
        *,
        detect: Callable[[], Compression] = detect_compression,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings
        self.identity = identity
        self.database = database
        self.volume = volume
        self.storage = storage
        self.environment = environment
        self._detect = detect
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        identity: Identity,
        runtime: ServiceRuntime | None = None,
        broker: VolumeBroker | None = None,
    ) -> "BackupSetBuilder":
        """Wire a builder with the real collaborators.

        Parameters
        ----------
        settings : Settings
            The settings.
        identity : Identity
            The resolved project root and owner.
        runtime : ServiceRuntime | None
            Overrides the compose runtime.
        broker : VolumeBroker | None
            Overrides the helper container broker.

        Returns
        -------
        BackupSetBuilder
            The builder.
        """
        root = identity.project_root
        runtime = runtime or ComposeRuntime(settings.compose, cwd=root)
        broker = broker or HelperContainerBroker(
            settings.container, settings.helper_image
        )
        return cls(
            settings=settings,
            identity=identity,
            database=DatabaseSnapshotAdapter(
                runtime,
                service=settings.db_service,
                user=settings.db_user,
            ),
            volume=PrivilegedVolumeArchiver(
                runtime,
                broker,
                service=settings.db_service,
                internal_path=settings.config_volume_path,
            ),
            storage=StorageArchiver(settings.storage_path(root)),
            environment=EnvironmentFileCopier(settings.env_path(root)),
        )

    def _create_set(self) -> BackupSet:
        backups_dir = self.settings.backups_path(self.identity.project_root)
        try:
            backup_set = BackupSet.create(backups_dir, self._clock())
        except OSError as error:
            raise StructuralError(
                f"Cannot create backup directory in {backups_dir}: {error}"
            ) from error
        LOG.info("Creating backup directory: %s", backup_set.path)
        return backup_set

    def run(self) -> BackupReport:
        """Run a backup.

        Returns
        -------
        BackupReport
            What was captured, skipped or failed.

        Raises
        ------
        StructuralError
            If the backup directory cannot be created.
        """
        if not self.environment.env_file.is_file():
            LOG.warning(
                "%s file not found. Docker compose might warn about "
                "missing variables.",
                self.environment.env_file.name,
            )
        compression = self._detect()
        backup_set = self._create_set()
        report = BackupReport(backup_set=backup_set, compression=compression)

        self._step(
            report,
            ArtifactKind.DATABASE_DUMP,
            lambda: self.database.capture(backup_set, compression),
        )
        self._step(
            report,
            ArtifactKind.VOLUME_CONFIG,
            lambda: self.volume.capture(backup_set, compression),
        )
        self._step(
            report,
            ArtifactKind.OBJECT_STORAGE,
            lambda: self.storage.capture(backup_set, compression),
        )
        self._step(
            report,
            ArtifactKind.ENVIRONMENT_FILE,
            lambda: self.environment.capture(backup_set),
        )

        LOG.info("Setting permissions for backup files...")
        try:
            fix_ownership(backup_set.path, self.identity)
        except OSError as error:
            LOG.error(
                "✗ Could not hand %s over to %s: %s",
                backup_set.path,
                self.identity.owner,
                error,
            )
        return report

    def _step(
        self,
        report: BackupReport,
        kind: ArtifactKind,
        capture: Callable[[], Artifact | None],
    ) -> None:
        try:
            artifact = capture()
        except ServiceContainerNotFoundError as error:
            LOG.warning("Skipping %s: %s", kind.value, error)
            report.outcomes.append(
                ArtifactOutcome(kind=kind, status="skipped", message=str(error))
            )
            return
        except (
            StackBackupError,
            subprocess.CalledProcessError,
            OSError,
        ) as error:
            LOG.error("✗ %s backup failed: %s", kind.value, error)
            report.outcomes.append(
                ArtifactOutcome(kind=kind, status="failed", message=str(error))
            )
            return
        if artifact is None:
            report.outcomes.append(ArtifactOutcome(kind=kind, status="skipped"))
            return
        digest = None
        if artifact.compression is not None and self.settings.verify_archives:
            try:
                digest = verify_archive(artifact.compression, artifact.path)
            except ArchiveIntegrityError as error:
                artifact.path.unlink(missing_ok=True)
                LOG.error("✗ %s backup failed: %s", kind.value, error)
                report.outcomes.append(
                    ArtifactOutcome(
                        kind=kind, status="failed", message=str(error)
                    )
                )
                return
        LOG.debug("%s: %s", artifact.path.name, file_size(artifact.path))
        report.outcomes.append(
            ArtifactOutcome(
                kind=kind, status="ok", path=artifact.path, sha256=digest
            )
        )
