# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Restore a backup set into the live stack.

The restore runs as a small state machine::

    validating -> confirming -> restoring-database -> restoring-config-volume
      -> restoring-storage -> [restoring-environment] -> done

``failed`` is reachable from validating and restoring-database, and
``cancelled`` from confirming. Config volume and storage failures are
reported and the machine moves on.
"""

import logging
import subprocess  # nosemgrep # nosec
from pathlib import Path
from typing import Callable

from .adapters import (
    DatabaseSnapshotAdapter,
    EnvironmentFileCopier,
    PrivilegedVolumeArchiver,
    StorageArchiver,
)
from .config import Settings
from .errors import OperatorDeclinedError, StackBackupError
from .models import (
    Artifact,
    ArtifactKind,
    ArtifactOutcome,
    BackupSet,
    RestoreReport,
    RestoreState,
)
from .privileges import Identity
from .runtime import (
    ComposeRuntime,
    HelperContainerBroker,
    ServiceRuntime,
    VolumeBroker,
)

LOG = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

RESTORE_WARNING = (
    "WARNING: This will overwrite the current database and storage volumes."
)
PROCEED_QUESTION = "Are you sure you want to proceed?"
ENV_QUESTION = "Do you want to restore the {name} file?"


def check_backup_path(path: Path | None) -> str:
    """Get what is wrong with a restore source, or an empty string."""
    if path is None:
        return "Usage: restore <path_to_backup_directory>"
    if not path.is_dir():
        return f"Backup directory not found: {path}"
    return ""


class RestoreCoordinator:
    """Replay a backup set against the running stack.

    Parameters
    ----------
    identity : Identity
        The resolved project root and owner.
    database : DatabaseSnapshotAdapter
        Replays the database dump.
    volume : PrivilegedVolumeArchiver
        Restores the config volume.
    storage : StorageArchiver
        Restores the storage directory.
    environment : EnvironmentFileCopier
        Restores the environment file.
    confirm : Confirm
        Asks the operator a yes/no question.
    """

    def __init__(
        self,
        identity: Identity,
        database: DatabaseSnapshotAdapter,
        volume: PrivilegedVolumeArchiver,
        storage: StorageArchiver,
        environment: EnvironmentFileCopier,
        confirm: Confirm,
    ) -> None:
        self.identity = identity
        self.database = database
        self.volume = volume
        self.storage = storage
        self.environment = environment
        self.confirm = confirm

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        identity: Identity,
        confirm: Confirm,
        runtime: ServiceRuntime | None = None,
        broker: VolumeBroker | None = None,
    ) -> "RestoreCoordinator":
        """Wire a coordinator with the real collaborators.

        Parameters
        ----------
        settings : Settings
            The settings.
        identity : Identity
            The resolved project root and owner.
        confirm : Confirm
            Asks the operator a yes/no question.
        runtime : ServiceRuntime | None
            Overrides the compose runtime.
        broker : VolumeBroker | None
            Overrides the helper container broker.

        Returns
        -------
        RestoreCoordinator
            The coordinator.
        """
        root = identity.project_root
        runtime = runtime or ComposeRuntime(settings.compose, cwd=root)
        broker = broker or HelperContainerBroker(
            settings.container, settings.helper_image
        )
        return cls(
            identity=identity,
            database=DatabaseSnapshotAdapter(
                runtime,
                service=settings.db_service,
                user=settings.db_user,
                readiness_timeout=settings.readiness_timeout,
                readiness_interval=settings.readiness_interval,
            ),
            volume=PrivilegedVolumeArchiver(
                runtime,
                broker,
                service=settings.db_service,
                internal_path=settings.config_volume_path,
            ),
            storage=StorageArchiver(settings.storage_path(root)),
            environment=EnvironmentFileCopier(settings.env_path(root)),
            confirm=confirm,
        )

    def _ask(self, question: str) -> bool:
        try:
            return self.confirm(question)
        except OperatorDeclinedError:
            return False

    def run(self, path: Path | None) -> RestoreReport:
        """Restore from a backup set directory.

        Parameters
        ----------
        path : Path | None
            The backup set directory.

        Returns
        -------
        RestoreReport
            The final state and per-artifact outcomes.
        """
        report = RestoreReport(path=path or Path())
        problem = check_backup_path(path)
        if problem or path is None:
            return self._fail(report, problem)
        backup_set = BackupSet(path=path)

        report.enter(RestoreState.CONFIRMING)
        if not self._ask(f"{RESTORE_WARNING}\n{PROCEED_QUESTION}"):
            LOG.info("Restore cancelled.")
            report.enter(RestoreState.CANCELLED)
            return report

        LOG.info("Starting restore process from: %s", path)
        report.enter(RestoreState.RESTORING_DATABASE)
        if not self._restore_database(report, backup_set):
            report.enter(RestoreState.FAILED)
            return report

        report.enter(RestoreState.RESTORING_CONFIG_VOLUME)
        self._restore_independent(
            report, backup_set, ArtifactKind.VOLUME_CONFIG, self.volume.restore
        )

        report.enter(RestoreState.RESTORING_STORAGE)
        self._restore_independent(
            report,
            backup_set,
            ArtifactKind.OBJECT_STORAGE,
            self.storage.restore,
        )

        self._maybe_restore_environment(report, backup_set)
        report.enter(RestoreState.DONE)
        LOG.info("✓ Restore process finished.")
        return report

    @staticmethod
    def _fail(report: RestoreReport, message: str) -> RestoreReport:
        LOG.error("✗ %s", message)
        report.error = message
        report.enter(RestoreState.FAILED)
        return report

    def _restore_database(
        self, report: RestoreReport, backup_set: BackupSet
    ) -> bool:
        kind = ArtifactKind.DATABASE_DUMP
        artifact = backup_set.find(kind)
        if artifact is None:
            LOG.warning(
                "No database dump found (checked .tar.zst, .tar.gz, .sql). "
                "Skipping DB restore."
            )
            report.outcomes.append(ArtifactOutcome(kind=kind, status="skipped"))
            return True
        try:
            self.database.restore(artifact)
        except StackBackupError as error:
            LOG.error("✗ %s", error)
            report.error = str(error)
            report.outcomes.append(
                ArtifactOutcome(
                    kind=kind,
                    status="failed",
                    message=str(error),
                    path=artifact.path,
                )
            )
            return False
        report.outcomes.append(
            ArtifactOutcome(kind=kind, status="ok", path=artifact.path)
        )
        return True

    @staticmethod
    def _restore_independent(
        report: RestoreReport,
        backup_set: BackupSet,
        kind: ArtifactKind,
        restore: Callable[[Artifact], None],
    ) -> None:
        artifact = backup_set.find(kind)
        if artifact is None:
            LOG.warning("No %s archive found. Skipping.", kind.stem)
            report.outcomes.append(ArtifactOutcome(kind=kind, status="skipped"))
            return
        try:
            restore(artifact)
        except (
            StackBackupError,
            subprocess.CalledProcessError,
            OSError,
        ) as error:
            LOG.error("✗ %s restore failed: %s", kind.stem, error)
            report.outcomes.append(
                ArtifactOutcome(
                    kind=kind,
                    status="failed",
                    message=str(error),
                    path=artifact.path,
                )
            )
            return
        report.outcomes.append(
            ArtifactOutcome(kind=kind, status="ok", path=artifact.path)
        )

    def _maybe_restore_environment(
        self, report: RestoreReport, backup_set: BackupSet
    ) -> None:
        kind = ArtifactKind.ENVIRONMENT_FILE
        artifact = backup_set.find(kind)
        if artifact is None:
            return
        name = self.environment.env_file.name
        if not self._ask(ENV_QUESTION.format(name=name)):
            LOG.info("Skipping %s restore.", name)
            report.outcomes.append(ArtifactOutcome(kind=kind, status="skipped"))
            return
        report.enter(RestoreState.RESTORING_ENVIRONMENT)
        self._restore_independent(
            report,
            backup_set,
            kind,
            lambda item: self.environment.restore(item, self.identity),
        )
