# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""The generated environment/secrets file."""

import logging
import shutil
from pathlib import Path

from ..models import Artifact, ArtifactKind, BackupSet
from ..privileges import Identity, fix_ownership

LOG = logging.getLogger(__name__)

KIND = ArtifactKind.ENVIRONMENT_FILE


class EnvironmentFileCopier:
    """Copy the environment file in and out of a backup set."""

    def __init__(self, env_file: Path) -> None:
        self.env_file = env_file

    def capture(self, backup_set: BackupSet) -> Artifact | None:
        """Copy the environment file, if there is one."""
        if not self.env_file.is_file():
            LOG.info("No %s file to back up.", self.env_file.name)
            return None
        LOG.info("Backing up %s file...", self.env_file.name)
        dest = backup_set.artifact_path(KIND)
        shutil.copyfile(self.env_file, dest)
        return Artifact(kind=KIND, path=dest)

    def restore(self, artifact: Artifact, identity: Identity) -> None:
        """Overwrite the environment file with the backed up copy.

        Parameters
        ----------
        artifact : Artifact
            The backed up environment file.
        identity : Identity
            Who gets a newly created file.
        """
        existed = self.env_file.exists()
        shutil.copyfile(artifact.path, self.env_file)
        if not existed:
            fix_ownership(self.env_file, identity)
        LOG.info("✓ %s file restored.", self.env_file.name)
