# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Backup and restore errors.

Structural errors and database restore errors stop a run. Everything else is
reported per artifact and the run moves on to the next one.
"""


class StackBackupError(Exception):
    """Base class for backup/restore errors."""


class StructuralError(StackBackupError):
    """The run cannot start (no project root, no backup dir, bad path)."""


class PrivilegeError(StructuralError):
    """A privileged operation was requested without the capability."""


class CollaboratorUnavailableError(StackBackupError):
    """A service or container could not be reached."""


class DatabaseUnreachableError(CollaboratorUnavailableError):
    """The database service process could not be reached."""


class ServiceContainerNotFoundError(CollaboratorUnavailableError):
    """No container exists for the requested compose service."""

    def __init__(self, service: str) -> None:
        super().__init__(f"No container found for service '{service}'")
        self.service = service


class PartialArtifactError(StackBackupError):
    """One artifact could not be captured or restored."""


class HelperExecutionError(PartialArtifactError):
    """The ephemeral helper container exited with a non-zero status."""

    def __init__(self, action: str, returncode: int) -> None:
        super().__init__(
            f"Helper container failed to {action} (exit code {returncode})"
        )
        self.returncode = returncode


class ArchiveIntegrityError(PartialArtifactError):
    """A freshly written archive is empty or cannot be read back."""


class DatabaseRestoreError(PartialArtifactError):
    """Replaying the database dump failed."""


class OperatorDeclinedError(StackBackupError):
    """The operator refused the restore confirmation."""


class CapabilityDegradedWarning(UserWarning):
    """The preferred compressor is missing, a fallback is used."""
