# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Backup set, artifact and report models."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Literal

from ._common import make_timestamp

BACKUP_SET_PREFIX = "backup_"
_BACKUP_SET_RE = re.compile(r"^backup_(\d{8}_\d{6})$")


class Compression(str, Enum):
    """Compression tag of an artifact."""

    ZSTD = "zstd"
    GZIP = "gzip"
    NONE = "none"

    @property
    def suffix(self) -> str:
        """The file suffix for this compression."""
        return _SUFFIXES[self]

    @property
    def tar_filter(self) -> list[str]:
        """The tar arguments that select this compressor."""
        if self is Compression.ZSTD:
            return ["-I", "zstd -T0"]
        if self is Compression.GZIP:
            return ["-z"]
        return []


_SUFFIXES = {
    Compression.ZSTD: ".tar.zst",
    Compression.GZIP: ".tar.gz",
    Compression.NONE: ".sql",
}

# most capable first
COMPRESSION_PREFERENCE = (Compression.ZSTD, Compression.GZIP, Compression.NONE)


class ArtifactKind(str, Enum):
    """The four kinds of captured platform state."""

    DATABASE_DUMP = "database-dump"
    VOLUME_CONFIG = "volume-config"
    OBJECT_STORAGE = "object-storage"
    ENVIRONMENT_FILE = "environment-file"

    @property
    def stem(self) -> str:
        """The file name stem of this artifact inside a backup set."""
        return _STEMS[self]

    @property
    def compressions(self) -> tuple[Compression, ...]:
        """The representations this kind may have, most capable first."""
        if self is ArtifactKind.ENVIRONMENT_FILE:
            return ()
        if self is ArtifactKind.DATABASE_DUMP:
            return COMPRESSION_PREFERENCE
        return (Compression.ZSTD, Compression.GZIP)

    def filename(self, compression: Compression | None = None) -> str:
        """Get the artifact's file name for a compression.

        Parameters
        ----------
        compression : Compression | None
            The compression, must be None for the environment file.

        Returns
        -------
        str
            The file name.

        Raises
        ------
        ValueError
            If the compression is not valid for this kind.
        """
        if self is ArtifactKind.ENVIRONMENT_FILE:
            if compression is not None:
                raise ValueError("The environment file is never compressed")
            return self.stem
        if compression not in self.compressions:
            raise ValueError(f"Invalid compression {compression} for {self}")
        return f"{self.stem}{compression.suffix}"  # type: ignore[union-attr]


_STEMS = {
    ArtifactKind.DATABASE_DUMP: "db_dump",
    ArtifactKind.VOLUME_CONFIG: "db-config",
    ArtifactKind.OBJECT_STORAGE: "storage",
    ArtifactKind.ENVIRONMENT_FILE: ".env",
}


@dataclass(frozen=True)
class Artifact:
    """One captured unit of platform state."""

    kind: ArtifactKind
    path: Path
    compression: Compression | None = None


@dataclass(frozen=True)
class BackupSet:
    """A timestamped, self-contained backup directory."""

    path: Path

    @classmethod
    def create(
        cls, backups_dir: Path, now: datetime | None = None
    ) -> BackupSet:
        """Create a new backup set directory.

        Parameters
        ----------
        backups_dir : Path
            The parent directory of all backup sets.
        now : datetime | None
            The moment that names the set.

        Returns
        -------
        BackupSet
            The new (empty) backup set.
        """
        path = backups_dir / f"{BACKUP_SET_PREFIX}{make_timestamp(now)}"
        backups_dir.mkdir(parents=True, exist_ok=True)
        path.mkdir(exist_ok=False)
        return cls(path=path)

    @property
    def name(self) -> str:
        """The directory name."""
        return self.path.name

    @property
    def timestamp(self) -> str | None:
        """The ``YYYYMMDD_HHMMSS`` part of the name, if it has one."""
        match = _BACKUP_SET_RE.match(self.path.name)
        return match.group(1) if match else None

    def artifact_path(
        self, kind: ArtifactKind, compression: Compression | None = None
    ) -> Path:
        """Get where an artifact lives inside this set."""
        return self.path / kind.filename(compression)

    def find(self, kind: ArtifactKind) -> Artifact | None:
        """Find the most capable representation of an artifact kind.

        Parameters
        ----------
        kind : ArtifactKind
            The kind to look for.

        Returns
        -------
        Artifact | None
            The artifact, or None if the set does not hold this kind.
        """
        if kind is ArtifactKind.ENVIRONMENT_FILE:
            path = self.artifact_path(kind)
            return Artifact(kind=kind, path=path) if path.is_file() else None
        for compression in kind.compressions:
            path = self.artifact_path(kind, compression)
            if path.is_file():
                return Artifact(kind=kind, path=path, compression=compression)
        return None

    def artifacts(self) -> list[Artifact]:
        """List the artifacts present in this set (one per kind)."""
        found = [self.find(kind) for kind in ArtifactKind]
        return [artifact for artifact in found if artifact is not None]


OutcomeStatus = Literal["ok", "skipped", "failed"]


@dataclass
class ArtifactOutcome:
    """What happened to one artifact in a run."""

    kind: ArtifactKind
    status: OutcomeStatus
    message: str = ""
    path: Path | None = None
    sha256: str | None = None


@dataclass
class BackupReport:
    """Result of a backup run."""

    backup_set: BackupSet
    compression: Compression
    outcomes: list[ArtifactOutcome] = field(default_factory=list)

    def outcome(self, kind: ArtifactKind) -> ArtifactOutcome | None:
        """Get the recorded outcome of an artifact kind."""
        for item in self.outcomes:
            if item.kind is kind:
                return item
        return None

    @property
    def failed(self) -> list[ArtifactOutcome]:
        """The artifacts that failed."""
        return [item for item in self.outcomes if item.status == "failed"]


class RestoreState(str, Enum):
    """States of the restore state machine."""

    VALIDATING = "validating"
    CONFIRMING = "confirming"
    RESTORING_DATABASE = "restoring-database"
    RESTORING_CONFIG_VOLUME = "restoring-config-volume"
    RESTORING_STORAGE = "restoring-storage"
    RESTORING_ENVIRONMENT = "restoring-environment"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether the machine stops in this state."""
        return self in (
            RestoreState.DONE,
            RestoreState.CANCELLED,
            RestoreState.FAILED,
        )


@dataclass
class RestoreReport:
    """Result of a restore run."""

    path: Path
    state: RestoreState = RestoreState.VALIDATING
    history: list[RestoreState] = field(
        default_factory=lambda: [RestoreState.VALIDATING]
    )
    outcomes: list[ArtifactOutcome] = field(default_factory=list)
    error: str | None = None

    def enter(self, state: RestoreState) -> None:
        """Move to a new state and remember it."""
        self.state = state
        self.history.append(state)

    def outcome(self, kind: ArtifactKind) -> ArtifactOutcome | None:
        """Get the recorded outcome of an artifact kind."""
        for item in self.outcomes:
            if item.kind is kind:
                return item
        return None

    @property
    def exit_code(self) -> int:
        """The process exit code for this result."""
        return 1 if self.state is RestoreState.FAILED else 0
