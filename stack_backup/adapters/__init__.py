# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Per-artifact capture and restore."""

from .database import DatabaseSnapshotAdapter
from .environment import EnvironmentFileCopier
from .storage import StorageArchiver
from .volume import PrivilegedVolumeArchiver

__all__ = [
    "DatabaseSnapshotAdapter",
    "EnvironmentFileCopier",
    "PrivilegedVolumeArchiver",
    "StorageArchiver",
]
