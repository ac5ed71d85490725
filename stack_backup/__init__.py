# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Back up and restore a self-hosted compose stack."""

from ._version import __version__
from .builder import BackupSetBuilder
from .coordinator import RestoreCoordinator

__all__ = ["BackupSetBuilder", "RestoreCoordinator", "__version__"]
