# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.
"""Configuration module for stack-backup."""

from ._common import DOT_ENV_NAME, ENV_PREFIX, dot_env_path
from .settings import Settings

__all__ = [
    "DOT_ENV_NAME",
    "ENV_PREFIX",
    "Settings",
    "dot_env_path",
]
