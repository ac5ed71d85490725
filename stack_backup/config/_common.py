# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Common configuration constants and functions."""

import os
from pathlib import Path

ENV_PREFIX = "STACK_BACKUP_"
# The platform's own .env is a backup artifact, so our settings live elsewhere.
DOT_ENV_NAME = ".backup.env"


def dot_env_path(cwd: Path | None = None) -> Path:
    """Get the dotenv file with the tool's settings.

    Parameters
    ----------
    cwd : Path | None
        The directory to look in, defaults to the current one.

    Returns
    -------
    Path
        The (possibly missing) dotenv path.
    """
    env_path = os.environ.get(f"{ENV_PREFIX}DOT_ENV", "").strip()
    if env_path:
        return Path(env_path)
    return (cwd or Path.cwd()) / DOT_ENV_NAME
