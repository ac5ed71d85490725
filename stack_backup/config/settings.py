# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Stack backup settings module."""

import logging
import shlex
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Annotated

from ._common import ENV_PREFIX, dot_env_path

LOG = logging.getLogger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Settings class.

    Relative paths are resolved against the project root, which is either
    set explicitly or discovered from the repository that holds the stack.
    """

    project_root: Optional[Path] = None
    backups_dir: Path = Path("backups")
    storage_dir: Path = Path("volumes/storage")
    env_file: Path = Path(".env")
    # Collaborators
    compose_command: str = "docker compose"
    container_command: str = "docker"
    db_service: str = "db"
    db_user: str = "postgres"
    config_volume_path: str = "/etc/postgresql-custom"
    helper_image: str = "alpine"
    # Database readiness after a start request
    readiness_timeout: Annotated[float, Field(ge=1, le=3600)] = 60.0
    readiness_interval: Annotated[float, Field(ge=0.1, le=60)] = 2.0
    # Misc
    verify_archives: bool = True
    elevate: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate the log level.

        Parameters
        ----------
        value : str
            The log level

        Returns
        -------
        str
            The upper-cased log level

        Raises
        ------
        ValueError
            If the log level is not known
        """
        upper = str(value).upper()
        if upper not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return upper

    @field_validator("compose_command", "container_command")
    @classmethod
    def validate_command(cls, value: str) -> str:
        """Make sure a command is not empty.

        Parameters
        ----------
        value : str
            The command line

        Returns
        -------
        str
            The stripped command line

        Raises
        ------
        ValueError
            If the command is empty
        """
        if not value.strip():
            raise ValueError("The command must not be empty")
        return value.strip()

    @classmethod
    def load(cls, cwd: Path | None = None) -> "Settings":
        """Load the settings.

        Parameters
        ----------
        cwd : Path | None
            Where to look for the dotenv file.

        Returns
        -------
        Settings
            The settings instance
        """
        env_path = dot_env_path(cwd)
        if env_path.exists():
            LOG.debug("Loading settings from %s", env_path)
            load_dotenv(env_path, override=False)
        return cls()

    @property
    def compose(self) -> List[str]:
        """The compose command as argv."""
        return shlex.split(self.compose_command)

    @property
    def container(self) -> List[str]:
        """The container runtime command as argv."""
        return shlex.split(self.container_command)

    def under_root(self, root: Path, path: Path) -> Path:
        """Resolve a configured path against the project root.

        Parameters
        ----------
        root : Path
            The project root.
        path : Path
            The configured path.

        Returns
        -------
        Path
            The absolute path.
        """
        return path if path.is_absolute() else root / path

    def backups_path(self, root: Path) -> Path:
        """Where backup sets are created."""
        return self.under_root(root, self.backups_dir)

    def storage_path(self, root: Path) -> Path:
        """The object-storage directory."""
        return self.under_root(root, self.storage_dir)

    def env_path(self, root: Path) -> Path:
        """The platform's environment file."""
        return self.under_root(root, self.env_file)
