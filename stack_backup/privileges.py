# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Who owns the project, and what runs as root.

Container and volume access needs root (or docker group) rights, while
files handed back to the user (backup sets, version control calls) must
belong to the repository owner.
"""

import logging
import os
import pwd
import shutil
import subprocess  # nosemgrep # nosec
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .errors import PrivilegeError, StructuralError
from .runtime import output

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The resolved project root and its non-privileged owner."""

    owner: str
    project_root: Path
    is_root: bool

    @property
    def project_name(self) -> str:
        """The project's directory name."""
        return self.project_root.name


def running_as_root() -> bool:
    """Check if the current process has uid 0."""
    return os.geteuid() == 0


def path_owner(path: Path) -> str:
    """Get the user name that owns a path.

    Parameters
    ----------
    path : Path
        The path to check.

    Returns
    -------
    str
        The owner's name (or uid if the user is unknown).
    """
    uid = path.stat().st_uid
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def as_owner(owner: str, cmd: Sequence[str], is_root: bool) -> List[str]:
    """Wrap a command so that it runs as the repository owner.

    Parameters
    ----------
    owner : str
        The user to run as.
    cmd : Sequence[str]
        The command.
    is_root : bool
        Whether we currently are root.

    Returns
    -------
    List[str]
        The (possibly sudo-wrapped) command.
    """
    if is_root and owner != "root":
        return ["sudo", "-u", owner, *cmd]
    return list(cmd)


def resolve_identity(
    start: Path, project_root: Path | None = None
) -> Identity:
    """Resolve the project root and the repository owner.

    Parameters
    ----------
    start : Path
        Where to start looking (a directory inside the repository).
    project_root : Path | None
        An explicitly configured project root, skips git discovery.

    Returns
    -------
    Identity
        The resolved identity.

    Raises
    ------
    StructuralError
        If no project root can be determined.
    """
    is_root = running_as_root()
    if project_root is not None:
        root = project_root.resolve()
        if not root.is_dir():
            raise StructuralError(f"Project root not found: {root}")
        return Identity(
            owner=path_owner(root), project_root=root, is_root=is_root
        )
    start = start.resolve()
    if not start.is_dir():
        raise StructuralError(f"Directory not found: {start}")
    start_owner = path_owner(start)
    cmd = as_owner(
        start_owner,
        ["git", "-C", str(start), "rev-parse", "--show-toplevel"],
        is_root,
    )
    try:
        top = output(cmd)
    except (subprocess.CalledProcessError, OSError) as error:
        raise StructuralError(
            f"Cannot resolve the project root from {start}: "
            "not inside a git repository?"
        ) from error
    if not top:
        raise StructuralError(f"Cannot resolve the project root from {start}")
    root = Path(top).resolve()
    return Identity(owner=path_owner(root), project_root=root, is_root=is_root)


def fix_ownership(path: Path, identity: Identity) -> None:
    """Recursively hand a path over to the repository owner.

    Only root can give files away; for anyone else the files already
    belong to the caller and nothing happens.

    Parameters
    ----------
    path : Path
        The file or directory.
    identity : Identity
        The resolved identity.
    """
    if not identity.is_root:
        LOG.debug("Not root, leaving ownership of %s as is", path)
        return
    shutil.chown(path, user=identity.owner, group=_owner_group(identity.owner))
    if path.is_dir():
        for item in path.rglob("*"):
            shutil.chown(
                item, user=identity.owner, group=_owner_group(identity.owner)
            )


def _owner_group(owner: str) -> int | None:
    try:
        return pwd.getpwnam(owner).pw_gid
    except KeyError:
        return None


def elevate(argv: Sequence[str]) -> None:
    """Re-execute the current command under sudo.

    Parameters
    ----------
    argv : Sequence[str]
        The arguments to pass after ``python -m stack_backup``.

    Raises
    ------
    PrivilegeError
        If sudo is not available or the exec fails.
    """
    sudo = shutil.which("sudo")
    if not sudo:
        raise PrivilegeError("Root privileges are required but sudo is missing")
    LOG.info("Elevating permissions to root...")
    cmd = [sudo, "-E", sys.executable, "-m", "stack_backup", *argv]
    try:
        os.execv(sudo, cmd)
    except OSError as error:
        raise PrivilegeError(
            "Failed to elevate to root. Please run with sudo."
        ) from error
