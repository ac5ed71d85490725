# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Host side tar archives.

Archives are written by the host's ``tar`` with the compressor as a filter,
so zstd and gzip share one code path.
"""

import hashlib
import logging
import subprocess  # nosemgrep # nosec
from pathlib import Path
from typing import List, Sequence

from .errors import ArchiveIntegrityError
from .models import Compression
from .runtime import output, run

LOG = logging.getLogger(__name__)


def create_command(
    compression: Compression,
    out_file: Path,
    root: Path,
    members: Sequence[str],
) -> List[str]:
    """Build the tar command that archives ``members`` of ``root``."""
    return [
        "tar",
        *compression.tar_filter,
        "-cf",
        str(out_file),
        "-C",
        str(root),
        *members,
    ]


def extract_command(
    compression: Compression, archive: Path, dest: Path
) -> List[str]:
    """Build the tar command that extracts an archive into ``dest``."""
    return [
        "tar",
        *compression.tar_filter,
        "-xf",
        str(archive),
        "-C",
        str(dest),
    ]


def stream_member_command(
    compression: Compression, archive: Path, member: str
) -> List[str]:
    """Build the command that writes one member's content to stdout."""
    if compression is Compression.NONE:
        return ["cat", str(archive)]
    return ["tar", *compression.tar_filter, "-xOf", str(archive), member]


def make_archive(
    compression: Compression,
    out_file: Path,
    root: Path,
    members: Sequence[str],
) -> None:
    """Create a compressed tar archive.

    Parameters
    ----------
    compression : Compression
        The compressor, never ``none``.
    out_file : Path
        The archive to write.
    root : Path
        The directory the members are relative to.
    members : Sequence[str]
        The entries to archive.

    Raises
    ------
    ValueError
        If asked to make an uncompressed archive.
    """
    if compression is Compression.NONE:
        raise ValueError("Archives are always compressed")
    run(create_command(compression, out_file, root, members))


def extract_archive(
    compression: Compression, archive: Path, dest: Path
) -> None:
    """Extract a tar archive, overwriting what is already there.

    Parameters
    ----------
    compression : Compression
        The archive's compressor.
    archive : Path
        The archive to read.
    dest : Path
        The directory to extract into.
    """
    dest.mkdir(parents=True, exist_ok=True)
    run(extract_command(compression, archive, dest))


def list_archive(compression: Compression, archive: Path) -> List[str]:
    """List the members of a tar archive."""
    out = output(["tar", *compression.tar_filter, "-tf", str(archive)])
    return [line for line in out.splitlines() if line.strip()]


def sha256_file(path: Path) -> str:
    """Get the sha256sum of a file.

    Parameters
    ----------
    path : Path
        The path to get the sha256sum

    Returns
    -------
    str
        The calculated sha256sum.
    """
    h = hashlib.sha256(usedforsecurity=False)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_archive(compression: Compression, archive: Path) -> str:
    """Check that a freshly written archive can be read back.

    Parameters
    ----------
    compression : Compression
        The archive's compressor.
    archive : Path
        The archive to check.

    Returns
    -------
    str
        The archive's sha256.

    Raises
    ------
    ArchiveIntegrityError
        If the archive is missing, empty, or unreadable.
    """
    if not archive.is_file() or archive.stat().st_size == 0:
        raise ArchiveIntegrityError(f"Archive is missing or empty: {archive}")
    if compression is not Compression.NONE:
        try:
            members = list_archive(compression, archive)
        except (subprocess.CalledProcessError, OSError) as error:
            raise ArchiveIntegrityError(
                f"Archive cannot be read back: {archive}"
            ) from error
        if not members:
            raise ArchiveIntegrityError(f"Archive has no entries: {archive}")
    digest = sha256_file(archive)
    LOG.debug("SHA256 %s: %s", archive.name, digest)
    return digest
