# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Pick the compression strategy for a run."""

import logging
import warnings
from typing import Callable, Sequence

from .errors import CapabilityDegradedWarning
from .models import Compression
from .runtime import succeeds

LOG = logging.getLogger(__name__)

ZSTD_PROBE = ("zstd", "--version")

Probe = Callable[[Sequence[str]], bool]


def host_has_zstd(probe: Probe = succeeds) -> bool:
    """Check for a working zstd binary on the host.

    Parameters
    ----------
    probe : Probe
        Runs a command and tells whether it succeeded.

    Returns
    -------
    bool
        True if ``zstd --version`` runs.
    """
    return probe(list(ZSTD_PROBE))


def detect_compression(probe: Probe = succeeds) -> Compression:
    """Select the compression strategy for one backup run.

    The answer is computed on every call. Callers resolve it once and hand
    the same value to every artifact of the run.

    Parameters
    ----------
    probe : Probe
        Runs a command and tells whether it succeeded.

    Returns
    -------
    Compression
        ``zstd`` if available, ``gzip`` otherwise.
    """
    if host_has_zstd(probe):
        LOG.debug("zstd found, using zstd compression")
        return Compression.ZSTD
    message = "zstd not found on host. Falling back to gzip."
    LOG.warning(message)
    warnings.warn(message, CapabilityDegradedWarning, stacklevel=2)
    return Compression.GZIP
