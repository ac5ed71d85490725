# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Collaborators: processes, compose services and helper containers."""

from ._process import (
    output,
    pipe_run,
    redact,
    run,
    run_to_file,
    succeeds,
    which,
)
from .compose import ComposeRuntime
from .helper import HelperContainerBroker
from .protocol import ServiceRuntime, VolumeBroker

__all__ = [
    "ComposeRuntime",
    "HelperContainerBroker",
    "ServiceRuntime",
    "VolumeBroker",
    "output",
    "pipe_run",
    "redact",
    "run",
    "run_to_file",
    "succeeds",
    "which",
]
