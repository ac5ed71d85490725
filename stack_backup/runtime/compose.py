# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Docker compose backed service runtime."""

import logging
import subprocess  # nosemgrep # nosec
from pathlib import Path
from typing import List, Sequence

from ._process import output, pipe_run, run, run_to_file, succeeds

LOG = logging.getLogger(__name__)


class ComposeRuntime:
    """Talk to the stack's services through ``docker compose``.

    Parameters
    ----------
    compose : Sequence[str]
        The compose command, e.g. ``["docker", "compose"]``.
    cwd : Path
        The project directory holding the compose file.
    """

    def __init__(self, compose: Sequence[str], cwd: Path) -> None:
        self.compose = list(compose)
        self.cwd = cwd

    def _cmd(self, *args: str) -> List[str]:
        return self.compose + list(args)

    def _exec(self, service: str, args: Sequence[str]) -> List[str]:
        # -T: no tty, we pipe bytes through
        return self._cmd("exec", "-T", service, *args)

    def container_id(self, service: str) -> str | None:
        """Get the id of a service's container (running or not).

        Parameters
        ----------
        service : str
            The compose service name

        Returns
        -------
        str | None
            The first container id, None if there is no container.
        """
        try:
            out = output(self._cmd("ps", "-a", "-q", service), cwd=self.cwd)
        except (subprocess.CalledProcessError, OSError) as error:
            LOG.debug("Could not list containers of %s: %s", service, error)
            return None
        ids = [line.strip() for line in out.splitlines() if line.strip()]
        return ids[0] if ids else None

    def is_running(self, service: str) -> bool:
        """Check whether a service is up.

        Parameters
        ----------
        service : str
            The compose service name

        Returns
        -------
        bool
            True if the service has a running container.
        """
        try:
            out = output(
                self._cmd("ps", "--status", "running", "-q", service),
                cwd=self.cwd,
            )
        except (subprocess.CalledProcessError, OSError):
            return False
        return bool(out)

    def start(self, service: str) -> None:
        """Start a service in the background."""
        run(self._cmd("up", "-d", service), cwd=self.cwd)

    def create(self, service: str) -> None:
        """Create a service's container without starting it."""
        run(self._cmd("up", "--no-start", service), cwd=self.cwd)

    def exec_ok(self, service: str, args: Sequence[str]) -> bool:
        """Run a probe inside a running service."""
        return succeeds(self._exec(service, args), cwd=self.cwd)

    def exec_to_file(
        self, service: str, args: Sequence[str], out_file: Path
    ) -> None:
        """Run a command inside a service, streaming stdout to a host file."""
        run_to_file(self._exec(service, args), out_file, cwd=self.cwd)

    def exec_from(
        self, source: Sequence[str], service: str, args: Sequence[str]
    ) -> None:
        """Pipe a host command's stdout into a command inside a service."""
        pipe_run(source, self._exec(service, args), cwd=self.cwd)
