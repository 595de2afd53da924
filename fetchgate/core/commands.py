"""External command capability: run a shell pipeline, keep its first line.

The reproducibility check talks to curl, jq and the package index
through shell pipelines. Keeping that behind ``CommandRunner`` lets
tests substitute canned answers for every command.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol, runtime_checkable

from fetchgate.core.diagnostics import FetchAbortedError

logger = logging.getLogger(__name__)


class CommandError(FetchAbortedError):
    """Raised when an external command cannot be started or exits non-zero."""


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for running one shell command synchronously."""

    def first_line(self, command: str) -> str:
        """Run *command* and return its first output line, stripped.

        Raises ``CommandError`` if the command fails.
        """
        ...


class ShellCommandRunner:
    """Run commands through ``/bin/sh -c``.

    Parameters
    ----------
    debug:
        Log each command line before running it.
    timeout:
        Seconds before a command is abandoned (``None`` waits forever).
    """

    def __init__(self, *, debug: bool = False, timeout: float | None = None) -> None:
        self.debug = debug
        self.timeout = timeout

    def first_line(self, command: str) -> str:
        if self.debug:
            logger.debug("%s", command)
        try:
            result = subprocess.run(
                ["/bin/sh", "-c", command],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (subprocess.SubprocessError, OSError) as exc:
            raise CommandError(f"sh: {exc}") from exc

        if result.returncode != 0:
            logger.debug("sh exited with %d: %s", result.returncode, result.stderr.strip())
            raise CommandError(f"Sub-process sh returned an error code ({result.returncode})")

        lines = result.stdout.splitlines()
        return lines[0].strip() if lines else ""
