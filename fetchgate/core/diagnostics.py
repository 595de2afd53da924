"""User-visible diagnostics collected over one command.

Errors and warnings are not printed where they arise. They accumulate
here (and are logged at the matching level) so the CLI can render them
once, and so a workflow can refuse to start a run while an earlier
step has left an error behind.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


_LOG_LEVELS: dict[Severity, int] = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
}


class Diagnostic(BaseModel):
    """A single recorded message."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str


class FetchAbortedError(RuntimeError):
    """Base for every condition that aborts a workflow.

    The message is also recorded as an error diagnostic by whoever
    raises it through :meth:`Diagnostics.abort`.
    """


class Diagnostics:
    """Append-only collector of errors and warnings."""

    def __init__(self) -> None:
        self._entries: list[Diagnostic] = []

    def _record(self, severity: Severity, message: str) -> Diagnostic:
        entry = Diagnostic(severity=severity, message=message)
        self._entries.append(entry)
        logger.log(_LOG_LEVELS[severity], message)
        return entry

    def error(self, message: str) -> Diagnostic:
        return self._record(Severity.ERROR, message)

    def warning(self, message: str) -> Diagnostic:
        return self._record(Severity.WARNING, message)

    def abort(self, exc_type: type[FetchAbortedError], message: str) -> FetchAbortedError:
        """Record *message* as an error and return the exception to raise."""
        self.error(message)
        return exc_type(message)

    def has_errors(self) -> bool:
        """Whether an error is pending from an earlier step."""
        return any(e.severity == Severity.ERROR for e in self._entries)

    @property
    def entries(self) -> list[Diagnostic]:
        return list(self._entries)

    def errors(self) -> list[str]:
        return [e.message for e in self._entries if e.severity == Severity.ERROR]

    def warnings(self) -> list[str]:
        return [e.message for e in self._entries if e.severity == Severity.WARNING]

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Diagnostics(entries={len(self._entries)}, errors={len(self.errors())})"
