"""Yes/no confirmation used by the gates.

The gates only need ``confirm(question, default) -> bool``. The default
implementation asks through a Rich console; tests and batch callers
pass any object with the same method.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.prompt import Confirm

logger = logging.getLogger(__name__)


@runtime_checkable
class Confirmer(Protocol):
    """Protocol for interactive yes/no prompts."""

    def confirm(self, question: str, default: bool) -> bool:
        """Return the operator's answer, or *default* if none was given."""
        ...


class ConsoleConfirmer:
    """Ask on a Rich console, honouring a global assume-yes.

    Parameters
    ----------
    console:
        Where the question is printed and the answer read.
    assume_yes:
        Answer every question with yes without reading input.
    """

    def __init__(self, console: Console | None = None, *, assume_yes: bool = False) -> None:
        self.console = console or Console()
        self.assume_yes = assume_yes

    def confirm(self, question: str, default: bool) -> bool:
        if self.assume_yes:
            self.console.print(f"{question} [Y/n] Y", markup=False)
            return True
        if not self.console.is_interactive:
            logger.info("Non-interactive console, answering %r with default.", question)
            return default
        return Confirm.ask(question, console=self.console, default=default)


class FixedAnswer:
    """Confirmer that always gives the same answer."""

    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.questions: list[str] = []

    def confirm(self, question: str, default: bool) -> bool:
        self.questions.append(question)
        return self.answer
