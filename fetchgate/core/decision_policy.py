"""Shared accept / prompt / override policy for the verification gates.

Both the trust gate and the reproducibility gate flag a list of
packages and then ask the same sequence of questions:

    override configured?  -> pass with a notice
    prompting disallowed? -> reject
    may we prompt?        -> ask, reject on "no"
    deprecated force-yes? -> pass with a deprecation warning
    otherwise             -> reject (automated run without --allow-*)

Only the wording and the override option differ, so each gate passes a
``PolicyText`` and an accessor for its override flag.
"""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Callable, Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict
from rich.console import Console

from fetchgate.config import FetchConfig
from fetchgate.core.diagnostics import Diagnostics, FetchAbortedError
from fetchgate.core.prompt import Confirmer

logger = logging.getLogger(__name__)

FORCE_YES_DEPRECATED = (
    "--force-yes is deprecated, use one of the options starting with --allow instead."
)


class GateRejectedError(FetchAbortedError):
    """Raised when a gate refuses to let the batch run."""


class GateDecision(str, Enum):
    """Why a gate let the batch through."""

    CLEAN = "clean"  # nothing was flagged
    OVERRIDDEN = "overridden"  # --allow-* configured
    CONFIRMED = "confirmed"  # operator answered yes
    FORCED = "forced"  # deprecated --force-yes


class PolicyText(BaseModel):
    """Fixed wording for one gate."""

    model_config = ConfigDict(frozen=True)

    list_header: str
    override_notice: str
    question: str
    rejection: str
    automated_rejection: str


def show_list(console: Console, header: str, names: Sequence[str]) -> None:
    """Print *header* followed by an indented, wrapped list of names."""
    console.print(header, markup=False, highlight=False)
    width = max(console.width, 20)
    body = textwrap.fill(
        " ".join(names),
        width=width,
        initial_indent="  ",
        subsequent_indent="  ",
        break_on_hyphens=False,
    )
    console.print(body, markup=False, highlight=False, soft_wrap=True)


def apply_decision_policy(
    flagged: Sequence[str],
    *,
    override: Callable[[FetchConfig], bool],
    text: PolicyText,
    config: FetchConfig,
    prompt_user: bool,
    confirmer: Confirmer,
    console: Console,
    diagnostics: Diagnostics,
) -> GateDecision:
    """Decide whether a batch with *flagged* packages may proceed.

    Returns the reason for passing; raises ``GateRejectedError`` (after
    recording the message on *diagnostics*) when the batch must not run.
    """
    if not flagged:
        return GateDecision.CLEAN

    show_list(console, text.list_header, flagged)

    if override(config):
        console.print(text.override_notice, markup=False, highlight=False)
        logger.info("%d flagged package(s) accepted by override.", len(flagged))
        return GateDecision.OVERRIDDEN

    if not prompt_user:
        raise diagnostics.abort(GateRejectedError, text.rejection)

    if config.quiet < 2 and not config.assume_yes:
        if not confirmer.confirm(text.question, False):
            raise diagnostics.abort(GateRejectedError, text.rejection)
        return GateDecision.CONFIRMED

    if config.force_yes:
        diagnostics.warning(FORCE_YES_DEPRECATED)
        return GateDecision.FORCED

    raise diagnostics.abort(GateRejectedError, text.automated_rejection)
