"""Trust gate — refuse unauthenticated items unless explicitly allowed."""

from __future__ import annotations

from rich.console import Console

from fetchgate.config import FetchConfig
from fetchgate.core.decision_policy import GateDecision, PolicyText, apply_decision_policy
from fetchgate.core.diagnostics import Diagnostics
from fetchgate.core.prompt import Confirmer
from fetchgate.models.items import FetchBatch

TRUST_TEXT = PolicyText(
    list_header="WARNING: The following packages cannot be authenticated!",
    override_notice="Authentication warning overridden.",
    question="Install these packages without verification?",
    rejection="Some packages could not be authenticated",
    automated_rejection=(
        "There were unauthenticated packages and -y was used "
        "without --allow-unauthenticated"
    ),
)


def untrusted_items(batch: FetchBatch) -> list[str]:
    """Short descriptions of every item whose origin is not authenticated."""
    return [item.short_desc for item in batch if not item.trusted]


def check_trust(
    batch: FetchBatch,
    *,
    config: FetchConfig,
    prompt_user: bool,
    confirmer: Confirmer,
    console: Console,
    diagnostics: Diagnostics,
) -> GateDecision:
    """Pass, prompt, or reject a batch according to its trust flags."""
    return apply_decision_policy(
        untrusted_items(batch),
        override=lambda c: c.allow_unauthenticated,
        text=TRUST_TEXT,
        config=config,
        prompt_user=prompt_user,
        confirmer=confirmer,
        console=console,
        diagnostics=diagnostics,
    )
