"""Reproducibility gate — consult the reproducible-builds status feed.

For every item the owning source package is looked up, then the locally
cached status feed is filtered by (suite, source package, "reproducible",
native architecture). Items without a matching record are flagged and
handed to the shared decision policy.

The feed is refreshed with a conditional download before any query.
Any failing command aborts the whole gate; nothing is evaluated
partially.
"""

from __future__ import annotations

import logging
import shlex

from rich.console import Console

from fetchgate.config import FetchConfig
from fetchgate.core.commands import CommandError, CommandRunner
from fetchgate.core.decision_policy import GateDecision, PolicyText, apply_decision_policy
from fetchgate.core.diagnostics import Diagnostics
from fetchgate.core.prompt import Confirmer
from fetchgate.models.items import FetchBatch

logger = logging.getLogger(__name__)

REPRODUCIBLE_TEXT = PolicyText(
    list_header="WARNING: The following packages are not reproducible!",
    override_notice="Unreproducible warning overridden.",
    question="Install these packages anyway?",
    rejection="Some packages are not reproducible",
    automated_rejection=(
        "There were unreproducible packages and -y was used "
        "without --allow-unreproducible"
    ),
)

_STATUS_FILTER = (
    ".[]"
    " | select(.suite==$suite)"
    " | select(.package==$pkg)"
    ' | select(.status=="reproducible")'
    " | select(.architecture==$arch)"
)

_SOURCE_FILTER = (
    "[.packages[] | select(.name==$pkg) | .source // empty"
    ' | select(. != "")][0] // empty'
)


def update_command(config: FetchConfig) -> str:
    """Conditional download of the status feed into the local cache file."""
    cache = shlex.quote(str(config.reproducible_cache))
    silent = "" if config.debug_reproducible else " --silent"
    return (
        f"curl{silent} --location -z {cache} -o {cache} "
        f"{shlex.quote(config.reproducible_status_url)}"
    )


def source_command(config: FetchConfig, binary: str) -> str:
    """Query the package index snapshot for the source of *binary*."""
    return (
        f"jq --raw-output --arg pkg {shlex.quote(binary)} "
        f"{shlex.quote(_SOURCE_FILTER)} {shlex.quote(str(config.index_path))}"
    )


def status_command(config: FetchConfig, source: str) -> str:
    """Filter the cached feed for a reproducible record of *source*."""
    return (
        f"bunzip2 -c {shlex.quote(str(config.reproducible_cache))} | "
        "jq --compact-output --raw-output "
        f"--arg suite {shlex.quote(config.default_release)} "
        f"--arg pkg {shlex.quote(source)} "
        f"--arg arch {shlex.quote(config.native_architecture)} "
        f"{shlex.quote(_STATUS_FILTER)}"
    )


def unreproducible_items(
    batch: FetchBatch,
    *,
    config: FetchConfig,
    runner: CommandRunner,
    diagnostics: Diagnostics,
) -> list[str]:
    """Refresh the feed and return the items with no reproducible record.

    Raises ``CommandError`` (recorded on *diagnostics*) when the feed
    cannot be refreshed or any lookup fails.
    """
    config.reproducible_cache.parent.mkdir(parents=True, exist_ok=True)
    try:
        runner.first_line(update_command(config))
    except CommandError:
        raise diagnostics.abort(CommandError, "Could not update reproducible cache")

    flagged: list[str] = []
    for item in batch:
        binary = item.short_desc
        logger.debug("Checking reproducibility of %s", binary)

        try:
            source = runner.first_line(source_command(config, binary))
        except CommandError:
            raise diagnostics.abort(CommandError, "Could not check source package name")
        source = source or binary

        try:
            record = runner.first_line(status_command(config, source))
        except CommandError:
            raise diagnostics.abort(CommandError, "Could not filter reproducible status")

        if not record:
            flagged.append(binary)
    return flagged


def check_reproducible(
    batch: FetchBatch,
    *,
    config: FetchConfig,
    prompt_user: bool,
    runner: CommandRunner,
    confirmer: Confirmer,
    console: Console,
    diagnostics: Diagnostics,
) -> GateDecision:
    """Pass, prompt, or reject a batch according to reproducibility status."""
    if config.allow_unreproducible:
        logger.debug("Reproducibility check skipped: unreproducible packages allowed.")
        return GateDecision.OVERRIDDEN

    flagged = unreproducible_items(
        batch, config=config, runner=runner, diagnostics=diagnostics
    )
    return apply_decision_policy(
        flagged,
        override=lambda c: c.allow_unreproducible,
        text=REPRODUCIBLE_TEXT,
        config=config,
        prompt_user=prompt_user,
        confirmer=confirmer,
        console=console,
        diagnostics=diagnostics,
    )
