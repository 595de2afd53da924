"""Run a batch through the engine and classify every item afterwards.

Three terminal classes are distinguished:

- DONE: the item is ``DONE`` and complete; nothing to report.
- TRANSIENT_NETWORK_FAILURE: the item was never attempted (still
  ``IDLE``). Only recognised when the caller asks for it, since only
  some callers can make use of a "try again later" signal.
- HARD_FAILURE: anything else. Reported with the item's URI, stripped of
  credentials, and the engine's error text.

A hard failure does not stop classification; every item is looked at.
"""

from __future__ import annotations

import logging

from fetchgate.core.diagnostics import Diagnostics, FetchAbortedError
from fetchgate.core.uris import strip_credentials
from fetchgate.engine.base import EngineRunResult, FetchEngine
from fetchgate.models.items import FetchBatch, FetchItem, ItemStatus
from fetchgate.models.outcomes import (
    ItemClassification,
    ItemOutcome,
    RunOutcome,
    RunReport,
)

logger = logging.getLogger(__name__)


class EngineRunError(FetchAbortedError):
    """Raised by workflows when the engine reported an overall failure."""


def classify_item(item: FetchItem, *, track_transient: bool) -> ItemClassification:
    """Interpret one item's terminal state."""
    if item.status == ItemStatus.DONE and item.complete:
        return ItemClassification.DONE
    if track_transient and item.status == ItemStatus.IDLE:
        return ItemClassification.TRANSIENT_NETWORK_FAILURE
    return ItemClassification.HARD_FAILURE


def acquire_run(
    engine: FetchEngine,
    batch: FetchBatch,
    *,
    diagnostics: Diagnostics,
    pulse_interval: float = 0.0,
    track_transient: bool = False,
) -> RunReport:
    """Hand *batch* to *engine*, block until it finishes, classify items.

    Returns a report whose ``outcome`` is FAILED only if the engine
    itself gave up, in which case no item is classified. Per-item hard
    failures are recorded on *diagnostics* as
    ``Failed to fetch <uri>  <error>`` and surface as ``report.failed``.
    """
    if pulse_interval > 0:
        result = engine.run(batch, pulse_interval)
    else:
        result = engine.run(batch)

    if result == EngineRunResult.FAILED:
        logger.error("Engine reported failure for a batch of %d item(s).", len(batch))
        return RunReport(outcome=RunOutcome.FAILED)

    outcomes: list[ItemOutcome] = []
    for position, item in enumerate(batch):
        classification = classify_item(item, track_transient=track_transient)
        uri = strip_credentials(item.desc_uri)

        if classification == ItemClassification.TRANSIENT_NETWORK_FAILURE:
            logger.info("%s was not attempted; worth retrying later.", uri)
        elif classification == ItemClassification.HARD_FAILURE:
            diagnostics.error(f"Failed to fetch {uri}  {item.error_text}")

        outcomes.append(
            ItemOutcome(
                position=position,
                short_desc=item.short_desc,
                uri=uri,
                classification=classification,
                error_text=item.error_text,
            )
        )

    report = RunReport(outcome=RunOutcome.SUCCEEDED, items=outcomes)
    logger.debug(
        "Run finished: %d done, %d transient, %d failed.",
        len(report.by_classification(ItemClassification.DONE)),
        len(report.by_classification(ItemClassification.TRANSIENT_NETWORK_FAILURE)),
        len(report.by_classification(ItemClassification.HARD_FAILURE)),
    )
    return report
