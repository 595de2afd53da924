"""Contract between the workflows and a fetch engine.

The engine owns transfers: it turns index records into fetch items,
moves bytes, and advances each item's status. The workflows only queue
items, hand the batch over, and interpret what comes back.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from fetchgate.models.index import IndexedVersion
from fetchgate.models.items import FetchBatch, FetchItem


class EngineRunResult(str, Enum):
    """Overall result of ``FetchEngine.run``."""

    CONTINUE = "continue"  # every item reached a terminal state
    FAILED = "failed"  # the engine could not run at all


class SlotState(str, Enum):
    """What happened when an archive was queued."""

    QUEUED = "queued"  # an item exists and has a destination
    SATISFIED = "satisfied"  # already present, nothing to fetch
    UNRESOLVED = "unresolved"  # no item could be built


class ArchiveSlot(BaseModel):
    """Result of queueing one archive, aligned with the version selection."""

    model_config = ConfigDict(frozen=True)

    version: IndexedVersion
    state: SlotState
    item: FetchItem | None = None
    reason: str = ""


@runtime_checkable
class FetchEngine(Protocol):
    """Protocol every fetch engine satisfies."""

    def queue_archive(
        self, batch: FetchBatch, version: IndexedVersion, dest_dir: Path
    ) -> ArchiveSlot:
        """Build an item fetching *version* into *dest_dir* and add it to *batch*."""
        ...

    def queue_changelog(
        self,
        batch: FetchBatch,
        version: IndexedVersion,
        dest: Path | None,
        *,
        always_online: bool,
    ) -> FetchItem:
        """Build an item fetching the changelog of *version*.

        ``dest=None`` selects the engine's default location.
        """
        ...

    def run(self, batch: FetchBatch, pulse_interval: float = 0.0) -> EngineRunResult:
        """Block until every item is terminal or the engine gives up."""
        ...
