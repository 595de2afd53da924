"""Fetch engine contract and the bundled local-mirror engine."""

from fetchgate.engine.base import ArchiveSlot, EngineRunResult, FetchEngine, SlotState
from fetchgate.engine.local import LocalEngine

__all__ = ["ArchiveSlot", "EngineRunResult", "FetchEngine", "LocalEngine", "SlotState"]
