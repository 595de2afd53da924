"""Fetchgate data models — all Pydantic v2."""

from fetchgate.models.cache import CacheEntry, SweepReport
from fetchgate.models.index import IndexedVersion, VersionSelection
from fetchgate.models.items import FetchBatch, FetchItem, ItemKind, ItemStatus
from fetchgate.models.outcomes import (
    ItemClassification,
    ItemOutcome,
    RunOutcome,
    RunReport,
)

__all__ = [
    # items
    "ItemStatus",
    "ItemKind",
    "FetchItem",
    "FetchBatch",
    # outcomes
    "RunOutcome",
    "ItemClassification",
    "ItemOutcome",
    "RunReport",
    # index
    "IndexedVersion",
    "VersionSelection",
    # cache
    "CacheEntry",
    "SweepReport",
]
