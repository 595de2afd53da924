"""Fetch item and batch models.

Items are mutable: the engine advances ``status``, ``complete``, ``local``
and ``error_text`` while a run is in progress, and may point ``dest_file``
at a source it uses in place. Everything else is fixed when the item is
queued.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ItemStatus(str, Enum):
    """Terminal (or current) state of one fetch item."""

    IDLE = "idle"
    FETCHING = "fetching"
    DONE = "done"
    ERROR = "error"


class ItemKind(str, Enum):
    """What an item fetches."""

    ARCHIVE = "archive"
    CHANGELOG = "changelog"


class FetchItem(BaseModel):
    """One requested artifact and its outcome state."""

    model_config = ConfigDict(validate_assignment=True)

    desc_uri: str  # may embed user:password, never display as-is
    short_desc: str
    kind: ItemKind = ItemKind.ARCHIVE
    dest_file: str = ""
    uris: list[str] = []  # candidate endpoints, primary first
    file_size: int = 0
    hash_sum: str = ""  # "SHA256:<hex>"
    trusted: bool = False
    package: str = ""
    version: str = ""
    architecture: str = ""

    status: ItemStatus = ItemStatus.IDLE
    complete: bool = False
    local: bool = False
    error_text: str = ""

    @property
    def dest_name(self) -> str:
        """Basename of the destination path."""
        return Path(self.dest_file).name

    @property
    def succeeded(self) -> bool:
        return self.status == ItemStatus.DONE and self.complete


class FetchBatch:
    """An ordered set of fetch items submitted to one engine run.

    Items are only ever appended; position is the correlation key with
    the caller's destination slots and must not change.
    """

    def __init__(self, items: list[FetchItem] | None = None) -> None:
        self._items: list[FetchItem] = list(items or [])

    @property
    def items(self) -> list[FetchItem]:
        return list(self._items)

    def add(self, item: FetchItem) -> FetchItem:
        self._items.append(item)
        return item

    def __iter__(self) -> Iterator[FetchItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def uri_entries(self) -> Iterator[tuple[str, FetchItem]]:
        """Yield ``(uri, owner)`` for every candidate endpoint of every item."""
        for item in self._items:
            for uri in item.uris or [item.desc_uri]:
                yield uri, item

    def fetch_needed(self) -> int:
        """Bytes that still have to be transferred over the network."""
        return sum(
            item.file_size
            for item in self._items
            if not item.complete and not item.local
        )

    def __repr__(self) -> str:
        return f"FetchBatch(items={len(self._items)})"
