"""Archive cache models — on-disk entries and sweep results."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    """A cached archive discovered by scanning the directory, not the index."""

    model_config = ConfigDict(frozen=True)

    path: Path
    name: str
    version: str
    architecture: str
    size: int


class SweepReport(BaseModel):
    """What one reference-aware sweep kept and removed."""

    model_config = ConfigDict(frozen=True)

    directory: Path
    kept: list[CacheEntry] = []
    removed: list[CacheEntry] = []
    simulated: bool = False

    @property
    def freed_bytes(self) -> int:
        return sum(e.size for e in self.removed)
