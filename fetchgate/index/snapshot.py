"""Package index backed by a JSON snapshot.

The snapshot lists every known version of every binary package::

    {
      "packages": [
        {"name": "hello", "version": "2.10-3", "architecture": "amd64",
         "source": "hello", "release": "unstable",
         "site": "file:///srv/mirror", "filename": "pool/h/hello_2.10-3_amd64.deb",
         "size": 53000, "sha256": "...", "trusted": true,
         "changelog_uri": "file:///srv/mirror/changelogs/hello_2.10-3"}
      ]
    }

It answers three kinds of question: which versions a command line
selects, which source package a binary belongs to, and which versions
of a package are still live (for the cache sweep).
"""

from __future__ import annotations

import contextlib
import json
import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from fetchgate.config import FetchConfig
from fetchgate.core.diagnostics import Diagnostics, FetchAbortedError
from fetchgate.core.locks import hold_lock
from fetchgate.core.versions import version_key
from fetchgate.models.index import IndexedVersion, VersionSelection

logger = logging.getLogger(__name__)


class IndexLoadError(FetchAbortedError):
    """Raised when the snapshot is missing or malformed."""


class IndexSnapshot(BaseModel):
    """On-disk schema of the index snapshot."""

    model_config = ConfigDict(frozen=True)

    packages: list[IndexedVersion] = []


class PackageIndex:
    """Queryable view over the known package versions.

    Parameters
    ----------
    versions:
        Every known version record.
    native_architecture:
        Architecture assumed for expressions without ``:arch``.
    path:
        The snapshot file, if the index was loaded from one.
    """

    def __init__(
        self,
        versions: Iterable[IndexedVersion],
        *,
        native_architecture: str,
        path: Path | None = None,
    ) -> None:
        self.native_architecture = native_architecture
        self.path = path
        self._by_name: dict[str, list[IndexedVersion]] = defaultdict(list)
        for record in versions:
            self._by_name[record.name].append(record)

    @classmethod
    def load(cls, path: Path, *, native_architecture: str) -> PackageIndex:
        """Read and validate a snapshot file."""
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
            snapshot = IndexSnapshot.model_validate(raw)
        except (OSError, ValueError, ValidationError) as exc:
            raise IndexLoadError(f"Unable to read package index {path}: {exc}") from exc
        logger.debug("Loaded %d version record(s) from %s.", len(snapshot.packages), path)
        return cls(snapshot.packages, native_architecture=native_architecture, path=Path(path))

    # ------------------------------------------------------------------
    # Liveness queries
    # ------------------------------------------------------------------

    def versions(self, name: str, architecture: str | None = None) -> list[IndexedVersion]:
        """All known versions of *name*, optionally for one architecture."""
        records = self._by_name.get(name, [])
        if architecture is None:
            return list(records)
        return [r for r in records if r.architecture == architecture]

    @contextlib.contextmanager
    def open_for_update(
        self, *, enabled: bool = True, diagnostics: Diagnostics
    ) -> Iterator[PackageIndex]:
        """Hold the snapshot's lock so its contents stay stable while in use."""
        if self.path is None:
            yield self
            return
        lock_path = self.path.with_name(self.path.name + ".lock")
        with hold_lock(
            lock_path,
            enabled=enabled,
            diagnostics=diagnostics,
            message=f"Unable to lock the package index {self.path}",
        ):
            yield self

    # ------------------------------------------------------------------
    # Command-line resolution
    # ------------------------------------------------------------------

    def candidate(self, name: str, architecture: str) -> IndexedVersion | None:
        """Highest fetchable version of *name* for *architecture* (or ``all``)."""
        records = [
            r
            for r in self._by_name.get(name, [])
            if r.fetchable and r.architecture in (architecture, "all")
        ]
        if not records:
            return None
        return max(records, key=lambda r: version_key(r.version))

    def resolve(
        self, expressions: Iterable[str], *, diagnostics: Diagnostics
    ) -> VersionSelection:
        """Turn command-line package expressions into concrete versions.

        Understands ``name``, ``name=version``, ``name/release`` and an
        optional ``:arch`` suffix on the name. Expressions that match
        nothing are reported on *diagnostics* and skipped.
        """
        selected: list[IndexedVersion] = []
        for expression in expressions:
            record = self._resolve_one(expression, diagnostics)
            if record is not None and record not in selected:
                selected.append(record)
        return VersionSelection(versions=selected)

    def _resolve_one(
        self, expression: str, diagnostics: Diagnostics
    ) -> IndexedVersion | None:
        wanted_version = wanted_release = None
        name = expression
        if "=" in name:
            name, wanted_version = name.split("=", 1)
        elif "/" in name:
            name, wanted_release = name.split("/", 1)

        architecture = self.native_architecture
        if ":" in name:
            name, architecture = name.split(":", 1)

        if name not in self._by_name:
            diagnostics.error(f"Unable to locate package {name}")
            return None

        records = [
            r for r in self._by_name[name] if r.architecture in (architecture, "all")
        ]
        if wanted_version is not None:
            matches = [r for r in records if r.version == wanted_version]
            if not matches:
                diagnostics.error(f"Version '{wanted_version}' for '{name}' was not found")
                return None
            return matches[0]

        if wanted_release is not None:
            matches = [r for r in records if r.release == wanted_release and r.fetchable]
            if not matches:
                diagnostics.error(f"Release '{wanted_release}' for '{name}' was not found")
                return None
            return max(matches, key=lambda r: version_key(r.version))

        candidate = self.candidate(name, architecture)
        if candidate is None:
            diagnostics.error(f"Package '{name}' has no installation candidate")
        return candidate

    def __repr__(self) -> str:
        return f"PackageIndex(packages={len(self._by_name)}, path={self.path!s})"


def cache_files(config: FetchConfig) -> list[Path]:
    """Binary cache files derived from the index, removed by a full clean."""
    return [config.pkgcache_path, config.srcpkgcache_path]


def remove_caches(config: FetchConfig) -> list[Path]:
    """Delete the binary cache files (and stray temporaries next to them)."""
    removed: list[Path] = []
    for cache in cache_files(config):
        candidates = [cache]
        if cache.parent.is_dir():
            candidates.extend(cache.parent.glob(cache.name + ".*"))
        for path in candidates:
            if path.is_file():
                path.unlink()
                removed.append(path)
                logger.debug("Removed cache file %s.", path)
    return removed
