"""Cache garbage collection: full wipe and reference-aware sweep.

``clean`` removes every downloaded archive and partial download
unconditionally. ``autoclean`` keeps each cached archive whose exact
version is still fetchable according to the package index and deletes
the rest. Identity is package + version + architecture; file age plays
no part.

Both take the directory lock before touching anything. When locking is
enabled and the lock is held elsewhere, nothing is deleted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Protocol

from rich.console import Console

from fetchgate.config import FetchConfig
from fetchgate.core.archives import parse_archive_filename
from fetchgate.core.diagnostics import Diagnostics
from fetchgate.core.locks import LOCK_NAME, directory_lock
from fetchgate.core.uris import size_to_str
from fetchgate.index.snapshot import PackageIndex, cache_files, remove_caches
from fetchgate.models.cache import CacheEntry, SweepReport
from fetchgate.models.index import IndexedVersion

logger = logging.getLogger(__name__)

PARTIAL_DIR = "partial"

# never touched by either strategy
_RESERVED_NAMES = frozenset({LOCK_NAME, PARTIAL_DIR, "auxfiles", "lost+found"})

OnDelete = Callable[[Path, str, str, int], None]


class LivenessIndex(Protocol):
    """What the sweep needs from the package index."""

    def versions(self, name: str, architecture: str | None = None) -> list[IndexedVersion]:
        ...


def _candidate_files(directory: Path) -> Iterator[Path]:
    # symlinks are judged by their target; dangling ones are still removable
    for path in sorted(directory.iterdir()):
        if path.name in _RESERVED_NAMES or path.is_dir():
            continue
        yield path


def _entry_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except FileNotFoundError:
        return path.lstat().st_size


# ----------------------------------------------------------------------
# Full wipe
# ----------------------------------------------------------------------


def clean_directory(directory: Path) -> list[Path]:
    """Unlink every non-directory entry directly inside *directory*."""
    if not directory.is_dir():
        return []
    removed: list[Path] = []
    for path in _candidate_files(directory):
        path.unlink(missing_ok=True)
        removed.append(path)
    logger.debug("Cleaned %d file(s) from %s.", len(removed), directory)
    return removed


def clean(
    config: FetchConfig,
    *,
    console: Console,
    diagnostics: Diagnostics,
) -> list[Path]:
    """Remove all cached archives, partial downloads and binary caches.

    In simulate mode only prints what would be deleted. Returns the
    removed paths.
    """
    archive_dir = config.archive_dir
    lists_dir = config.lists_dir

    if config.simulate:
        pkgcache, srcpkgcache = cache_files(config)
        for line in (
            f"Del {archive_dir}/* {archive_dir}/{PARTIAL_DIR}/*",
            f"Del {lists_dir}/{PARTIAL_DIR}/*",
            f"Del {pkgcache} {srcpkgcache}",
        ):
            console.print(line, markup=False, highlight=False, soft_wrap=True)
        return []

    locking = not config.no_locking
    removed: list[Path] = []

    if archive_dir.is_dir():
        with directory_lock(archive_dir, enabled=locking, diagnostics=diagnostics):
            removed += clean_directory(archive_dir)
            removed += clean_directory(archive_dir / PARTIAL_DIR)

    if lists_dir.is_dir():
        with directory_lock(lists_dir, enabled=locking, diagnostics=diagnostics):
            removed += clean_directory(lists_dir / PARTIAL_DIR)

    removed += remove_caches(config)
    logger.info("clean removed %d file(s).", len(removed))
    return removed


# ----------------------------------------------------------------------
# Reference-aware sweep
# ----------------------------------------------------------------------


def scan_archives(directory: Path, architectures: Iterable[str]) -> list[CacheEntry]:
    """Cache entries found in *directory*, ignoring foreign architectures."""
    if not directory.is_dir():
        return []
    wanted = set(architectures)
    entries: list[CacheEntry] = []
    for path in _candidate_files(directory):
        parsed = parse_archive_filename(path.name)
        if parsed is None:
            continue
        name, version, arch = parsed
        if arch not in wanted:
            continue
        entries.append(
            CacheEntry(
                path=path,
                name=name,
                version=version,
                architecture=arch,
                size=_entry_size(path),
            )
        )
    return entries


def is_live(entry: CacheEntry, index: LivenessIndex) -> bool:
    """Whether the index can still fetch exactly this entry's version."""
    return any(
        record.fetchable and record.version == entry.version
        for record in index.versions(entry.name, entry.architecture)
    )


def sweep(
    directory: Path,
    index: LivenessIndex,
    on_delete: OnDelete,
    *,
    architectures: Iterable[str],
) -> SweepReport:
    """Pass every unreferenced archive in *directory* to *on_delete*.

    The callback decides what deletion means (unlink, log only, ...);
    live entries are never passed to it.
    """
    kept: list[CacheEntry] = []
    removed: list[CacheEntry] = []
    for entry in scan_archives(directory, architectures):
        if is_live(entry, index):
            kept.append(entry)
            continue
        on_delete(entry.path, entry.name, entry.version, entry.size)
        removed.append(entry)
    return SweepReport(directory=directory, kept=kept, removed=removed)


def logging_eraser(config: FetchConfig, console: Console) -> OnDelete:
    """Deletion callback that announces each file and unlinks it unless simulating."""

    def _erase(path: Path, name: str, version: str, size: int) -> None:
        if config.quiet < 1:
            console.print(
                f"Del {name} {version} [{size_to_str(size)}B]",
                markup=False,
                highlight=False,
                soft_wrap=True,
            )
        if not config.simulate:
            path.unlink(missing_ok=True)
            logger.debug("Removed %s.", path)

    return _erase


def autoclean(
    config: FetchConfig,
    index: PackageIndex,
    *,
    console: Console,
    diagnostics: Diagnostics,
    on_delete: OnDelete | None = None,
) -> list[SweepReport]:
    """Sweep the archive directory and its partial directory.

    Raises ``LockUnavailableError`` if locking is enabled and either the
    archive directory or the index cannot be locked.
    """
    archive_dir = config.archive_dir
    if not archive_dir.exists():
        return []

    eraser = on_delete or logging_eraser(config, console)
    locking = not config.no_locking
    architectures = config.configured_architectures

    with directory_lock(
        archive_dir,
        enabled=locking,
        diagnostics=diagnostics,
        message="Unable to lock the download directory",
    ):
        with index.open_for_update(enabled=locking, diagnostics=diagnostics) as live:
            reports = [
                sweep(directory, live, eraser, architectures=architectures)
                for directory in (archive_dir, archive_dir / PARTIAL_DIR)
            ]

    reports = [r.model_copy(update={"simulated": config.simulate}) for r in reports]
    logger.info(
        "autoclean: %d kept, %d removed (%d bytes).",
        sum(len(r.kept) for r in reports),
        sum(len(r.removed) for r in reports),
        sum(r.freed_bytes for r in reports),
    )
    return reports
