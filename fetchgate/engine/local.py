"""Bundled engine for ``file:`` mirrors.

Archives on a local mirror are used in place: the item is marked local,
its destination is pointed at the mirror file, and it completes without
copying. Changelogs are copied to their destination so the caller finds
them where it asked. Any other scheme has no transport here; such items
stay IDLE, the same as a network that could not be reached.
"""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
import time
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

from fetchgate.core.archives import archive_filename
from fetchgate.engine.base import ArchiveSlot, EngineRunResult, SlotState
from fetchgate.models.index import IndexedVersion
from fetchgate.models.items import FetchBatch, FetchItem, ItemKind, ItemStatus

logger = logging.getLogger(__name__)

_CHUNK = 1024 * 1024


def sha256_file(path: Path) -> str:
    """Stream a file through SHA-256 and return the hex digest."""
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _join_uri(site: str, filename: str) -> str:
    return f"{site.rstrip('/')}/{filename.lstrip('/')}"


class LocalEngine:
    """Fetch engine that serves ``file:`` URIs from the local filesystem.

    Parameters
    ----------
    changelog_dir:
        Default destination for changelogs when the caller gives none.
    """

    def __init__(self, changelog_dir: Path) -> None:
        self.changelog_dir = Path(changelog_dir)

    # ------------------------------------------------------------------
    # Queueing
    # ------------------------------------------------------------------

    def queue_archive(
        self, batch: FetchBatch, version: IndexedVersion, dest_dir: Path
    ) -> ArchiveSlot:
        if not version.site or not version.filename:
            return ArchiveSlot(
                version=version,
                state=SlotState.UNRESOLVED,
                reason=(
                    f"Can't find a source to download version '{version.version}' "
                    f"of '{version.name}:{version.architecture}'"
                ),
            )

        dest = Path(dest_dir) / archive_filename(
            version.name, version.version, version.architecture
        )
        if self._already_present(dest, version):
            logger.info("%s already present at %s.", version.spec, dest)
            return ArchiveSlot(version=version, state=SlotState.SATISFIED)

        uri = _join_uri(version.site, version.filename)
        item = batch.add(
            FetchItem(
                desc_uri=uri,
                uris=[uri],
                short_desc=version.name,
                dest_file=str(dest),
                file_size=version.size,
                hash_sum=f"SHA256:{version.sha256}" if version.sha256 else "",
                trusted=version.trusted,
                package=version.name,
                version=version.version,
                architecture=version.architecture,
            )
        )
        return ArchiveSlot(version=version, state=SlotState.QUEUED, item=item)

    def queue_changelog(
        self,
        batch: FetchBatch,
        version: IndexedVersion,
        dest: Path | None,
        *,
        always_online: bool,
    ) -> FetchItem:
        filename = f"{version.source_name}_{version.version}.changelog"
        if dest is None:
            target = self.changelog_dir / filename
        elif str(dest) == os.devnull:
            # name kept for display, nothing is written
            target = Path(os.devnull) / filename
        else:
            target = Path(dest) / filename

        item = FetchItem(
            desc_uri=version.changelog_uri,
            uris=[version.changelog_uri] if version.changelog_uri else [],
            short_desc=f"Changelog for {version.source_name} ({version.version})",
            kind=ItemKind.CHANGELOG,
            dest_file=str(target),
            trusted=True,
            package=version.name,
            version=version.version,
            architecture=version.architecture,
        )
        if not version.changelog_uri:
            item.status = ItemStatus.ERROR
            item.error_text = (
                f"Changelog unavailable for {version.source_name}={version.version}"
            )
        elif not always_online and dest is None and target.is_file():
            # a previously fetched copy is good enough
            item.status = ItemStatus.DONE
            item.complete = True
            item.local = True
        return batch.add(item)

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run(self, batch: FetchBatch, pulse_interval: float = 0.0) -> EngineRunResult:
        total = len(batch)
        last_pulse = time.monotonic()
        for position, item in enumerate(batch, start=1):
            if item.status == ItemStatus.IDLE:
                self._fetch(item)
            if pulse_interval > 0 and time.monotonic() - last_pulse >= pulse_interval:
                logger.info("Progress: %d/%d items processed.", position, total)
                last_pulse = time.monotonic()
        return EngineRunResult.CONTINUE

    def _fetch(self, item: FetchItem) -> None:
        parts = urlsplit(item.desc_uri)
        if parts.scheme not in ("file", ""):
            # no transport: the item is never attempted
            item.error_text = f"No transport available for {parts.scheme}: URIs"
            logger.debug("Leaving %s idle: %s", item.short_desc, item.error_text)
            return

        item.status = ItemStatus.FETCHING
        source = Path(url2pathname(parts.path))
        if not source.is_file():
            self._fail(item, f"File not found - {source} (2: No such file or directory)")
            return

        try:
            if item.file_size and source.stat().st_size != item.file_size:
                self._fail(item, "File has unexpected size")
                return
            if item.hash_sum:
                expected = item.hash_sum.partition(":")[2]
                if sha256_file(source) != expected:
                    self._fail(item, "Hash Sum mismatch")
                    return

            if item.kind == ItemKind.CHANGELOG:
                self._materialize(source, Path(item.dest_file))
            else:
                item.dest_file = str(source)
                item.local = True
        except OSError as exc:
            self._fail(item, f"{exc.strerror or exc} ({exc.errno})")
            return

        item.status = ItemStatus.DONE
        item.complete = True

    @staticmethod
    def _materialize(source: Path, dest: Path) -> None:
        if dest.parent == Path(os.devnull):
            return
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, dest)

    @staticmethod
    def _fail(item: FetchItem, text: str) -> None:
        item.status = ItemStatus.ERROR
        item.error_text = text

    @staticmethod
    def _already_present(dest: Path, version: IndexedVersion) -> bool:
        if not dest.is_file():
            return False
        if version.size and dest.stat().st_size != version.size:
            return False
        if version.sha256:
            return sha256_file(dest) == version.sha256
        return True
