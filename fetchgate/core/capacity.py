"""Free-space preflight — run before any item leaves IDLE.

The check compares free blocks on the destination filesystem against
the bytes still to fetch. A low reading on a memory-backed filesystem
(tmpfs, ramfs) is not trusted, since those grow on demand.
"""

from __future__ import annotations

import errno
import logging
import os
from collections.abc import Callable
from pathlib import Path

from fetchgate.config import FetchConfig
from fetchgate.core.diagnostics import Diagnostics, FetchAbortedError

logger = logging.getLogger(__name__)

MEMORY_FILESYSTEMS = frozenset({"ramfs", "tmpfs"})

_MOUNTS_FILE = Path("/proc/self/mounts")


class CapacityError(FetchAbortedError):
    """Raised when the destination cannot hold the planned download."""


def _unescape_mount_path(field: str) -> str:
    # /proc/mounts escapes space, tab, newline and backslash as octal
    return (
        field.replace("\\040", " ")
        .replace("\\011", "\t")
        .replace("\\012", "\n")
        .replace("\\134", "\\")
    )


def filesystem_type(directory: Path, mounts_file: Path = _MOUNTS_FILE) -> str:
    """Return the type of the filesystem that holds *directory*.

    Resolves to the longest mount point that prefixes the directory.
    Returns an empty string when the mount table cannot be read.
    """
    try:
        lines = mounts_file.read_text().splitlines()
    except OSError:
        return ""

    target = str(Path(directory).resolve())
    best, best_type = "", ""
    for line in lines:
        fields = line.split()
        if len(fields) < 3:
            continue
        mount_point = _unescape_mount_path(fields[1])
        prefix = mount_point.rstrip("/") + "/"
        covers = target == mount_point or target.startswith(prefix)
        # later entries shadow earlier ones on the same mount point
        if covers and len(mount_point) >= len(best):
            best, best_type = mount_point, fields[2]
    return best_type


def check_free_space(
    directory: Path,
    fetch_bytes: int,
    *,
    config: FetchConfig,
    diagnostics: Diagnostics,
    statvfs: Callable[[str], os.statvfs_result] = os.statvfs,
    fs_type: Callable[[Path], str] = filesystem_type,
) -> bool:
    """Verify that *directory* can hold *fetch_bytes* more bytes.

    Returns ``True`` when the check passes or could not be performed for
    a benign reason (nothing will be downloaded, or the free-space query
    overflowed, which is reported as a warning).

    Raises
    ------
    CapacityError
        When the query fails for any other reason, or when free space is
        short on a filesystem that is not memory-backed.
    """
    if not config.fetches_from_network:
        return True

    try:
        buf = statvfs(str(directory))
    except OSError as exc:
        message = f"Couldn't determine free space in {directory}"
        if exc.errno == errno.EOVERFLOW:
            diagnostics.warning(f"{message} - statvfs ({exc.errno}: {exc.strerror})")
            return True
        diagnostics.error(f"{message} - statvfs ({exc.errno}: {exc.strerror})")
        raise CapacityError(message) from exc

    # an unprivileged sandbox user cannot dip into the reserved blocks
    free_blocks = buf.f_bavail if config.sandbox_user else buf.f_bfree
    needed_blocks = fetch_bytes // buf.f_bsize if buf.f_bsize else 0
    logger.debug(
        "Free space in %s: %d blocks of %d bytes, need %d blocks.",
        directory, free_blocks, buf.f_bsize, needed_blocks,
    )

    if free_blocks < needed_blocks:
        kind = fs_type(Path(directory))
        if kind in MEMORY_FILESYSTEMS:
            logger.info(
                "Low free space on %s filesystem at %s ignored.", kind, directory
            )
            return True
        raise diagnostics.abort(
            CapacityError, f"You don't have enough free space in {directory}."
        )
    return True
