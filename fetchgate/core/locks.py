"""Advisory directory locks held while cache directories are mutated.

A lock is the file ``<dir>/lock`` taken with :mod:`filelock` without
waiting: if another process holds it, the caller gets
``LockUnavailableError`` immediately rather than a retry.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from pathlib import Path

from filelock import FileLock, Timeout

from fetchgate.core.diagnostics import Diagnostics, FetchAbortedError

logger = logging.getLogger(__name__)
logging.getLogger("filelock").setLevel(logging.INFO)

LOCK_NAME = "lock"


class LockUnavailableError(FetchAbortedError):
    """Raised when a required lock is held elsewhere or cannot be created."""


@contextlib.contextmanager
def hold_lock(
    lock_path: Path,
    *,
    enabled: bool = True,
    diagnostics: Diagnostics,
    message: str | None = None,
) -> Iterator[Path | None]:
    """Hold the lock file *lock_path* for the duration of the block.

    With ``enabled=False`` nothing is locked and ``None`` is yielded.
    """
    if not enabled:
        logger.debug("Locking disabled, not locking %s.", lock_path)
        yield None
        return

    lock = FileLock(str(lock_path), timeout=0)
    try:
        lock.acquire()
    except (Timeout, OSError) as exc:
        detail = message or f"Unable to lock directory {lock_path.parent}"
        logger.debug("Lock %s unavailable: %s", lock_path, exc)
        raise diagnostics.abort(LockUnavailableError, detail) from exc

    logger.debug("Acquired %s.", lock_path)
    try:
        yield lock_path
    finally:
        lock.release()


def directory_lock(
    directory: Path,
    *,
    enabled: bool = True,
    diagnostics: Diagnostics,
    message: str | None = None,
) -> contextlib.AbstractContextManager[Path | None]:
    """Lock *directory* through its ``lock`` file."""
    return hold_lock(
        Path(directory) / LOCK_NAME,
        enabled=enabled,
        diagnostics=diagnostics,
        message=message,
    )
