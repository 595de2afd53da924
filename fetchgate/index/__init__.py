"""Package index snapshot — resolution, source lookup, liveness."""

from fetchgate.index.snapshot import (
    IndexLoadError,
    IndexSnapshot,
    PackageIndex,
    cache_files,
    remove_caches,
)

__all__ = [
    "IndexLoadError",
    "IndexSnapshot",
    "PackageIndex",
    "cache_files",
    "remove_caches",
]
