"""Archive file naming: ``<name>_<version>_<arch>.deb``.

Components are quoted so that ``_`` and ``:`` inside a version (epochs)
cannot be confused with the separators, e.g. ``1:2.0-1`` is stored as
``1%3a2.0-1``.
"""

from __future__ import annotations

import re

ARCHIVE_SUFFIX = ".deb"

_QUOTED = re.compile(r"%([0-9a-fA-F]{2})")


def quote_component(value: str, bad: str = "_:") -> str:
    out = []
    for ch in value:
        code = ord(ch)
        if ch in bad or ch == "%" or code <= 0x20 or code >= 0x7F:
            out.append(f"%{code:02x}")
        else:
            out.append(ch)
    return "".join(out)


def unquote_component(value: str) -> str:
    return _QUOTED.sub(lambda m: chr(int(m.group(1), 16)), value)


def archive_filename(name: str, version: str, architecture: str) -> str:
    """Cache file name for one binary package version."""
    return (
        f"{quote_component(name)}_{quote_component(version)}_"
        f"{quote_component(architecture)}{ARCHIVE_SUFFIX}"
    )


def parse_archive_filename(filename: str) -> tuple[str, str, str] | None:
    """Split a cache file name into ``(name, version, architecture)``.

    Returns ``None`` for anything that is not shaped like an archive.
    """
    if not filename.endswith(ARCHIVE_SUFFIX):
        return None
    stem = filename[: -len(ARCHIVE_SUFFIX)]
    parts = stem.split("_")
    if len(parts) != 3 or not all(parts):
        return None
    name, version, arch = (unquote_component(p) for p in parts)
    return name, version, arch
