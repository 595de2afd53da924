"""URI helpers for user-facing output."""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit


def strip_credentials(uri: str) -> str:
    """Remove ``user:password@`` from a URI before it is displayed.

    Anything that does not parse as a URI with a network location is
    returned unchanged.
    """
    parts = urlsplit(uri)
    if "@" not in parts.netloc:
        return uri
    host = parts.netloc.rpartition("@")[2]
    return urlunsplit((parts.scheme, host, parts.path, parts.query, parts.fragment))


def size_to_str(size: float) -> str:
    """Render a byte count the way cache listings show it.

    Four significant digits at most, with a trailing unit slot:
    ``"500 "``, ``"12.3 k"``, ``"150 M"``. Callers append ``B``.
    """
    value = float(size)
    for unit in ("", "k", "M", "G", "T", "P", "E", "Z"):
        if value < 100 and unit:
            return f"{value:.1f} {unit}"
        if value < 10000:
            return f"{value:.0f} {unit}"
        value /= 1000.0
    return f"{value:.0f} Y"
