"""Debian-style version ordering used to pick candidate versions."""

from __future__ import annotations

import functools
import re

_DIGITS = re.compile(r"\d+")


def _split(version: str) -> tuple[int, str, str]:
    epoch = 0
    if ":" in version:
        head, version = version.split(":", 1)
        epoch = int(head) if head.isdigit() else 0
    upstream, _, revision = version.rpartition("-")
    if not upstream:
        upstream, revision = revision, ""
    return epoch, upstream, revision


def _order(ch: str) -> int:
    if ch == "~":
        return -1
    if ch.isalpha():
        return ord(ch)
    return ord(ch) + 256


def _compare_fragment(a: str, b: str) -> int:
    while a or b:
        # non-digit prefix
        i = 0
        while i < len(a) and not a[i].isdigit():
            i += 1
        j = 0
        while j < len(b) and not b[j].isdigit():
            j += 1
        lexa, lexb = a[:i], b[:j]
        for k in range(max(len(lexa), len(lexb))):
            ca = _order(lexa[k]) if k < len(lexa) else 0
            cb = _order(lexb[k]) if k < len(lexb) else 0
            if ca != cb:
                return -1 if ca < cb else 1
        a, b = a[i:], b[j:]

        ma, mb = _DIGITS.match(a), _DIGITS.match(b)
        na = int(ma.group()) if ma else 0
        nb = int(mb.group()) if mb else 0
        if na != nb:
            return -1 if na < nb else 1
        a = a[ma.end():] if ma else a
        b = b[mb.end():] if mb else b
    return 0


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as *a* sorts before, equal to, or after *b*."""
    ea, ua, ra = _split(a)
    eb, ub, rb = _split(b)
    if ea != eb:
        return -1 if ea < eb else 1
    return _compare_fragment(ua, ub) or _compare_fragment(ra, rb)


version_key = functools.cmp_to_key(compare_versions)
