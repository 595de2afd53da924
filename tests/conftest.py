"""Shared test fixtures for Fetchgate."""

from __future__ import annotations

import hashlib
import io
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from fetchgate.config import FetchConfig
from fetchgate.core.commands import CommandError
from fetchgate.core.diagnostics import Diagnostics
from fetchgate.core.prompt import FixedAnswer
from fetchgate.models.index import IndexedVersion
from fetchgate.models.items import FetchBatch, FetchItem


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def config(tmp_dir: Path) -> FetchConfig:
    """Provide a FetchConfig whose every path lives under the temp dir."""
    return FetchConfig(
        native_architecture="amd64",
        archive_dir=tmp_dir / "cache" / "archives",
        lists_dir=tmp_dir / "state" / "lists",
        pkgcache_path=tmp_dir / "cache" / "pkgcache.bin",
        srcpkgcache_path=tmp_dir / "cache" / "srcpkgcache.bin",
        changelog_dir=tmp_dir / "cache" / "changelogs",
        index_path=tmp_dir / "index.json",
        reproducible_cache=tmp_dir / "cache" / "reproducible.json.bz2",
    )


@pytest.fixture
def diagnostics() -> Diagnostics:
    """Provide an empty diagnostics collector."""
    return Diagnostics()


@pytest.fixture
def console() -> Console:
    """Provide a Rich console that records into a string buffer."""
    return Console(file=io.StringIO(), width=200, force_terminal=False, color_system=None)


@pytest.fixture
def confirm_no() -> FixedAnswer:
    return FixedAnswer(False)


@pytest.fixture
def confirm_yes() -> FixedAnswer:
    return FixedAnswer(True)


# ---------------------------------------------------------------------------
# Stub command runner
# ---------------------------------------------------------------------------


class StubRunner:
    """CommandRunner that answers by substring match and records every call.

    ``answers`` maps a substring of the command line to its first output
    line; the first matching key wins. ``failing`` lists substrings whose
    commands raise ``CommandError``. Unmatched commands answer ``""``.
    """

    def __init__(
        self,
        answers: dict[str, str] | None = None,
        failing: tuple[str, ...] = (),
    ) -> None:
        self.answers = answers or {}
        self.failing = failing
        self.commands: list[str] = []

    def first_line(self, command: str) -> str:
        self.commands.append(command)
        for marker in self.failing:
            if marker in command:
                raise CommandError(f"stub failure for {marker}")
        for marker, answer in self.answers.items():
            if marker in command:
                return answer
        return ""


@pytest.fixture
def make_runner() -> Callable[..., StubRunner]:
    return StubRunner


# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_item() -> Callable[..., FetchItem]:
    """Factory fixture: build a FetchItem with sensible defaults."""

    def _factory(name: str = "hello", **overrides: Any) -> FetchItem:
        defaults: dict[str, Any] = {
            "desc_uri": f"file:///srv/mirror/pool/{name}_1.0_amd64.deb",
            "short_desc": name,
            "dest_file": f"/tmp/{name}_1.0_amd64.deb",
            "file_size": 1000,
            "hash_sum": "SHA256:" + "0" * 64,
            "trusted": True,
            "package": name,
            "version": "1.0",
            "architecture": "amd64",
        }
        defaults.update(overrides)
        return FetchItem(**defaults)

    return _factory


@pytest.fixture
def make_batch(make_item: Callable[..., FetchItem]) -> Callable[..., FetchBatch]:
    """Factory fixture: a batch of items, one per name, trusted unless listed."""

    def _factory(*names: str, untrusted: tuple[str, ...] = ()) -> FetchBatch:
        return FetchBatch(
            [make_item(name, trusted=name not in untrusted) for name in names]
        )

    return _factory


@pytest.fixture
def make_version() -> Callable[..., IndexedVersion]:
    """Factory fixture: build an IndexedVersion with sensible defaults."""

    def _factory(name: str = "hello", version: str = "1.0", **overrides: Any) -> IndexedVersion:
        defaults: dict[str, Any] = {
            "name": name,
            "version": version,
            "architecture": "amd64",
            "release": "unstable",
            "trusted": True,
        }
        defaults.update(overrides)
        return IndexedVersion(**defaults)

    return _factory


# ---------------------------------------------------------------------------
# Local mirror
# ---------------------------------------------------------------------------


class Mirror:
    """A ``file:`` mirror on disk plus the index snapshot describing it."""

    def __init__(self, root: Path, index_path: Path) -> None:
        self.root = root
        self.index_path = index_path
        self.records: list[IndexedVersion] = []

    @property
    def site(self) -> str:
        return self.root.as_uri()

    def publish(
        self,
        name: str,
        version: str,
        *,
        architecture: str = "amd64",
        content: bytes | None = None,
        changelog: str | None = None,
        **overrides: Any,
    ) -> IndexedVersion:
        """Write an archive (and optionally a changelog) and index it."""
        data = content if content is not None else f"{name} {version}\n".encode()
        filename = f"pool/{name}_{version}_{architecture}.deb"
        archive = self.root / filename
        archive.parent.mkdir(parents=True, exist_ok=True)
        archive.write_bytes(data)

        changelog_uri = ""
        if changelog is not None:
            path = self.root / "changelogs" / f"{name}_{version}"
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(changelog, encoding="utf-8")
            changelog_uri = path.as_uri()

        fields: dict[str, Any] = {
            "name": name,
            "version": version,
            "architecture": architecture,
            "release": "unstable",
            "site": self.site,
            "filename": filename,
            "size": len(data),
            "sha256": hashlib.sha256(data).hexdigest(),
            "trusted": True,
            "changelog_uri": changelog_uri,
        }
        fields.update(overrides)
        record = IndexedVersion(**fields)
        self.records.append(record)
        self.save()
        return record

    def save(self) -> None:
        payload = {"packages": [r.model_dump() for r in self.records]}
        self.index_path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture
def mirror(tmp_dir: Path, config: FetchConfig) -> Mirror:
    """Provide an empty local mirror whose snapshot is ``config.index_path``."""
    return Mirror(tmp_dir / "mirror", config.index_path)
