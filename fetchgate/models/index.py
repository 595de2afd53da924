"""Package index models — resolved versions and version selections."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class IndexedVersion(BaseModel):
    """One version of one binary package as recorded by the index."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    architecture: str
    source: str = ""  # source package name, empty when it equals ``name``
    release: str = ""
    site: str = ""  # archive base URI, may embed credentials
    filename: str = ""  # path below ``site``
    size: int = 0
    sha256: str = ""
    trusted: bool = False
    fetchable: bool = True
    changelog_uri: str = ""

    @property
    def source_name(self) -> str:
        return self.source or self.name

    @property
    def spec(self) -> str:
        """``name=version`` form used in messages."""
        return f"{self.name}={self.version}"


class VersionSelection(BaseModel):
    """The ordered set of versions the user asked for."""

    model_config = ConfigDict(frozen=True)

    versions: list[IndexedVersion] = []

    def __len__(self) -> int:
        return len(self.versions)

    @property
    def empty(self) -> bool:
        return not self.versions
