"""Fetch configuration — env-driven, passed explicitly to every gate.

Centralised config using pydantic-settings for environment variable
support. Reads from a .env file and FETCHGATE_* environment variables.
Command-line flags are layered on top with ``model_copy(update=...)``
by the CLI; core code never reads a module-global config.
"""

from __future__ import annotations

import platform
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_MACHINE_TO_ARCH = {
    "x86_64": "amd64",
    "aarch64": "arm64",
    "armv7l": "armhf",
    "i686": "i386",
    "i386": "i386",
    "ppc64le": "ppc64el",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


def host_architecture() -> str:
    """Map the running machine type onto a Debian architecture name."""
    machine = platform.machine().lower()
    return _MACHINE_TO_ARCH.get(machine, machine or "amd64")


class FetchConfig(BaseSettings):
    """Options consulted by the gates, the preflight and the workflows.

    All settings can be overridden via FETCHGATE_* environment variables
    or a .env file in the working directory.

    Examples
    --------
    Override via environment::

        export FETCHGATE_ALLOW_UNAUTHENTICATED=true
        export FETCHGATE_ARCHIVE_DIR=/var/cache/fetchgate/archives
        export FETCHGATE_QUIET=2
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FETCHGATE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Decision policy
    allow_unauthenticated: bool = False
    allow_unreproducible: bool = False
    assume_yes: bool = False
    force_yes: bool = False  # deprecated, kept for the warning path
    quiet: int = 0

    # Run modes
    simulate: bool = False
    print_uris: bool = False
    download_only: bool = False
    download_enabled: bool = True
    pulse_interval: float = 0.0
    changelogs_always_online: bool | None = None  # unset until a mode decides

    # Reproducibility feed
    reproducible_status_url: str = (
        "https://tests.reproducible-builds.org/reproducible.json.bz2"
    )
    reproducible_cache: Path = Path(".fetchgate/cache/reproducible.json.bz2")
    default_release: str = "unstable"
    debug_reproducible: bool = False

    # Architectures and identity
    native_architecture: str = host_architecture()
    extra_architectures: list[str] = []
    # any non-empty user measures free space as f_bavail; empty means f_bfree
    sandbox_user: str = "_apt"

    # Storage paths
    archive_dir: Path = Path(".fetchgate/cache/archives")
    lists_dir: Path = Path(".fetchgate/state/lists")
    pkgcache_path: Path = Path(".fetchgate/cache/pkgcache.bin")
    srcpkgcache_path: Path = Path(".fetchgate/cache/srcpkgcache.bin")
    changelog_dir: Path = Path(".fetchgate/cache/changelogs")
    index_path: Path = Path(".fetchgate/index.json")

    # Locking and observability
    no_locking: bool = False
    log_level: str = "WARNING"

    @property
    def fetches_from_network(self) -> bool:
        """Whether a run would actually transfer anything."""
        return self.download_enabled and not self.print_uris

    @property
    def configured_architectures(self) -> set[str]:
        """Architectures whose cached archives the sweep considers."""
        return {self.native_architecture, "all", *self.extra_architectures}
