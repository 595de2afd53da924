"""Helpers shared by the CLI commands: config layering, logging, exit codes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from fetchgate.config import FetchConfig
from fetchgate.core.diagnostics import Diagnostics, Severity
from fetchgate.index.snapshot import IndexLoadError, PackageIndex

EXIT_FAILURE = 100

_PREFIXES: dict[Severity, str] = {
    Severity.ERROR: "[bold red]E:[/bold red]",
    Severity.WARNING: "[yellow]W:[/yellow]",
}


def build_config(*, flags: dict[str, bool], **overrides: Any) -> FetchConfig:
    """Environment config with command-line values layered on top.

    Flags only ever switch an option on; other overrides apply when not
    ``None`` (or, for counters, when non-zero).
    """
    base = FetchConfig()
    update: dict[str, Any] = {name: True for name, value in flags.items() if value}
    for name, value in overrides.items():
        if value is None or value == 0:
            continue
        update[name] = Path(value) if name.endswith("_path") else value
    return base.model_copy(update=update)


def configure_logging(level: str) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def render_diagnostics(console: Console, diagnostics: Diagnostics) -> None:
    for entry in diagnostics.entries:
        console.print(f"{_PREFIXES[entry.severity]} ", end="")
        console.print(entry.message, markup=False, highlight=False, soft_wrap=True)


def finish(diagnostics: Diagnostics, *, success: bool) -> NoReturn:
    """Print collected diagnostics to stderr and exit with the apt-style code."""
    render_diagnostics(Console(stderr=True), diagnostics)
    raise typer.Exit(code=0 if success and not diagnostics.has_errors() else EXIT_FAILURE)


def load_index(config: FetchConfig, diagnostics: Diagnostics) -> PackageIndex:
    try:
        return PackageIndex.load(
            config.index_path, native_architecture=config.native_architecture
        )
    except IndexLoadError as exc:
        diagnostics.error(str(exc))
        raise
