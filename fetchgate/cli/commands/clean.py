"""``fetchgate clean`` and ``fetchgate autoclean`` — archive cache maintenance."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from fetchgate.cli.common import build_config, finish, load_index
from fetchgate.core.cache_cleaner import autoclean, clean
from fetchgate.core.diagnostics import Diagnostics, FetchAbortedError

console = Console()


def clean_cmd(
    simulate: bool = typer.Option(False, "--simulate", "-s", help="Only print what would be deleted."),
    quiet: int = typer.Option(0, "--quiet", "-q", count=True, help="Less output; repeat for less."),
) -> None:
    """Remove every downloaded archive, partial download and binary cache."""
    config = build_config(flags={"simulate": simulate}, quiet=quiet)
    diagnostics = Diagnostics()
    try:
        clean(config, console=console, diagnostics=diagnostics)
    except FetchAbortedError:
        finish(diagnostics, success=False)
    finish(diagnostics, success=True)


def autoclean_cmd(
    simulate: bool = typer.Option(False, "--simulate", "-s", help="Only print what would be deleted."),
    quiet: int = typer.Option(0, "--quiet", "-q", count=True, help="Less output; repeat for less."),
    index: Optional[Path] = typer.Option(None, "--index", help="Package index snapshot (JSON)."),
) -> None:
    """Remove cached archives that the package index can no longer fetch."""
    config = build_config(flags={"simulate": simulate}, quiet=quiet, index_path=index)
    diagnostics = Diagnostics()
    if not config.archive_dir.exists():
        # nothing to sweep, so the index is never opened
        finish(diagnostics, success=True)
    try:
        autoclean(
            config,
            load_index(config, diagnostics),
            console=console,
            diagnostics=diagnostics,
        )
    except FetchAbortedError:
        finish(diagnostics, success=False)
    finish(diagnostics, success=True)
