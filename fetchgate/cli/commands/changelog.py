"""``fetchgate changelog PKG...`` — show, download or list changelogs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from fetchgate.cli.common import build_config, finish, load_index
from fetchgate.core.commands import ShellCommandRunner
from fetchgate.core.diagnostics import Diagnostics, FetchAbortedError
from fetchgate.core.prompt import ConsoleConfirmer
from fetchgate.core.workflows import FetchWorkflow
from fetchgate.engine.local import LocalEngine

console = Console()


def changelog_cmd(
    packages: list[str] = typer.Argument(..., help="Package expressions (name, name=version, name/release)."),
    print_uris: bool = typer.Option(False, "--print-uris", help="Print the changelog URIs only."),
    download_only: bool = typer.Option(
        False, "--download-only", "-d", help="Save changelogs to the current directory."
    ),
    quiet: int = typer.Option(0, "--quiet", "-q", count=True, help="Less output; repeat for less."),
    index: Optional[Path] = typer.Option(None, "--index", help="Package index snapshot (JSON)."),
) -> None:
    """Fetch the changelogs of the selected packages and page through them."""
    config = build_config(
        flags={"print_uris": print_uris, "download_only": download_only},
        quiet=quiet,
        index_path=index,
    )
    diagnostics = Diagnostics()

    try:
        workflow = FetchWorkflow(
            config=config,
            index=load_index(config, diagnostics),
            engine=LocalEngine(config.changelog_dir),
            runner=ShellCommandRunner(debug=config.debug_reproducible),
            confirmer=ConsoleConfirmer(console, assume_yes=config.assume_yes),
            console=console,
            diagnostics=diagnostics,
        )
        result = workflow.changelog(packages)
    except FetchAbortedError:
        finish(diagnostics, success=False)
    finish(diagnostics, success=result.success)
