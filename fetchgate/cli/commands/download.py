"""``fetchgate download PKG...`` — fetch archives into the working directory.

Runs non-interactively: untrusted or unreproducible packages are refused
unless the matching ``--allow-*`` option is given.
"""

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


def download_cmd(
    packages: list[str] = typer.Argument(..., help="Package expressions (name, name=version, name/release)."),
    print_uris: bool = typer.Option(False, "--print-uris", help="Print the URIs instead of fetching."),
    assume_yes: bool = typer.Option(False, "--assume-yes", "-y", help="Assume yes to all queries."),
    force_yes: bool = typer.Option(False, "--force-yes", help="Deprecated, use the --allow-* options."),
    allow_unauthenticated: bool = typer.Option(
        False, "--allow-unauthenticated", help="Fetch packages that cannot be authenticated."
    ),
    allow_unreproducible: bool = typer.Option(
        False, "--allow-unreproducible", help="Fetch packages that are not reproducible."
    ),
    quiet: int = typer.Option(0, "--quiet", "-q", count=True, help="Less output; repeat for less."),
    index: Optional[Path] = typer.Option(None, "--index", help="Package index snapshot (JSON)."),
) -> None:
    """Download the selected package archives into the current directory."""
    config = build_config(
        flags={
            "print_uris": print_uris,
            "assume_yes": assume_yes,
            "force_yes": force_yes,
            "allow_unauthenticated": allow_unauthenticated,
            "allow_unreproducible": allow_unreproducible,
        },
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
        result = workflow.download(packages)
    except FetchAbortedError:
        finish(diagnostics, success=False)
    finish(diagnostics, success=result.success)
