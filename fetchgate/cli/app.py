"""Main Typer application — imports and registers all CLI commands.

Entry point: ``fetchgate`` (configured via pyproject.toml console_scripts).

Commands: download, changelog, clean, autoclean.
"""

from __future__ import annotations

from typing import Optional

import typer

from fetchgate.cli.commands.changelog import changelog_cmd
from fetchgate.cli.commands.clean import autoclean_cmd, clean_cmd
from fetchgate.cli.commands.download import download_cmd
from fetchgate.cli.common import configure_logging
from fetchgate.config import FetchConfig

app = typer.Typer(
    name="fetchgate",
    help="Fetchgate: verified package archive and changelog downloads.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="download", help="Download package archives into the current directory.")(download_cmd)
app.command(name="changelog", help="Download and display package changelogs.")(changelog_cmd)
app.command(name="clean", help="Erase all downloaded archive files.")(clean_cmd)
app.command(name="autoclean", help="Erase archive files that can no longer be fetched.")(autoclean_cmd)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (default from FETCHGATE_LOG_LEVEL)."
    ),
) -> None:
    """Fetchgate: verified package archive and changelog downloads."""
    configure_logging(log_level or FetchConfig().log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
