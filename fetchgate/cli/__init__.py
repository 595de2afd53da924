"""Fetchgate CLI — Typer-based command-line interface.

Provides the ``fetchgate`` command with subcommands for downloading
archives and changelogs and for cleaning the archive cache.

All output uses Rich for formatted terminal display.
"""
