"""Fetch workflows: download archives, download or show changelogs.

Both follow the same order. Resolve the selection, queue one item per
version, then (unless only printing URIs) check free space, pass the
gates, run the batch, and post-process what completed. Any gate or
preflight failure aborts before the engine is started.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict
from rich.console import Console

from fetchgate.config import FetchConfig
from fetchgate.core.capacity import check_free_space
from fetchgate.core.commands import CommandRunner
from fetchgate.core.diagnostics import Diagnostics, FetchAbortedError
from fetchgate.core.prompt import Confirmer
from fetchgate.core.reproducibility_gate import check_reproducible
from fetchgate.core.run_executor import EngineRunError, acquire_run
from fetchgate.core.trust_gate import check_trust
from fetchgate.engine.base import FetchEngine, SlotState
from fetchgate.index.snapshot import PackageIndex
from fetchgate.models.index import VersionSelection
from fetchgate.models.items import FetchBatch, ItemStatus
from fetchgate.models.outcomes import RunReport

logger = logging.getLogger(__name__)

# downloaded archives end up world-readable and never executable
DOWNLOAD_MODE = 0o644


class SelectionError(FetchAbortedError):
    """Raised when the command line selects no package version."""


class PendingErrorsError(FetchAbortedError):
    """Raised when an earlier step left errors behind and a run would follow."""


class WorkflowResult(BaseModel):
    """Summary of one workflow invocation."""

    model_config = ConfigDict(frozen=True)

    success: bool
    slots: list[SlotState] = []
    report: RunReport | None = None
    copied: list[Path] = []
    paged: list[Path] = []
    printed: list[str] = []


def page_file(console: Console, path: Path) -> None:
    """Show a text file through the console's pager."""
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    with console.pager():
        console.print(text, markup=False, highlight=False, soft_wrap=True)


class FetchWorkflow:
    """Runs the download and changelog workflows against injected collaborators.

    Parameters
    ----------
    config:
        Options for gates, preflight and run modes.
    index:
        Resolves command-line expressions to versions.
    engine:
        Queues and runs fetch items.
    runner:
        Shell capability used by the reproducibility gate.
    confirmer:
        Yes/no prompt (only consulted when a gate may prompt).
    console:
        Destination of regular output.
    diagnostics:
        Collector for errors and warnings.
    pager:
        Called with each fetched changelog in interactive mode.
    """

    def __init__(
        self,
        *,
        config: FetchConfig,
        index: PackageIndex,
        engine: FetchEngine,
        runner: CommandRunner,
        confirmer: Confirmer,
        console: Console,
        diagnostics: Diagnostics,
        pager: Callable[[Path], None] | None = None,
    ) -> None:
        self.config = config
        self.index = index
        self.engine = engine
        self.runner = runner
        self.confirmer = confirmer
        self.console = console
        self.diagnostics = diagnostics
        self.pager = pager or (lambda path: page_file(console, path))

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    def _select(self, expressions: Sequence[str]) -> VersionSelection:
        selection = self.index.resolve(expressions, diagnostics=self.diagnostics)
        if selection.empty:
            message = "No packages found"
            if not self.diagnostics.has_errors():
                self.diagnostics.error(message)
            raise SelectionError(message)
        return selection

    def _emit(self, line: str) -> str:
        self.console.print(line, markup=False, highlight=False, soft_wrap=True)
        return line

    def _run(self, batch: FetchBatch) -> RunReport:
        report = acquire_run(
            self.engine,
            batch,
            diagnostics=self.diagnostics,
            pulse_interval=self.config.pulse_interval,
        )
        if not report.ran:
            raise self.diagnostics.abort(
                EngineRunError, "The fetch engine could not run the batch"
            )
        return report

    # ------------------------------------------------------------------
    # Archive download
    # ------------------------------------------------------------------

    def download(self, expressions: Sequence[str], cwd: Path | None = None) -> WorkflowResult:
        """Fetch the selected archives into *cwd* (default: working directory)."""
        cwd = Path(cwd) if cwd is not None else Path.cwd()
        selection = self._select(expressions)

        batch = FetchBatch()
        slots = [self.engine.queue_archive(batch, version, cwd) for version in selection.versions]
        for slot in slots:
            if slot.state == SlotState.UNRESOLVED:
                self.diagnostics.error(slot.reason)
            elif slot.state == SlotState.SATISFIED:
                logger.info("Skipping %s, already downloaded.", slot.version.spec)
        states = [slot.state for slot in slots]

        if self.config.print_uris:
            printed = [
                self._emit(f"'{uri}' {item.dest_name} {item.file_size} {item.hash_sum}")
                for uri, item in batch.uri_entries()
            ]
            return WorkflowResult(success=True, slots=states, printed=printed)

        if self.diagnostics.has_errors():
            raise PendingErrorsError("Not fetching anything: earlier errors are pending")

        check_free_space(
            cwd, batch.fetch_needed(), config=self.config, diagnostics=self.diagnostics
        )
        check_trust(
            batch,
            config=self.config,
            prompt_user=False,
            confirmer=self.confirmer,
            console=self.console,
            diagnostics=self.diagnostics,
        )
        check_reproducible(
            batch,
            config=self.config,
            prompt_user=False,
            runner=self.runner,
            confirmer=self.confirmer,
            console=self.console,
            diagnostics=self.diagnostics,
        )

        # the engine may repoint dest_file during the run
        planned = [(item, Path(item.dest_file)) for item in batch]
        report = self._run(batch)

        # local sources were used in place; put a copy where it was asked for
        copied: list[Path] = []
        for item, target in planned:
            if item.local and item.status == ItemStatus.DONE and Path(item.dest_file) != target:
                shutil.copyfile(item.dest_file, target)
                os.chmod(target, DOWNLOAD_MODE)
                copied.append(target)

        return WorkflowResult(
            success=not report.failed, slots=states, report=report, copied=copied
        )

    # ------------------------------------------------------------------
    # Changelogs
    # ------------------------------------------------------------------

    def changelog(self, expressions: Sequence[str], cwd: Path | None = None) -> WorkflowResult:
        """Print, download, or display the changelogs of the selection."""
        cwd = Path(cwd) if cwd is not None else Path.cwd()
        selection = self._select(expressions)

        download_only = self.config.download_only
        print_only = self.config.print_uris
        always_online = self.config.changelogs_always_online
        if print_only and always_online is None:
            always_online = True

        batch = FetchBatch()
        # binaries of one source version share a single changelog
        seen: set[tuple[str, str]] = set()
        for version in selection.versions:
            key = (version.source_name, version.version)
            if key in seen:
                continue
            seen.add(key)
            if print_only:
                dest: Path | None = Path(os.devnull)
            elif download_only:
                dest = cwd
            else:
                dest = None
            self.engine.queue_changelog(
                batch, version, dest, always_online=bool(always_online)
            )

        report: RunReport | None = None
        if not print_only:
            report = self._run(batch)
            if report.failed:
                return WorkflowResult(success=False, report=report)

        if download_only and not print_only:
            return WorkflowResult(success=True, report=report)

        failed = False
        printed: list[str] = []
        paged: list[Path] = []
        for item in batch:
            if print_only:
                if item.error_text:
                    failed = True
                    self.diagnostics.error(item.error_text)
                else:
                    printed.append(self._emit(f"'{item.desc_uri}' {item.dest_name}"))
            else:
                self.pager(Path(item.dest_file))
                paged.append(Path(item.dest_file))

        return WorkflowResult(
            success=not failed, report=report, printed=printed, paged=paged
        )
