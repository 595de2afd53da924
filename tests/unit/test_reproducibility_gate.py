"""Unit tests for the reproducibility gate, driven through a stub command runner."""

from __future__ import annotations

import shlex

import pytest

from fetchgate.core.commands import CommandError
from fetchgate.core.decision_policy import GateDecision, GateRejectedError
from fetchgate.core.reproducibility_gate import (
    REPRODUCIBLE_TEXT,
    check_reproducible,
    source_command,
    status_command,
    unreproducible_items,
    update_command,
)

RECORD = '{"package":"hello","suite":"unstable","status":"reproducible","architecture":"amd64"}'


class TestCommandLines:
    def test_update_is_conditional_download(self, config):
        cmd = update_command(config)
        cache = shlex.quote(str(config.reproducible_cache))
        assert cmd.startswith("curl --silent --location")
        assert f"-z {cache} -o {cache}" in cmd
        assert cmd.endswith(config.reproducible_status_url)

    def test_update_is_verbose_when_debugging(self, config):
        cfg = config.model_copy(update={"debug_reproducible": True})
        assert "--silent" not in update_command(cfg)

    def test_status_filters_by_suite_package_and_arch(self, config):
        cmd = status_command(config, "hello")
        assert cmd.startswith("bunzip2 -c ")
        assert "--arg suite unstable" in cmd
        assert "--arg pkg hello" in cmd
        assert "--arg arch amd64" in cmd
        assert "reproducible" in cmd

    def test_hostile_names_are_quoted(self, config):
        cmd = source_command(config, "x; rm -rf /")
        assert "'x; rm -rf /'" in cmd


class TestUnreproducibleItems:
    def test_items_with_record_are_not_flagged(
        self, make_batch, config, make_runner, diagnostics
    ):
        runner = make_runner({"bunzip2": RECORD})
        assert unreproducible_items(
            make_batch("hello"), config=config, runner=runner, diagnostics=diagnostics
        ) == []

    def test_items_without_record_are_flagged(
        self, make_batch, config, make_runner, diagnostics
    ):
        runner = make_runner({"--arg pkg hello --arg arch": RECORD})
        flagged = unreproducible_items(
            make_batch("hello", "other"), config=config, runner=runner, diagnostics=diagnostics
        )
        assert flagged == ["other"]

    def test_source_name_is_used_for_status_lookup(
        self, make_batch, config, make_runner, diagnostics
    ):
        runner = make_runner({"jq --raw-output --arg pkg libhello1": "hello"})
        unreproducible_items(
            make_batch("libhello1"), config=config, runner=runner, diagnostics=diagnostics
        )
        assert "--arg pkg hello " in runner.commands[-1]

    def test_empty_source_falls_back_to_binary_name(
        self, make_batch, config, make_runner, diagnostics
    ):
        runner = make_runner()
        unreproducible_items(
            make_batch("libhello1"), config=config, runner=runner, diagnostics=diagnostics
        )
        assert "--arg pkg libhello1 " in runner.commands[-1]
        assert not diagnostics.has_errors()

    def test_feed_refreshed_first(self, make_batch, config, make_runner, diagnostics):
        runner = make_runner()
        unreproducible_items(
            make_batch("hello"), config=config, runner=runner, diagnostics=diagnostics
        )
        assert runner.commands[0].startswith("curl")
        assert config.reproducible_cache.parent.is_dir()

    @pytest.mark.parametrize(
        ("marker", "message"),
        [
            ("curl", "Could not update reproducible cache"),
            ("jq --raw-output --arg pkg", "Could not check source package name"),
            ("bunzip2", "Could not filter reproducible status"),
        ],
    )
    def test_command_failure_aborts_gate(
        self, make_batch, config, make_runner, diagnostics, marker, message
    ):
        runner = make_runner(failing=(marker,))
        with pytest.raises(CommandError):
            unreproducible_items(
                make_batch("hello"), config=config, runner=runner, diagnostics=diagnostics
            )
        assert diagnostics.errors() == [message]


class TestCheckReproducible:
    def test_allow_unreproducible_skips_commands(
        self, make_batch, config, make_runner, confirm_no, console, diagnostics
    ):
        cfg = config.model_copy(update={"allow_unreproducible": True})
        runner = make_runner()
        decision = check_reproducible(
            make_batch("hello"),
            config=cfg,
            prompt_user=False,
            runner=runner,
            confirmer=confirm_no,
            console=console,
            diagnostics=diagnostics,
        )
        assert decision == GateDecision.OVERRIDDEN
        assert runner.commands == []

    def test_unreproducible_rejected_when_not_prompting(
        self, make_batch, config, make_runner, confirm_yes, console, diagnostics
    ):
        with pytest.raises(GateRejectedError, match="not reproducible"):
            check_reproducible(
                make_batch("hello"),
                config=config,
                prompt_user=False,
                runner=make_runner(),
                confirmer=confirm_yes,
                console=console,
                diagnostics=diagnostics,
            )
        assert REPRODUCIBLE_TEXT.list_header in console.file.getvalue()

    def test_all_reproducible_is_clean(
        self, make_batch, config, make_runner, confirm_no, console, diagnostics
    ):
        decision = check_reproducible(
            make_batch("hello", "world"),
            config=config,
            prompt_user=False,
            runner=make_runner({"bunzip2": RECORD}),
            confirmer=confirm_no,
            console=console,
            diagnostics=diagnostics,
        )
        assert decision == GateDecision.CLEAN
