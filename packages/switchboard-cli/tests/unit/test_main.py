"""Unit tests for switchboard_cli.main module."""

from __future__ import annotations

from click.testing import CliRunner

from switchboard_cli import __version__
from switchboard_cli.main import LAZY_COMMANDS, cli


class TestCLIHelp:
    """Tests for CLI help output."""

    def test_help_shows_options(self) -> None:
        """--help lists the global options."""
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "--version" in result.output
        assert "--no-color" in result.output
        assert "--log-level" in result.output

    def test_help_shows_all_commands(self) -> None:
        """Every lazy command is listed."""
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in LAZY_COMMANDS:
            assert name in result.output

    def test_version(self) -> None:
        """--version prints the package version."""
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_unknown_command(self) -> None:
        """Unknown commands are usage errors."""
        result = CliRunner().invoke(cli, ["deploy"])

        assert result.exit_code == 2


class TestLazyGroup:
    """Tests for lazy command loading."""

    def test_commands_resolve(self) -> None:
        """Every lazy command imports to a click command."""
        ctx = cli.make_context("switchboard", [], resilient_parsing=True)
        for name in LAZY_COMMANDS:
            command = cli.get_command(ctx, name)
            assert command is not None
            assert command.name is not None

    def test_list_commands_sorted(self) -> None:
        """Command names are listed alphabetically."""
        ctx = cli.make_context("switchboard", [], resilient_parsing=True)
        assert cli.list_commands(ctx) == sorted(LAZY_COMMANDS)


class TestGlobalOptions:
    """Tests for options that apply to every command."""

    def test_no_color_flag(self, isolated_runner: CliRunner) -> None:
        """--no-color is accepted before a command."""
        result = isolated_runner.invoke(cli, ["--no-color", "clean"])

        assert result.exit_code == 0

    def test_log_level_choice(self, isolated_runner: CliRunner) -> None:
        """Log levels are case-insensitive; unknown levels are rejected."""
        assert isolated_runner.invoke(cli, ["--log-level", "debug", "clean"]).exit_code == 0
        assert isolated_runner.invoke(cli, ["--log-level", "LOUD", "clean"]).exit_code == 2
