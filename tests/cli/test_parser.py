"""
Tests for CLI argument parser.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from copper.cli.parser import COMMAND_MAP, CLI
from copper.core.exceptions import (
    DownloadError,
    InvalidVersionError,
    NoConfDirError,
    UnknownRuntimeError,
)


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_no_command_shows_help(self, capsys):
        result = CLI().run([])

        assert result == 1
        assert "usage:" in capsys.readouterr().out.lower()

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            CLI().run(["--version"])

        assert exc_info.value.code == 0
        assert "copper" in capsys.readouterr().out

    def test_global_options(self):
        args = CLI().parse_args(["-v", "--config", "/tmp/c.yaml", "store", "dir"])

        assert args.verbose is True
        assert args.quiet is False
        assert args.config == Path("/tmp/c.yaml")


class TestCommandParsing:
    """Test subcommand parsing."""

    @pytest.mark.parametrize("command", ["add", "install"])
    def test_add(self, command):
        args = CLI().parse_args([command, "node", "22"])

        assert args.command == command
        assert args.runtime == "node"
        assert args.version == "22"

    @pytest.mark.parametrize("command", ["list-remote", "remote", "list-installed", "installed"])
    def test_list_version_optional(self, command):
        args = CLI().parse_args([command, "zig"])

        assert args.runtime == "zig"
        assert args.version is None

    @pytest.mark.parametrize("command", ["remove", "uninstall", "delete"])
    def test_remove_aliases(self, command):
        args = CLI().parse_args([command, "go", "1.21.3"])
        assert COMMAND_MAP[args.command] == "copper.cli.commands.remove"

    @pytest.mark.parametrize(
        "action", ["dir", "cache-dir", "clear-cache", "remove-cache", "delete-cache"]
    )
    def test_store_actions(self, action):
        assert CLI().parse_args(["store", action]).store_command == action

    def test_store_unknown_action(self):
        with pytest.raises(SystemExit) as exc_info:
            CLI().parse_args(["store", "explode"])
        assert exc_info.value.code == 2

    @pytest.mark.parametrize("shell", ["zsh", "bash", "fish", "pwsh"])
    def test_shell(self, shell):
        assert CLI().parse_args(["shell", shell]).shell == shell

    def test_shell_unsupported(self):
        with pytest.raises(SystemExit):
            CLI().parse_args(["shell", "tcsh"])

    def test_upgrade_check(self):
        assert CLI().parse_args(["upgrade"]).check is False
        assert CLI().parse_args(["upgrade", "--check"]).check is True

    def test_missing_version(self):
        with pytest.raises(SystemExit):
            CLI().parse_args(["add", "node"])

    def test_every_command_dispatches(self):
        choices = CLI().parser._subparsers._group_actions[0].choices
        assert set(choices) == set(COMMAND_MAP)


class TestExitCodes:
    """Test mapping of errors to exit codes."""

    def run_raising(self, error, argv=("store", "dir")):
        with patch.object(CLI, "_dispatch_command", side_effect=error):
            return CLI().run(list(argv))

    def test_success(self):
        with patch.object(CLI, "_dispatch_command", return_value=0):
            assert CLI().run(["store", "dir"]) == 0

    @pytest.mark.parametrize(
        "error", [UnknownRuntimeError("python"), InvalidVersionError("bad")]
    )
    def test_configuration_error(self, error):
        assert self.run_raising(error) == 2

    def test_state_error(self, capsys):
        assert self.run_raising(NoConfDirError("node")) == 1
        assert "No node versions installed" in capsys.readouterr().err

    def test_other_error(self):
        assert self.run_raising(DownloadError("boom")) == 1

    def test_unexpected_error(self, capsys):
        assert self.run_raising(RuntimeError("kaput")) == 1
        assert "Unexpected error: kaput" in capsys.readouterr().err

    def test_verbose_prints_traceback(self, capsys):
        assert self.run_raising(DownloadError("boom"), ("-v", "store", "dir")) == 1
        assert "Traceback" in capsys.readouterr().err

    def test_interrupted(self):
        assert self.run_raising(KeyboardInterrupt()) == 130

    def test_missing_config_file(self, tmp_path):
        assert CLI().run(["--config", str(tmp_path / "nope.yaml"), "store", "dir"]) == 2
