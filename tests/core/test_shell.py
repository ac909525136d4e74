"""
Unit tests for shell PATH rendering.
"""

import pytest

from copper.core.exceptions import ConfigurationError
from copper.core.shell import render_path_export, supported_shells

PATHS = ["/home/u/.copper/node/default/bin", "/home/u/.copper/zig/default"]


def test_supported_shells():
    assert supported_shells() == ["zsh", "bash", "fish", "pwsh"]


@pytest.mark.parametrize("shell", ["zsh", "bash"])
def test_posix(shell):
    assert render_path_export(shell, PATHS) == (
        'export PATH="$PATH:/home/u/.copper/node/default/bin:/home/u/.copper/zig/default"'
    )


def test_fish():
    assert render_path_export("fish", PATHS) == (
        "set -gx PATH $PATH /home/u/.copper/node/default/bin /home/u/.copper/zig/default"
    )


def test_pwsh():
    paths = [r"C:\Users\u\.copper\node\default", r"C:\Users\u\.copper\go\default\bin"]
    assert render_path_export("pwsh", paths) == (
        r'$env:PATH = "$env:PATH;C:\Users\u\.copper\node\default;C:\Users\u\.copper\go\default\bin"'
    )


def test_no_paths_renders_nothing():
    assert render_path_export("zsh", []) == ""


def test_unsupported_shell():
    with pytest.raises(ConfigurationError, match="Unsupported shell: tcsh"):
        render_path_export("tcsh", PATHS)
