"""
Shell snippets that put default runtime versions on PATH.

Example:
    >>> render_path_export("fish", ["/home/u/.copper/node/default/bin"])
    'set -gx PATH $PATH /home/u/.copper/node/default/bin'
"""

from typing import Callable, Dict, List, Sequence

from copper.core.exceptions import ConfigurationError


def _posix(paths: Sequence[str]) -> str:
    joined = ":".join(paths)
    return f'export PATH="$PATH:{joined}"'


def _fish(paths: Sequence[str]) -> str:
    joined = " ".join(paths)
    return f"set -gx PATH $PATH {joined}"


def _pwsh(paths: Sequence[str]) -> str:
    joined = ";".join(paths)
    return f'$env:PATH = "$env:PATH;{joined}"'


SHELLS: Dict[str, Callable[[Sequence[str]], str]] = {
    "zsh": _posix,
    "bash": _posix,
    "fish": _fish,
    "pwsh": _pwsh,
}


def supported_shells() -> List[str]:
    return list(SHELLS)


def render_path_export(shell: str, paths: Sequence[str]) -> str:
    """
    Render the PATH export line for a shell.

    Args:
        shell: One of zsh, bash, fish, pwsh
        paths: Directories to append to PATH, in order

    Returns:
        A single line to eval in the target shell, or an empty string when
        there is nothing to add

    Raises:
        ConfigurationError: If the shell is not supported
    """
    try:
        renderer = SHELLS[shell]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported shell: {shell} (supported: {', '.join(SHELLS)})"
        ) from None

    if not paths:
        return ""
    return renderer(paths)
