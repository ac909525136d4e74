"""
Shell command - print PATH setup for default runtime versions.

Usage::

    eval "$(copper shell zsh)"
"""

import logging

from copper.cli import utils
from copper.core.shell import render_path_export
from copper.runtimes import RUNTIMES, get_provider
from copper.toolchain.store import DEFAULT_LINK

logger = logging.getLogger(__name__)


def default_bin_paths(store):
    """``<store>/<runtime>/default/<bin>`` for every installed runtime."""
    paths = []
    for runtime in store.installed_runtimes():
        if runtime not in RUNTIMES:
            logger.debug(f"Skipping unknown directory in store: {runtime}")
            continue

        path = store.store_dir / runtime / DEFAULT_LINK
        bin_subpath = get_provider(runtime).bin_subpath
        if bin_subpath:
            path = path / bin_subpath
        paths.append(str(path))
    return paths


def run(args) -> int:
    """
    Print one line that extends PATH in the requested shell.

    Args:
        args: Parsed arguments with shell

    Returns:
        Exit code (0 = success)
    """
    settings = utils.get_settings(args)
    store = utils.open_store(settings)

    line = render_path_export(args.shell, default_bin_paths(store))
    if line:
        utils.safe_print(line)
    return 0
