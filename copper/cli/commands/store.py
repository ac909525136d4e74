"""
Store command - print store locations or clear the download cache.
"""

import logging

from copper.cli import utils

logger = logging.getLogger(__name__)

CLEAR_CACHE_COMMANDS = ("clear-cache", "remove-cache", "delete-cache")


def run(args) -> int:
    """
    Execute a store subcommand.

    Args:
        args: Parsed arguments with store_command

    Returns:
        Exit code (0 = success)
    """
    settings = utils.get_settings(args)
    store = utils.open_store(settings)

    if args.store_command == "dir":
        utils.safe_print(str(store.store_dir))
    elif args.store_command == "cache-dir":
        utils.safe_print(str(store.tmp_dir))
    elif args.store_command in CLEAR_CACHE_COMMANDS:
        store.clear_tmpdir()
    else:
        logger.error(f"Unknown store command: {args.store_command}")
        return 1

    return 0
