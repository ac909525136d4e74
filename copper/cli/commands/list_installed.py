"""
List-installed command - show versions in the store.
"""

import logging

from copper.cli import utils

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Print installed versions, newest first, marking the default.

    Args:
        args: Parsed arguments with runtime and optional version filter

    Returns:
        Exit code (0 = success)
    """
    settings = utils.get_settings(args)
    store = utils.open_store(settings)

    with utils.create_client(settings) as client:
        pipeline = utils.create_pipeline(store, client, settings)
        installations = pipeline.list_installed(args.runtime, getattr(args, "version", None))

    if not installations:
        logger.info(f"No matching {args.runtime} versions installed")
        return 0

    for installation in installations:
        if installation.is_default:
            utils.safe_print(f"{installation.version_string} - default")
        else:
            utils.safe_print(installation.version_string)
    return 0
