"""
List-remote command - show versions available for download.
"""

import logging

from copper.cli import utils

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Print available versions, newest first.

    Args:
        args: Parsed arguments with runtime and optional version filter

    Returns:
        Exit code (0 = success)
    """
    settings = utils.get_settings(args)
    store = utils.open_store(settings)

    with utils.create_client(settings) as client:
        pipeline = utils.create_pipeline(store, client, settings)
        targets = pipeline.list_remote(args.runtime, getattr(args, "version", None))

    if not targets:
        logger.info(f"No matching {args.runtime} versions available")
        return 0

    for target in targets:
        utils.safe_print(target.version_string)
    return 0
