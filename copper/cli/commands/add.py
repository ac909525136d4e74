"""
Add command - install a runtime version.
"""

import logging

from copper.cli import utils

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Install the highest available version matching ``args.version``.

    Args:
        args: Parsed arguments with runtime and version

    Returns:
        Exit code (0 = success)
    """
    settings = utils.get_settings(args)
    store = utils.open_store(settings)

    with utils.create_client(settings) as client:
        pipeline = utils.create_pipeline(store, client, settings)
        result = pipeline.add(args.runtime, args.version)

    if not result.already_installed:
        logger.info(f"Installed {result.runtime} - {result.version_string} to {result.path}")
    return 0
