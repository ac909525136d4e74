"""
Upgrade command - replace copper with the latest release.
"""

import logging

from copper import EXE_NAME
from copper.cli import utils
from copper.toolchain.upgrader import RELEASE_FEED, SelfUpdater

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Execute upgrade command.

    Args:
        args: Parsed arguments with optional check flag

    Returns:
        Exit code (0 = success)
    """
    settings = utils.get_settings(args)
    store = utils.open_store(settings)

    with utils.create_client(settings) as client:
        updater = SelfUpdater(
            store, client, feed_url=settings.release_feed or RELEASE_FEED
        )

        if getattr(args, "check", False):
            info = updater.check_for_update()
            if info is not None:
                utils.safe_print(
                    f"Update available: {info.current_version} -> {info.latest_version}"
                )
                utils.safe_print(f"Run '{EXE_NAME} upgrade' to install it")
            return 0

        result = updater.update()

    if result.updated:
        utils.safe_print(f"{EXE_NAME} {result.old_version} -> {result.new_version}")
    return 0
