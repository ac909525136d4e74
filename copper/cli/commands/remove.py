"""
Remove command - delete an installed version.
"""

from copper.cli import utils


def run(args) -> int:
    """
    Delete an installed version, moving the default if needed.

    The store logs what was removed and where the default moved.

    Args:
        args: Parsed arguments with runtime and exact version

    Returns:
        Exit code (0 = success)
    """
    settings = utils.get_settings(args)
    store = utils.open_store(settings)

    with utils.create_client(settings) as client:
        pipeline = utils.create_pipeline(store, client, settings)
        pipeline.remove(args.runtime, args.version)

    return 0
