"""
Use command - switch the default version.
"""

from copper.cli import utils


def run(args) -> int:
    """
    Make the highest installed version matching ``args.version`` the default.

    Args:
        args: Parsed arguments with runtime and version

    Returns:
        Exit code (0 = success)
    """
    settings = utils.get_settings(args)
    store = utils.open_store(settings)

    with utils.create_client(settings) as client:
        pipeline = utils.create_pipeline(store, client, settings)
        pipeline.use(args.runtime, args.version)
    return 0
