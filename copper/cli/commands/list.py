"""
List command - points at the specific listing commands.
"""

import logging

logger = logging.getLogger(__name__)


def run(args) -> int:
    logger.error(
        "`list` is not specific enough, use `list-remote` or `list-installed` "
        "instead. `remote` and `installed` are aliases respectively"
    )
    return 1
