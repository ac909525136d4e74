"""
Runtime providers.

``RUNTIMES`` maps each runtime name accepted on the command line to its
provider class.
"""

import random
from typing import Dict, Optional, Sequence, Type

from copper.core.exceptions import UnknownRuntimeError
from copper.core.platform import PlatformInfo

from .base import DownloadTarget, RuntimeProvider, shuffle_mirrors
from .go import GoProvider, go_version_to_semver
from .node import NodeProvider
from .zig import ZigProvider

RUNTIMES: Dict[str, Type[RuntimeProvider]] = {
    "node": NodeProvider,
    "zig": ZigProvider,
    "go": GoProvider,
}


def runtime_names():
    """Registered runtime names, in registration order."""
    return list(RUNTIMES)


def get_provider(
    name: str,
    platform: Optional[PlatformInfo] = None,
    mirrors: Optional[Sequence[str]] = None,
    rng: Optional[random.Random] = None,
) -> RuntimeProvider:
    """
    Instantiate the provider registered under a runtime name.

    Raises:
        UnknownRuntimeError: If no provider is registered for name
    """
    try:
        provider_cls = RUNTIMES[name]
    except KeyError:
        raise UnknownRuntimeError(name, RUNTIMES) from None
    return provider_cls(platform=platform, mirrors=mirrors, rng=rng)


__all__ = [
    "RUNTIMES",
    "DownloadTarget",
    "RuntimeProvider",
    "NodeProvider",
    "ZigProvider",
    "GoProvider",
    "get_provider",
    "runtime_names",
    "shuffle_mirrors",
    "go_version_to_semver",
]
