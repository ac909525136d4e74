"""
Zig runtime provider.

Catalog: ``<mirror>/index.json`` on one of several community mirrors, a map
from version (or "master") to the builds of that release keyed by
``<arch>-<os>``. Each build embeds its SHA-256.
"""

import logging
from typing import Any, List, Optional

from copper.core.exceptions import CatalogParseError, DownloadTargetConversionError
from copper.core.filesystem import Compression
from copper.runtimes.base import DownloadTarget, RuntimeProvider, parse_target_version

logger = logging.getLogger(__name__)

MIRRORS = (
    "https://pkg.machengine.org/zig",
    "https://zigmirror.hryx.net/zig",
    "https://zig.linus.dev/zig",
    "https://zig.squirl.dev",
    "https://zig.florent.dev",
    "https://zig.mirror.mschae23.de/zig",
    "https://zigmirror.meox.dev",
    "https://ziglang.org/download",
)

_OS = {
    "macos": "macos",
    "windows": "windows",
    "linux": "linux",
    "freebsd": "freebsd",
    "netbsd": "netbsd",
}

_ARCH = {
    "x86": "x86",
    "x64": "x86_64",
    "arm64": "aarch64",
    "arm": "arm",
    "riscv64": "riscv64",
    "ppc64le": "powerpc64le",
    "ppc64": "powerpc64",
    "loong64": "loongarch64",
    "s390x": "s390x",
}


class ZigProvider(RuntimeProvider):
    """Provider for Zig release and nightly builds."""

    name = "zig"
    DEFAULT_MIRRORS = MIRRORS
    supported_compressions = frozenset({Compression.TAR_XZ, Compression.ZIP})

    def index_url(self, mirror: str) -> str:
        return f"{mirror}/index.json"

    def target_key(self) -> str:
        """
        Build key inside a release entry.

        Example:
            >>> ZigProvider(PlatformInfo("macos", "arm64")).target_key()
            'aarch64-macos'
        """
        try:
            return f"{_ARCH[self.platform.arch]}-{_OS[self.platform.os]}"
        except KeyError:
            raise DownloadTargetConversionError(
                f"zig does not publish builds for {self.platform}"
            ) from None

    def parse_catalog(self, document: Any, mirror: str) -> List[DownloadTarget]:
        if not isinstance(document, dict):
            raise CatalogParseError("zig index.json is not a map of releases")

        key = self.target_key()
        targets = []
        for release, entry in document.items():
            target = self._to_download_target(release, entry, key)
            if target is not None:
                targets.append(target)
        return targets

    def _to_download_target(
        self, release: str, entry: Any, key: str
    ) -> Optional[DownloadTarget]:
        if not isinstance(entry, dict):
            raise DownloadTargetConversionError(f"Invalid zig release entry: {release}")

        build = entry.get(key)
        if build is None:
            return None
        if not isinstance(build, dict):
            raise DownloadTargetConversionError(f"Invalid zig build entry: {release}/{key}")

        tarball = build.get("tarball")
        shasum = build.get("shasum")
        if not isinstance(tarball, str) or not tarball:
            raise DownloadTargetConversionError(f"zig {release}/{key} has no tarball")
        if not isinstance(shasum, str) or not shasum:
            raise DownloadTargetConversionError(f"zig {release}/{key} has no shasum")

        version_string = entry.get("version") or release
        return DownloadTarget(
            version_string=version_string,
            version=parse_target_version(self.name, version_string),
            tarball_url=tarball,
            shasum=shasum,
        )
