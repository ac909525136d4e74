"""
Go runtime provider.

Catalog: ``https://go.dev/dl/?mode=json&include=all``, a list of releases
whose ``files`` carry os, arch, kind and an embedded SHA-256.
"""

import logging
from typing import Any, List, Optional

from copper.core.exceptions import (
    CatalogParseError,
    DownloadTargetConversionError,
    InvalidVersionError,
)
from copper.core.filesystem import Compression
from copper.runtimes.base import DownloadTarget, RuntimeProvider, parse_target_version

logger = logging.getLogger(__name__)

_OS = {
    "macos": "darwin",
    "linux": "linux",
    "windows": "windows",
    "freebsd": "freebsd",
    "netbsd": "netbsd",
    "aix": "aix",
}

_ARCH = {
    "x86": "386",
    "x64": "amd64",
    "arm64": "arm64",
    "arm": "armv6l",
    "ppc64": "ppc64",
    "ppc64le": "ppc64le",
    "riscv64": "riscv64",
    "s390x": "s390x",
    "loong64": "loong64",
}

_PRERELEASE_MARKERS = "abr"


def go_version_to_semver(go_version: str) -> str:
    """
    Convert a Go release name to a semantic version string.

    Missing minor and patch components become 0; an alpha, beta or rc
    suffix becomes the prerelease.

    Args:
        go_version: Release name such as "go1.21.0" or "go1.21rc2"

    Returns:
        Semantic version string

    Raises:
        InvalidVersionError: If the name is not a Go release name

    Example:
        >>> go_version_to_semver("go1.21rc2")
        '1.21.0-rc2'
        >>> go_version_to_semver("go1")
        '1.0.0'
    """
    if not go_version.startswith("go"):
        raise InvalidVersionError(f"Invalid go version: {go_version}")

    components = go_version[2:].split(".")

    numbers = []
    prerelease = None
    for component in components[:3]:
        idx = next(
            (i for i, ch in enumerate(component) if ch in _PRERELEASE_MARKERS), None
        )
        if idx is not None:
            prerelease = component[idx:]
            component = component[:idx]

        if not component.isascii() or not component.isdigit():
            raise InvalidVersionError(f"Invalid go version: {go_version}")
        numbers.append(int(component))

        if prerelease:
            break

    while len(numbers) < 3:
        numbers.append(0)

    semver = f"{numbers[0]}.{numbers[1]}.{numbers[2]}"
    if prerelease:
        semver += f"-{prerelease}"
    return semver


class GoProvider(RuntimeProvider):
    """Provider for official Go distributions."""

    name = "go"
    DEFAULT_MIRRORS = ("https://go.dev/dl",)
    supported_compressions = frozenset({Compression.TAR_GZ, Compression.ZIP})

    @property
    def bin_subpath(self) -> str:
        return "bin"

    def index_url(self, mirror: str) -> str:
        return f"{mirror}/?mode=json&include=all"

    def _names(self):
        try:
            return _OS[self.platform.os], _ARCH[self.platform.arch]
        except KeyError:
            raise DownloadTargetConversionError(
                f"go does not publish builds for {self.platform}"
            ) from None

    def parse_catalog(self, document: Any, mirror: str) -> List[DownloadTarget]:
        if not isinstance(document, list):
            raise CatalogParseError("go release list is not a list")

        target_os, target_arch = self._names()
        targets = []
        for entry in document:
            target = self._to_download_target(entry, target_os, target_arch, mirror)
            if target is not None:
                targets.append(target)
        return targets

    def _to_download_target(
        self, entry: Any, target_os: str, target_arch: str, mirror: str
    ) -> Optional[DownloadTarget]:
        if not isinstance(entry, dict):
            raise DownloadTargetConversionError(f"Invalid go release entry: {entry!r}")

        raw_version = entry.get("version")
        if not isinstance(raw_version, str):
            return None

        try:
            version_string = go_version_to_semver(raw_version)
        except InvalidVersionError as e:
            raise DownloadTargetConversionError(str(e)) from e
        version = parse_target_version(self.name, version_string)

        files = entry.get("files")
        if not isinstance(files, list):
            raise DownloadTargetConversionError(f"go {raw_version} has no files")

        for file_info in files:
            if not isinstance(file_info, dict):
                continue
            if file_info.get("kind") != "archive":
                continue
            if file_info.get("os") != target_os or file_info.get("arch") != target_arch:
                continue

            filename = file_info.get("filename")
            if not filename:
                continue

            shasum = file_info.get("sha256")
            if not shasum:
                raise DownloadTargetConversionError(f"go {filename} has no sha256")

            return DownloadTarget(
                version_string=version_string,
                version=version,
                tarball_url=f"{mirror}/{filename}",
                shasum=shasum,
            )

        return None
