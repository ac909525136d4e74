"""
Node.js runtime provider.

Catalog: ``https://nodejs.org/dist/index.json``, a list of releases each
naming the platform builds it ships in ``files``. Checksums are published
separately in ``SHASUMS256.txt`` next to the archives.
"""

import logging
from typing import Any, List, Optional

from copper.core.download import HttpClient
from copper.core.exceptions import (
    CatalogParseError,
    DownloadError,
    DownloadTargetConversionError,
    InvalidShasumFileError,
    ShasumFetchError,
    ShasumNotFoundError,
)
from copper.core.filesystem import Compression
from copper.runtimes.base import DownloadTarget, RuntimeProvider, parse_target_version

logger = logging.getLogger(__name__)

# Names used in the "files" list of index.json
_INDEX_OS = {
    "macos": "osx",
    "linux": "linux",
    "aix": "aix",
    "windows": "win",
}

# Names used in archive file names
_FILENAME_OS = {
    "macos": "darwin",
    "linux": "linux",
    "aix": "aix",
    "windows": "win",
}

_ARCH = {
    "x64": "x64",
    "arm64": "arm64",
    "arm": "armv7l",
    "ppc64": "ppc64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}

SHASUMS_FILE = "SHASUMS256.txt"


class NodeProvider(RuntimeProvider):
    """Provider for Node.js release builds."""

    name = "node"
    DEFAULT_MIRRORS = ("https://nodejs.org/dist",)
    supported_compressions = frozenset({Compression.TAR_XZ, Compression.ZIP})

    @property
    def bin_subpath(self) -> str:
        # Windows builds keep node.exe at the root
        return "" if self.platform.is_windows else "bin"

    def index_url(self, mirror: str) -> str:
        return f"{mirror}/index.json"

    def _names(self):
        try:
            return (
                _INDEX_OS[self.platform.os],
                _FILENAME_OS[self.platform.os],
                _ARCH[self.platform.arch],
            )
        except KeyError:
            raise DownloadTargetConversionError(
                f"node does not publish builds for {self.platform}"
            ) from None

    def target_string(self) -> str:
        """
        Platform key as listed in a release's ``files``.

        Example:
            >>> NodeProvider(PlatformInfo("macos", "arm64")).target_string()
            'osx-arm64-tar'
        """
        index_os, _, arch = self._names()
        if self.platform.os == "macos":
            return f"{index_os}-{arch}-tar"
        if self.platform.is_windows:
            return f"{index_os}-{arch}-zip"
        return f"{index_os}-{arch}"

    def tarball_filename(self, version_string: str) -> str:
        """
        Archive name for a version on this platform.

        Example:
            >>> NodeProvider(PlatformInfo("linux", "x64")).tarball_filename("22.1.0")
            'node-v22.1.0-linux-x64.tar.xz'
        """
        _, filename_os, arch = self._names()
        ext = Compression.ZIP.value if self.platform.is_windows else Compression.TAR_XZ.value
        return f"node-v{version_string}-{filename_os}-{arch}{ext}"

    def parse_catalog(self, document: Any, mirror: str) -> List[DownloadTarget]:
        if not isinstance(document, list):
            raise CatalogParseError("node index.json is not a list of releases")

        target_string = self.target_string()
        targets = []
        for entry in document:
            target = self._to_download_target(entry, target_string, mirror)
            if target is not None:
                targets.append(target)
        return targets

    def _to_download_target(
        self, entry: Any, target_string: str, mirror: str
    ) -> Optional[DownloadTarget]:
        if not isinstance(entry, dict):
            raise DownloadTargetConversionError(f"Invalid node release entry: {entry!r}")

        files = entry.get("files")
        if not isinstance(files, list) or target_string not in files:
            return None

        raw_version = entry.get("version")
        if not isinstance(raw_version, str):
            return None

        version_string = raw_version[1:] if raw_version.startswith("v") else raw_version
        version = parse_target_version(self.name, version_string)

        filename = self.tarball_filename(version_string)
        return DownloadTarget(
            version_string=version_string,
            version=version,
            tarball_url=f"{mirror}/v{version_string}/{filename}",
        )

    def get_tarball_shasum(self, client: HttpClient, target: DownloadTarget) -> str:
        """
        Look up the archive checksum in the release's SHASUMS256.txt.

        Each line reads ``<hex>  <filename>``.

        Raises:
            ShasumFetchError: If the manifest cannot be fetched
            InvalidShasumFileError: If a line is malformed
            ShasumNotFoundError: If no line names the archive
        """
        release_url = target.tarball_url.rsplit("/", 1)[0]
        url = f"{release_url}/{SHASUMS_FILE}"

        try:
            result = client.fetch(url)
        except DownloadError as e:
            raise ShasumFetchError(f"Failed fetching {url}: {e}") from e

        if not result.ok or not result.body:
            raise ShasumFetchError(f"Failed fetching {url} (status {result.status})")

        filename = target.filename
        for line in result.text().splitlines():
            if not line:
                continue

            parts = line.split("  ", 1)
            if len(parts) != 2:
                raise InvalidShasumFileError(f"Malformed line in {url}: {line!r}")

            shasum, name = parts
            if name == filename:
                logger.info(f"Fetched verification shasum {shasum}")
                return shasum

        raise ShasumNotFoundError(f"No shasum for {filename} in {url}")
