"""
Self-update orchestration.

copper ships standalone executables as GitHub release assets. Updating
fetches the latest release, downloads and verifies the asset for this
platform through the acquisition pipeline, unpacks it, and replaces the
running executable in place.
"""

import json
import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .. import EXE_NAME, __version__
from ..core.download import HttpClient
from ..core.exceptions import (
    DownloadError,
    InvalidReleaseError,
    InvalidVersionError,
    ReleaseFetchError,
    SelfUpdateUnsupportedError,
    UnsupportedTargetError,
    UnzipError,
)
from ..core.filesystem import Compression, extract_archive
from ..core.platform import PlatformInfo, detect_platform
from ..core.version import SemanticVersion
from ..runtimes.base import DownloadTarget
from .pipeline import AcquisitionPipeline
from .store import Store

logger = logging.getLogger(__name__)

RELEASE_FEED = "https://api.github.com/repos/logotip4ik/copper/releases/latest"

GITHUB_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}

DIGEST_PREFIX = "sha256:"

_ASSET_OS = {"linux": "linux", "macos": "macos", "windows": "windows"}
_ASSET_ARCH = {"x64": "x86_64", "arm64": "aarch64"}


def release_asset_name(platform: PlatformInfo) -> str:
    """
    Name of the release asset built for a platform.

    Raises:
        UnsupportedTargetError: If no asset is published for the platform

    Example:
        >>> release_asset_name(PlatformInfo("linux", "x64"))
        'copper-linux-x86_64.tar.gz'
    """
    try:
        os_name = _ASSET_OS[platform.os]
        arch = _ASSET_ARCH[platform.arch]
    except KeyError:
        raise UnsupportedTargetError(
            f"No {EXE_NAME} release is published for {platform}"
        ) from None

    ext = Compression.ZIP.value if platform.is_windows else Compression.TAR_GZ.value
    return f"{EXE_NAME}-{os_name}-{arch}{ext}"


@dataclass
class UpdateInfo:
    """Information about an available update."""

    current_version: str
    """Currently running version"""

    latest_version: str
    """Latest released version"""

    download_url: str
    """Download URL of the asset for this platform"""

    sha256: str
    """SHA256 checksum of the asset"""


@dataclass
class UpdateResult:
    """Result of a self-update."""

    old_version: str
    new_version: str
    path: Optional[Path]
    """Executable that was replaced, None when no update was needed"""

    updated: bool


class SelfUpdater:
    """
    Replaces the running copper executable with the latest release.

    The sequence is strict: download, verify, unpack, delete the running
    executable, move the new one into its path. A failure before the delete
    leaves the installed executable untouched.

    Example:
        >>> with HttpClient() as client:
        ...     result = SelfUpdater(Store(), client).update()
        >>> result.updated
        True
    """

    def __init__(
        self,
        store: Store,
        client: HttpClient,
        current_version: str = __version__,
        self_path: Optional[Path] = None,
        feed_url: str = RELEASE_FEED,
        platform: Optional[PlatformInfo] = None,
    ):
        """
        Initialize updater.

        Args:
            store: Store whose cache holds the downloaded asset
            client: HTTP client
            current_version: Version of the running copy
            self_path: Executable to replace (default: the frozen executable)
            feed_url: Latest-release endpoint
            platform: Target platform (defaults to the detected host)
        """
        self.store = store
        self.client = client
        self.current_version = current_version
        self.self_path = Path(self_path) if self_path else None
        self.feed_url = feed_url
        self.platform = platform or detect_platform()
        self.pipeline = AcquisitionPipeline(store, client)

    def resolve_self_path(self) -> Path:
        """
        Path of the executable to replace.

        Raises:
            SelfUpdateUnsupportedError: If copper runs from a Python installation
        """
        if self.self_path is not None:
            return self.self_path

        if getattr(sys, "frozen", False):
            return Path(sys.executable).resolve()

        raise SelfUpdateUnsupportedError(
            f"{EXE_NAME} is running from a Python installation; "
            f"upgrade it with: pip install --upgrade {EXE_NAME}"
        )

    def check_for_update(self) -> Optional[UpdateInfo]:
        """
        Check the release feed for a newer version.

        Returns:
            UpdateInfo if a strictly newer release exists, None otherwise

        Raises:
            ReleaseFetchError: If the feed cannot be fetched
            InvalidReleaseError: If the feed document is malformed
            UnsupportedTargetError: If the release has no asset for this platform
        """
        try:
            result = self.client.fetch(self.feed_url, headers=GITHUB_HEADERS)
        except DownloadError as e:
            raise ReleaseFetchError(f"Failed fetching latest release: {e}") from e

        if not result.ok or not result.body:
            raise ReleaseFetchError(
                f"Failed fetching latest release (status {result.status})"
            )

        try:
            release = json.loads(result.body)
        except ValueError as e:
            raise InvalidReleaseError(f"Release feed is not valid JSON: {e}") from e

        if not isinstance(release, dict) or not isinstance(release.get("tag_name"), str):
            raise InvalidReleaseError("Release feed has no tag_name")

        tag = release["tag_name"]
        latest_string = tag[1:] if tag.startswith("v") else tag
        try:
            latest = SemanticVersion.parse(latest_string)
        except InvalidVersionError as e:
            raise InvalidReleaseError(f"Invalid release tag: {tag}") from e

        current = SemanticVersion.parse(self.current_version)
        if not latest > current:
            logger.info(f"Already using latest available {current} version")
            return None

        logger.info(f"Newer version {latest} is available")

        asset_name = release_asset_name(self.platform)
        assets = release.get("assets")
        if not isinstance(assets, list):
            raise InvalidReleaseError("Release feed has no assets")

        for asset in assets:
            if not isinstance(asset, dict) or asset.get("name") != asset_name:
                continue

            url = asset.get("browser_download_url")
            digest = asset.get("digest")
            if not isinstance(url, str) or not isinstance(digest, str):
                raise InvalidReleaseError(f"Asset {asset_name} lacks url or digest")
            if not digest.startswith(DIGEST_PREFIX):
                raise InvalidReleaseError(f"Unsupported digest for {asset_name}: {digest}")

            return UpdateInfo(
                current_version=str(current),
                latest_version=latest_string,
                download_url=url,
                sha256=digest[len(DIGEST_PREFIX):],
            )

        raise UnsupportedTargetError(f"Release {tag} has no asset {asset_name}")

    def update(self) -> UpdateResult:
        """
        Update the running executable to the latest release.

        Returns:
            UpdateResult; ``updated`` is False when already up to date

        Raises:
            SelfUpdateUnsupportedError: If an update exists but there is no
                standalone executable to replace
            UpdateError: If the release cannot be resolved
            DownloadError: If the asset download fails
            ShasumError: If the asset does not match its digest
            DecompressError: If the asset cannot be unpacked
        """
        info = self.check_for_update()
        if info is None:
            return UpdateResult(
                old_version=self.current_version,
                new_version=self.current_version,
                path=None,
                updated=False,
            )

        self_path = self.resolve_self_path()

        target = DownloadTarget(
            version_string=info.latest_version,
            version=SemanticVersion.parse(info.latest_version),
            tarball_url=info.download_url,
            shasum=info.sha256,
        )

        archive = self.pipeline.get_target_file(target)
        self.pipeline.verify_target_file(target, archive)
        logger.info("Shasum matches expected")

        scratch_dir = self.store.prepare_tmp_dir_for_decompression(
            EXE_NAME, info.latest_version
        )
        new_binary = self._decompress(archive, scratch_dir)

        self_path.unlink()
        shutil.move(str(new_binary), str(self_path))
        if not self.platform.is_windows:
            os.chmod(self_path, self_path.stat().st_mode | 0o755)

        logger.info(f"Updated {EXE_NAME} to {info.latest_version}")
        return UpdateResult(
            old_version=self.current_version,
            new_version=info.latest_version,
            path=self_path,
            updated=True,
        )

    def _decompress(self, archive: Path, scratch_dir: Path) -> Path:
        existing = self._find_binary(scratch_dir)
        if existing is not None:
            logger.info(f"Using already decompressed {existing.name}")
            return existing

        extract_archive(archive, scratch_dir)

        binary = self._find_binary(scratch_dir)
        if binary is None:
            raise UnzipError(f"{archive.name} contains no {EXE_NAME} executable")
        return binary

    @staticmethod
    def _find_binary(directory: Path) -> Optional[Path]:
        for entry in sorted(directory.iterdir()):
            if entry.is_file() and entry.name.startswith(EXE_NAME):
                return entry
        for entry in sorted(directory.rglob(f"{EXE_NAME}*")):
            if entry.is_file():
                return entry
        return None
