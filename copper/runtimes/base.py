"""
Runtime provider interface.

A runtime provider knows where a runtime publishes its release catalog, how
to pick the archive built for this machine out of it, how to obtain the
archive's checksum and how to unpack it. Everything else (caching,
verification, committing to the store) is shared and lives in the
acquisition pipeline.

Adding a runtime means subclassing RuntimeProvider and registering the class
in ``copper.runtimes.RUNTIMES``.
"""

import json
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, FrozenSet, List, Optional, Sequence

from copper.core.download import HttpClient
from copper.core.exceptions import (
    CatalogFetchError,
    CatalogParseError,
    DecompressorCreationError,
    DirNotExistsError,
    DownloadError,
    DownloadTargetConversionError,
    InvalidVersionError,
    ShasumNotFoundError,
    UnzipError,
)
from copper.core.filesystem import Compression, extract_archive, first_dir
from copper.core.platform import PlatformInfo, detect_platform
from copper.core.version import SemanticVersion, sort_by_version

logger = logging.getLogger(__name__)


@dataclass
class DownloadTarget:
    """
    One installable archive from a runtime's catalog.

    Attributes:
        version_string: Version as the runtime names it, used as the store
            directory name (e.g. "22.1.0", "0.16.0-dev.1+abc")
        version: Parsed semantic version
        tarball_url: Absolute URL of the archive
        shasum: Expected SHA-256 hex digest when the catalog embeds it
    """

    version_string: str
    version: SemanticVersion
    tarball_url: str
    shasum: Optional[str] = None

    @property
    def filename(self) -> str:
        """Archive file name (last path segment of the URL)."""
        return self.tarball_url.rstrip("/").rsplit("/", 1)[-1]


def shuffle_mirrors(
    mirrors: Sequence[str], rng: Optional[random.Random] = None
) -> List[str]:
    """
    Return a shuffled copy of a mirror list.

    Args:
        mirrors: Mirror base URLs
        rng: Random source; a fresh time-seeded one when omitted

    Example:
        >>> sorted(shuffle_mirrors(["a", "b", "c"], random.Random(0)))
        ['a', 'b', 'c']
    """
    shuffled = list(mirrors)
    (rng or random.Random()).shuffle(shuffled)
    return shuffled


def parse_target_version(runtime: str, version_string: str) -> SemanticVersion:
    """Parse a catalog version, reporting failures as conversion errors."""
    try:
        return SemanticVersion.parse(version_string)
    except InvalidVersionError as e:
        raise DownloadTargetConversionError(
            f"Invalid {runtime} version in catalog: {version_string}"
        ) from e


class RuntimeProvider(ABC):
    """
    Abstract interface for runtimes copper can install.

    Subclasses set ``name``, ``DEFAULT_MIRRORS`` and
    ``supported_compressions`` and implement ``index_url`` and
    ``parse_catalog``.
    """

    name: str = ""
    DEFAULT_MIRRORS: Sequence[str] = ()
    supported_compressions: FrozenSet[Compression] = frozenset()

    def __init__(
        self,
        platform: Optional[PlatformInfo] = None,
        mirrors: Optional[Sequence[str]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize provider.

        Args:
            platform: Target platform (defaults to the detected host)
            mirrors: Mirror base URLs overriding DEFAULT_MIRRORS
            rng: Random source used to shuffle mirrors
        """
        self.platform = platform or detect_platform()
        self.mirrors = list(mirrors) if mirrors else list(self.DEFAULT_MIRRORS)
        self.rng = rng

    @property
    def bin_subpath(self) -> str:
        """Directory holding executables, relative to the installation root."""
        return ""

    @abstractmethod
    def index_url(self, mirror: str) -> str:
        """URL of the catalog document on a mirror."""
        pass

    @abstractmethod
    def parse_catalog(self, document: Any, mirror: str) -> List[DownloadTarget]:
        """
        Convert a decoded catalog document into download targets.

        Entries without a build for this platform are skipped.

        Args:
            document: JSON-decoded catalog
            mirror: Mirror the document came from

        Raises:
            CatalogParseError: If the document does not have the expected shape
            DownloadTargetConversionError: If an entry is malformed
        """
        pass

    def get_download_targets(self, client: HttpClient) -> List[DownloadTarget]:
        """
        Fetch the catalog and return targets for this platform.

        Mirrors are tried in shuffled order; a failed request, non-2xx
        status, empty body or undecodable document moves on to the next
        mirror.

        Returns:
            Targets sorted newest first, one per version

        Raises:
            CatalogFetchError: If no mirror returned a document
            CatalogParseError: If documents were returned but none could be parsed
            DownloadTargetConversionError: If a catalog entry is malformed
        """
        parse_failures = 0

        for mirror in shuffle_mirrors(self.mirrors, self.rng):
            url = self.index_url(mirror)

            try:
                result = client.fetch(url)
            except DownloadError as e:
                logger.warning(f"Failed fetching {self.name} versions from {url}: {e}")
                continue

            if not result.ok or not result.body:
                logger.warning(
                    f"Failed fetching {self.name} versions from {url} "
                    f"(status {result.status})"
                )
                continue

            try:
                document = json.loads(result.body)
                targets = self.parse_catalog(document, mirror)
            except (ValueError, CatalogParseError) as e:
                logger.warning(f"Failed parsing {self.name} versions from {url}: {e}")
                parse_failures += 1
                continue

            logger.debug(f"Fetched {len(targets)} {self.name} targets from {url}")
            return self._dedupe(sort_by_version(targets))

        if parse_failures:
            raise CatalogParseError(f"Unable to parse {self.name} versions catalog")
        raise CatalogFetchError(f"Unable to fetch {self.name} versions catalog")

    @staticmethod
    def _dedupe(targets: List[DownloadTarget]) -> List[DownloadTarget]:
        unique: List[DownloadTarget] = []
        for target in targets:
            if unique and unique[-1].version == target.version:
                continue
            unique.append(target)
        return unique

    def get_tarball_shasum(self, client: HttpClient, target: DownloadTarget) -> str:
        """
        Fetch the checksum of a target whose catalog entry carries none.

        Raises:
            ShasumNotFoundError: Runtimes with embedded digests have no side channel
        """
        raise ShasumNotFoundError(
            f"{self.name} publishes no checksum for {target.filename}"
        )

    def decompress_target_file(self, archive_path: Path, scratch_dir: Path) -> Path:
        """
        Unpack an archive into a scratch directory.

        A scratch directory that already holds a directory is treated as a
        previous extraction and returned without decompressing again.

        Args:
            archive_path: Downloaded archive
            scratch_dir: Existing directory to extract into

        Returns:
            The top-level directory of the extracted payload

        Raises:
            DirNotExistsError: If scratch_dir is missing
            DecompressorCreationError: If this runtime does not ship the archive's format
            UnzipError: If extraction fails or yields no directory
        """
        scratch_dir = Path(scratch_dir)
        if not scratch_dir.is_dir():
            raise DirNotExistsError(f"Scratch directory does not exist: {scratch_dir}")

        existing = first_dir(scratch_dir)
        if existing is not None:
            logger.info(f"Using cached unpacked {existing.name}")
            return existing

        compression = Compression.from_filename(Path(archive_path).name)
        if compression not in self.supported_compressions:
            raise DecompressorCreationError(
                f"{self.name} archives are not distributed as {compression.value}"
            )

        extract_archive(archive_path, scratch_dir, compression)

        unpacked = first_dir(scratch_dir)
        if unpacked is None:
            raise UnzipError(f"{Path(archive_path).name} contained no top-level directory")

        logger.info(f"Unpacked {unpacked.name}")
        return unpacked

    def __repr__(self) -> str:
        return f"{type(self).__name__}(platform={self.platform})"
