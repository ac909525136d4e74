"""
Runtime acquisition pipeline.

This module orchestrates resolving a loose version against a runtime's
catalog, downloading the archive into the cache, verifying it, unpacking it
and committing it to the store, plus the store-only operations built on the
same pieces (listing, switching and removing versions).
"""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from copper.core.download import HttpClient
from copper.core.exceptions import (
    DownloadError,
    IncorrectShasumError,
    NoMatchingTargetError,
    ShasumNotFoundError,
    UnknownRuntimeError,
)
from copper.core.version import VersionRange, is_exact_pin, parse_user_version
from copper.runtimes import RUNTIMES, DownloadTarget, RuntimeProvider, get_provider
from copper.toolchain.store import Installation, Store

logger = logging.getLogger(__name__)


class PipelineState(enum.Enum):
    """Steps of an ``add``."""

    RESOLVING_CATALOG = "resolving catalog"
    MATCHING = "matching"
    DOWNLOADING = "downloading"
    VERIFYING = "verifying"
    DECOMPRESSING = "decompressing"
    COMMITTING = "committing"
    SETTING_DEFAULT = "setting default"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class AddResult:
    """Result of adding a runtime version."""

    runtime: str
    version_string: str
    path: Path
    already_installed: bool
    """Whether the version was in the store before this call"""

    set_as_default: bool
    """Whether this call made the version the default"""


@dataclass
class RemoveResult:
    """Result of removing a runtime version."""

    removed: str
    new_default: Optional[str]
    """Version the default link was moved to, if the removed one was default"""


class AcquisitionPipeline:
    """
    Installs and manages runtime versions.

    ``add`` runs through these steps, reporting each to ``on_state``:
    1. Fetch the catalog (skipped when an installed version is in range)
    2. Pick the highest version inside the requested range
    3. Download the archive, reusing a non-empty cached copy
    4. Verify its SHA-256, truncating the cached copy on mismatch
    5. Unpack into a scratch directory
    6. Move the payload into the store
    7. Make it the default if the runtime has none

    Example:
        >>> with HttpClient() as client:
        ...     pipeline = AcquisitionPipeline(Store(), client)
        ...     result = pipeline.add("node", "22")
        >>> print(f"Installed at: {result.path}")
    """

    def __init__(
        self,
        store: Store,
        client: HttpClient,
        providers: Optional[Mapping[str, RuntimeProvider]] = None,
        on_state: Optional[Callable[[PipelineState], None]] = None,
    ):
        """
        Initialize pipeline.

        Args:
            store: Store to install into
            client: HTTP client for catalogs and archives
            providers: Provider instances by runtime name; runtimes missing
                here are created from the RUNTIMES table on first use
            on_state: Optional callback receiving each PipelineState
        """
        self.store = store
        self.client = client
        self.providers: Dict[str, RuntimeProvider] = dict(providers or {})
        self.on_state = on_state

    def get_provider(self, runtime: str) -> RuntimeProvider:
        """
        Provider for a runtime name.

        Raises:
            UnknownRuntimeError: If the runtime is not supported
        """
        if runtime not in self.providers:
            if runtime not in RUNTIMES:
                raise UnknownRuntimeError(runtime, sorted(set(RUNTIMES) | set(self.providers)))
            self.providers[runtime] = get_provider(runtime)
        return self.providers[runtime]

    def _transition(self, state: PipelineState):
        logger.debug(f"Pipeline state: {state.value}")
        if self.on_state:
            self.on_state(state)

    # ------------------------------------------------------------------
    # add
    # ------------------------------------------------------------------

    def add(self, runtime: str, loose_version: str) -> AddResult:
        """
        Install the highest available version matching a loose version.

        Args:
            runtime: Runtime name
            loose_version: "MAJOR", "MAJOR.MINOR" or "MAJOR.MINOR.PATCH"

        Returns:
            AddResult describing the installation

        Raises:
            UnknownRuntimeError: If the runtime is not supported
            InvalidVersionError: If loose_version cannot be parsed
            CatalogError: If the catalog cannot be fetched or has no match
            DownloadError: If the archive download fails
            ShasumError: If the checksum cannot be obtained or does not match
            DecompressError: If unpacking fails
            StoreError: If the store cannot be updated
        """
        provider = self.get_provider(runtime)
        version_range = parse_user_version(loose_version)

        try:
            installed = self._find_installed(runtime, version_range)
            if installed is not None:
                logger.info(f"{runtime} - {installed.version_string} already installed")
                if not is_exact_pin(loose_version):
                    logger.info(
                        f"Pass a full version to install a newer {runtime} {loose_version} release"
                    )
                self._transition(PipelineState.DONE)
                return AddResult(
                    runtime=runtime,
                    version_string=installed.version_string,
                    path=installed.path,
                    already_installed=True,
                    set_as_default=False,
                )

            self._transition(PipelineState.RESOLVING_CATALOG)
            targets = provider.get_download_targets(self.client)

            self._transition(PipelineState.MATCHING)
            target = self.match_target(targets, version_range)
            if target is None:
                raise NoMatchingTargetError(runtime, loose_version)
            logger.info(f"Resolved {runtime} {loose_version} to {target.version_string}")

            self._transition(PipelineState.DOWNLOADING)
            archive = self.get_target_file(target)

            self._transition(PipelineState.VERIFYING)
            self.verify_target_file(target, archive, provider)

            self._transition(PipelineState.DECOMPRESSING)
            scratch_dir = self.store.prepare_tmp_dir_for_decompression(
                runtime, target.version_string
            )
            out_dir = provider.decompress_target_file(archive, scratch_dir)

            self._transition(PipelineState.COMMITTING)
            path = self.store.save_out_dir(out_dir, runtime, target.version_string)

            set_as_default = False
            if self.store.get_default_version(runtime) is None:
                self._transition(PipelineState.SETTING_DEFAULT)
                self.store.use_as_default(runtime, target.version_string)
                set_as_default = True

            self._transition(PipelineState.DONE)
            return AddResult(
                runtime=runtime,
                version_string=target.version_string,
                path=path,
                already_installed=False,
                set_as_default=set_as_default,
            )
        except Exception:
            self._transition(PipelineState.ABORTED)
            raise

    def _find_installed(
        self, runtime: str, version_range: VersionRange
    ) -> Optional[Installation]:
        if self.store.get_conf_dir(runtime) is None:
            return None
        for installation in self.store.get_conf_installations(runtime):
            if version_range.includes_version(installation.version):
                return installation
        return None

    @staticmethod
    def match_target(
        targets: List[DownloadTarget], version_range: VersionRange
    ) -> Optional[DownloadTarget]:
        """First target inside the range; targets are sorted newest first."""
        for target in targets:
            if version_range.includes_version(target.version):
                return target
        return None

    def get_target_file(self, target: DownloadTarget) -> Path:
        """
        Download a target's archive into the cache.

        A non-empty cached file with the same name is reused as is.

        Returns:
            Path of the archive in the cache

        Raises:
            DownloadError: If the download fails
        """
        path = self.store.cache_file(target.filename)

        if path.is_file() and path.stat().st_size > 0:
            logger.info(f"Using cached file from {path}")
            return path

        logger.info(f"Downloading to: {path}")
        try:
            self.client.download_to(target.tarball_url, path)
        except DownloadError:
            path.unlink(missing_ok=True)
            raise
        return path

    def verify_target_file(
        self,
        target: DownloadTarget,
        path: Path,
        provider: Optional[RuntimeProvider] = None,
    ) -> None:
        """
        Verify a downloaded archive against its SHA-256.

        The expected digest is the target's embedded one, or fetched through
        the provider. On mismatch the cached file is truncated to zero bytes
        so the next attempt downloads it again.

        Raises:
            ShasumError: If the digest cannot be obtained
            IncorrectShasumError: If the archive does not match
        """
        shasum = target.shasum
        if shasum is None:
            if provider is None:
                raise ShasumNotFoundError(f"No shasum known for {target.filename}")
            shasum = provider.get_tarball_shasum(self.client, target)

        with open(path, "r+b") as f:
            actual = self.store.compute_shasum(f)
            if actual != shasum.strip().lower():
                f.truncate(0)
                raise IncorrectShasumError(target.filename, shasum, actual)

        logger.info("Successfully verified shasum")

    # ------------------------------------------------------------------
    # Store operations
    # ------------------------------------------------------------------

    def list_remote(
        self, runtime: str, loose_version: Optional[str] = None
    ) -> List[DownloadTarget]:
        """
        Available versions of a runtime, newest first.

        Args:
            runtime: Runtime name
            loose_version: Optional filter
        """
        provider = self.get_provider(runtime)
        version_range = parse_user_version(loose_version) if loose_version else None

        targets = provider.get_download_targets(self.client)
        if version_range is None:
            return targets
        return [t for t in targets if version_range.includes_version(t.version)]

    def list_installed(
        self, runtime: str, loose_version: Optional[str] = None
    ) -> List[Installation]:
        """
        Installed versions of a runtime, newest first.

        Raises:
            NoConfDirError: If the runtime was never installed
        """
        self.get_provider(runtime)
        version_range = parse_user_version(loose_version) if loose_version else None

        installations = self.store.get_conf_installations(runtime)
        if version_range is None:
            return installations
        return [i for i in installations if version_range.includes_version(i.version)]

    def use(self, runtime: str, loose_version: str) -> Installation:
        """
        Make the highest installed version matching a loose version the default.

        Raises:
            NoConfDirError: If the runtime was never installed
            NoMatchingVersionError: If no installed version matches
        """
        self.get_provider(runtime)
        version_range = parse_user_version(loose_version)
        return self.store.use_as_default_with_range(runtime, version_range)

    def remove(self, runtime: str, version_string: str) -> RemoveResult:
        """
        Delete an installed version.

        When the removed version was the default, the default moves to the
        highest remaining version, or is dropped if none remain.

        Raises:
            NoConfDirError: If the runtime was never installed
            NoVersionDirError: If the version is not installed
        """
        self.get_provider(runtime)
        name = self.store.installed_version_name(runtime, version_string)

        was_default = self.store.get_default_version(runtime) == name
        self.store.delete_version_dir(runtime, name)

        new_default = None
        if was_default:
            self.store.remove_default_link(runtime)
            remaining = self.store.get_conf_installations(runtime)
            if remaining:
                new_default = remaining[0].version_string
                self.store.use_as_default(runtime, new_default)
            else:
                logger.info(f"No {runtime} versions left, default removed")

        return RemoveResult(removed=name, new_default=new_default)
