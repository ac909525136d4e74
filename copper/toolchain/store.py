"""
Filesystem-backed registry of installed runtime versions.

Layout:
    <store>/<runtime>/<version>/   extracted payload, named by version string
    <store>/<runtime>/default      link to the default version directory
    <cache>/<archive-filename>     downloaded archives
    <cache>/<runtime>-<version>/   extraction scratch directories

Nothing here is cached in memory: every query reads the disk again.
Concurrent invocations are not coordinated; two runs switching the default
at the same time can race between removing and recreating the link.
"""

import errno
import logging
import os
import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import BinaryIO, List, Optional

from ..core import download
from ..core.directory import get_cache_dir, get_store_dir, open_or_make_dir
from ..core.exceptions import (
    InvalidVersionError,
    NoConfDirError,
    NoMatchingVersionError,
    NoVersionDirError,
    StoreError,
    UnableToOpenDirError,
)
from ..core.filesystem import remove_entry, safe_rmtree
from ..core.version import SemanticVersion, VersionRange, sort_by_version
from .linking import DefaultLinkManager

logger = logging.getLogger(__name__)

DEFAULT_LINK = "default"


@dataclass
class Installation:
    """An installed version of a runtime."""

    version_string: str
    version: SemanticVersion
    is_default: bool
    path: Path


def _open_dir(path: Path) -> Optional[Path]:
    """Return path if it is an openable directory, None if it does not exist."""
    try:
        with os.scandir(path):
            pass
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as e:
        raise UnableToOpenDirError(f"Unable to open directory {path}: {e}") from e
    return path


class Store:
    """
    Installed versions and the download cache.

    Example:
        >>> store = Store()
        >>> [i.version_string for i in store.get_conf_installations("node")]
        ['22.1.0', '20.12.2']
    """

    def __init__(
        self,
        store_dir: Optional[Path] = None,
        tmp_dir: Optional[Path] = None,
        link_manager: Optional[DefaultLinkManager] = None,
    ):
        """
        Open the store and cache roots, creating them if missing.

        Args:
            store_dir: Store root (default: ~/.copper)
            tmp_dir: Cache root (default: <tmp>/copper)
            link_manager: Link manager for default links

        Raises:
            UnableToOpenDirError: If a root exists but cannot be opened
            UnableToCreateDirError: If a root cannot be created
        """
        self.store_dir = open_or_make_dir(Path(store_dir) if store_dir else get_store_dir())
        self.tmp_dir = open_or_make_dir(Path(tmp_dir) if tmp_dir else get_cache_dir())
        self.link_manager = link_manager or DefaultLinkManager()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_conf_dir(self, runtime: str) -> Optional[Path]:
        """Directory of a runtime, or None if it was never installed."""
        return _open_dir(self.store_dir / runtime)

    def get_conf_version_dir(self, runtime: str, version: str) -> Optional[Path]:
        """Directory of an installed version, or None if not installed."""
        conf_dir = self.get_conf_dir(runtime)
        if conf_dir is None:
            return None
        return _open_dir(conf_dir / version)

    def _default_link(self, runtime: str) -> Path:
        return self.store_dir / runtime / DEFAULT_LINK

    def _default_target(self, runtime: str) -> Optional[Path]:
        target = self.link_manager.resolve_link(self._default_link(runtime))
        if target is None or not target.is_dir():
            return None
        return target

    def get_default_version(self, runtime: str) -> Optional[str]:
        """Version string the default link points at, or None."""
        target = self._default_target(runtime)
        return target.name if target is not None else None

    def get_conf_installations(self, runtime: str) -> List[Installation]:
        """
        List installed versions of a runtime, newest first.

        Entries whose name is not a version are logged and skipped.

        Raises:
            NoConfDirError: If the runtime was never installed
        """
        conf_dir = self.get_conf_dir(runtime)
        if conf_dir is None:
            raise NoConfDirError(runtime)

        default_target = self._default_target(runtime)

        installations = []
        for entry in conf_dir.iterdir():
            if entry.name == DEFAULT_LINK or entry.name.startswith("."):
                continue
            if self.link_manager.is_link(entry):
                continue
            if not entry.is_dir():
                continue

            try:
                version = SemanticVersion.parse(entry.name)
            except InvalidVersionError:
                logger.warning(f"Skipping {entry}: not a version directory")
                continue

            installations.append(
                Installation(
                    version_string=entry.name,
                    version=version,
                    is_default=default_target is not None
                    and entry.resolve() == default_target,
                    path=entry,
                )
            )

        return sort_by_version(installations)

    def installed_runtimes(self) -> List[str]:
        """Names of runtime directories present in the store."""
        return sorted(
            entry.name
            for entry in self.store_dir.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )

    # ------------------------------------------------------------------
    # Default version
    # ------------------------------------------------------------------

    def use_as_default(self, runtime: str, version: str) -> Path:
        """
        Point the runtime's default link at an installed version.

        Any previous link is removed first. The switch is not atomic.

        Returns:
            The version directory now used as default

        Raises:
            NoConfDirError: If the runtime was never installed
            NoVersionDirError: If the version is not installed
            StoreError: If the link cannot be created
        """
        if self.get_conf_dir(runtime) is None:
            raise NoConfDirError(runtime)

        version_dir = self.get_conf_version_dir(runtime, version)
        if version_dir is None:
            raise NoVersionDirError(runtime, version)

        self.remove_default_link(runtime)

        link = self._default_link(runtime)
        try:
            self.link_manager.create_link(link, version_dir)
        except OSError as e:
            raise StoreError(f"Failed to link {link} to {version_dir}: {e}") from e

        logger.info(f"Using {runtime} - {version} as default")
        return version_dir

    def use_as_default_with_range(
        self, runtime: str, version_range: VersionRange
    ) -> Installation:
        """
        Make the highest installed version inside a range the default.

        Raises:
            NoConfDirError: If the runtime was never installed
            NoMatchingVersionError: If no installed version is in range
        """
        for installation in self.get_conf_installations(runtime):
            if version_range.includes_version(installation.version):
                self.use_as_default(runtime, installation.version_string)
                return replace(installation, is_default=True)

        raise NoMatchingVersionError(runtime, str(version_range))

    def remove_default_link(self, runtime: str) -> bool:
        """
        Remove the runtime's default link. Best-effort.

        Returns:
            True if a link was removed
        """
        link = self._default_link(runtime)
        try:
            removed = self.link_manager.remove_link(link)
        except OSError as e:
            logger.warning(f"Failed to remove default link {link}: {e}")
            return False

        if removed:
            logger.debug(f"Removed default link for {runtime}")
        return removed

    # ------------------------------------------------------------------
    # Installing and removing
    # ------------------------------------------------------------------

    def cache_file(self, filename: str) -> Path:
        """Path of a downloaded archive in the cache."""
        return self.tmp_dir / filename

    def prepare_tmp_dir_for_decompression(self, runtime: str, version: str) -> Path:
        """Open or create the scratch directory ``<cache>/<runtime>-<version>``."""
        return open_or_make_dir(self.tmp_dir / f"{runtime}-{version}")

    def save_out_dir(self, out_dir: Path, runtime: str, version: str) -> Path:
        """
        Move an extracted payload into the store.

        A same-device rename is used when possible. Across devices the payload
        is copied to a hidden sibling ``.<version>.partial`` first and renamed
        into place; a failed copy leaves no version directory behind.

        Args:
            out_dir: Top-level directory of the extracted archive
            runtime: Runtime name
            version: Version string, used as the directory name

        Returns:
            The new version directory

        Raises:
            StoreError: If the version directory exists or the move fails
        """
        conf_dir = open_or_make_dir(self.store_dir / runtime)
        destination = conf_dir / version

        if destination.exists() or destination.is_symlink():
            raise StoreError(f"{destination} already exists")

        try:
            os.rename(out_dir, destination)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise StoreError(f"Failed to move {out_dir} to {destination}: {e}") from e
            self._copy_into_place(out_dir, destination)

        logger.info(f"Saved {runtime} - {version} to {destination}")
        return destination

    def _copy_into_place(self, out_dir: Path, destination: Path) -> None:
        partial = destination.with_name(f".{destination.name}.partial")
        logger.debug(f"{out_dir} is on another device, copying through {partial}")

        try:
            safe_rmtree(partial)
            shutil.copytree(out_dir, partial, symlinks=True)
            os.rename(partial, destination)
        except OSError as e:
            try:
                safe_rmtree(partial)
            except OSError as cleanup_error:
                logger.warning(f"Failed to remove {partial}: {cleanup_error}")
            raise StoreError(f"Failed to copy {out_dir} to {destination}: {e}") from e

        try:
            safe_rmtree(out_dir)
        except OSError as e:
            logger.warning(f"Failed to remove {out_dir}: {e}")

    def installed_version_name(self, runtime: str, version: str) -> str:
        """
        Directory name an installed version is stored under.

        Trailing path separators are dropped. Anything else that is not a
        plain version, such as ``..`` or ``default``, is rejected.

        Raises:
            NoVersionDirError: If version cannot name a version directory
        """
        name = version.rstrip("/\\")
        if name == DEFAULT_LINK:
            raise NoVersionDirError(runtime, version)
        try:
            SemanticVersion.parse(name)
        except InvalidVersionError:
            raise NoVersionDirError(runtime, version) from None
        return name

    def delete_version_dir(self, runtime: str, version: str) -> Path:
        """
        Delete an installed version.

        Raises:
            NoConfDirError: If the runtime was never installed
            NoVersionDirError: If version does not name an installed version
        """
        name = self.installed_version_name(runtime, version)

        conf_dir = self.get_conf_dir(runtime)
        if conf_dir is None:
            raise NoConfDirError(runtime)

        version_dir = conf_dir / name
        if self.link_manager.is_link(version_dir) or _open_dir(version_dir) is None:
            raise NoVersionDirError(runtime, version)

        safe_rmtree(version_dir)
        logger.info(f"Removed {runtime} - {name}")
        return version_dir

    def clear_tmpdir(self) -> int:
        """
        Delete every entry in the cache. Best-effort.

        Returns:
            Number of entries removed
        """
        removed = 0
        for entry in self.tmp_dir.iterdir():
            try:
                remove_entry(entry)
                removed += 1
            except OSError as e:
                logger.warning(f"Failed to remove {entry}: {e}")

        logger.info(f"Removed {removed} cached entries from {self.tmp_dir}")
        return removed

    # ------------------------------------------------------------------
    # Checksums
    # ------------------------------------------------------------------

    @staticmethod
    def compute_shasum(file: BinaryIO) -> str:
        """SHA-256 hex digest of an open binary file."""
        return download.compute_shasum(file)

    @staticmethod
    def verify_shasum(file: BinaryIO, expected: str) -> bool:
        """Compare an open binary file against an expected SHA-256 hex digest."""
        return download.verify_shasum(file, expected)
