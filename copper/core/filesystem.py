"""
Cross-platform file system utilities for copper.

This module provides the file operations the store and the providers share:
- Archive extraction (tar.xz, tar.gz, zip) with executable bits preserved
- Path validation against directory traversal
- Safe directory and cache-entry removal
"""

import enum
import logging
import os
import shutil
import stat
import sys
import tarfile
import zipfile
from pathlib import Path
from typing import Optional, Union

from copper.core.exceptions import DecompressorCreationError, UnzipError

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Compression Formats
# ============================================================================


class Compression(enum.Enum):
    """Archive formats published by the supported runtimes."""

    TAR_XZ = ".tar.xz"
    TAR_GZ = ".tar.gz"
    ZIP = ".zip"

    @classmethod
    def from_filename(cls, filename: str) -> "Compression":
        """
        Detect compression from an archive file name.

        Raises:
            DecompressorCreationError: If the suffix is not a known format
        """
        name = filename.lower()
        for compression in cls:
            if name.endswith(compression.value):
                return compression
        if name.endswith(".tgz"):
            return cls.TAR_GZ
        raise DecompressorCreationError(f"Unsupported archive format: {filename}")


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        UnzipError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()
    if not member_path.is_relative_to(destination.resolve()):
        raise UnzipError(
            f"Archive member '{path}' attempts directory traversal. "
            "Extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    compression: Optional[Compression] = None,
) -> None:
    """
    Extract an archive into an existing directory.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to
        compression: Archive format; detected from the file name if omitted

    Raises:
        DecompressorCreationError: If the format is not recognized
        UnzipError: If extraction fails or the archive is insecure

    Example:
        >>> extract_archive('node-v22.1.0-linux-x64.tar.xz', '/tmp/copper/node-22.1.0')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if compression is None:
        compression = Compression.from_filename(archive_path.name)

    logger.debug(f"Extracting {archive_path.name} ({compression.name}) to {destination}")

    try:
        if compression is Compression.ZIP:
            _extract_zip(archive_path, destination)
        elif compression is Compression.TAR_GZ:
            _extract_tar(archive_path, destination, "r:gz")
        else:
            _extract_tar(archive_path, destination, "r:xz")
    except UnzipError:
        raise
    except (OSError, EOFError, tarfile.TarError, zipfile.BadZipFile) as e:
        raise UnzipError(f"Failed to extract {archive_path}: {e}") from e


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive, restoring unix permission bits where recorded."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()

        for member in members:
            _validate_archive_path(member.filename, destination)

        for member in members:
            extracted = Path(zf.extract(member, destination))

            # zipfile drops the mode stored in the high 16 bits
            mode = (member.external_attr >> 16) & 0o777
            if mode & 0o111 and not member.is_dir():
                current = extracted.stat().st_mode
                extracted.chmod(current | (mode & 0o111) | stat.S_IRUSR)


def _extract_tar(archive_path: Path, destination: Path, mode: str) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


# ============================================================================
# Directory Helpers
# ============================================================================


def first_dir(path: Union[str, Path]) -> Optional[Path]:
    """
    Return the first sub-directory of path, or None.

    Entries are taken in sorted order so the result is stable.
    """
    path = Path(path)
    for entry in sorted(path.iterdir()):
        if entry.is_dir() and not entry.is_symlink():
            return entry
    return None


def is_empty_directory(path: Union[str, Path]) -> bool:
    """
    Check if a directory is empty.

    Returns:
        True if directory exists and is empty
    """
    path = Path(path)

    if not path.is_dir():
        return False

    return not any(path.iterdir())


def safe_rmtree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree, clearing read-only bits on Windows.

    Raises:
        OSError: If deletion fails
    """
    path = Path(path)

    if not path.exists():
        return

    if IS_WINDOWS:

        def handle_remove_readonly(func, p, exc_info):
            """Error handler for Windows read-only files."""
            if not os.access(p, os.W_OK):
                os.chmod(p, stat.S_IWRITE)
                func(p)
            else:
                raise exc_info[1]

        shutil.rmtree(path, onerror=handle_remove_readonly)
    else:
        shutil.rmtree(path)


def remove_entry(path: Union[str, Path]) -> None:
    """
    Remove a file, link or directory tree.

    Raises:
        OSError: If deletion fails
    """
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        safe_rmtree(path)


__all__ = [
    "Compression",
    "extract_archive",
    "first_dir",
    "is_empty_directory",
    "safe_rmtree",
    "remove_entry",
]
