"""
Directory locations for copper.

Directory Structure:
    Store (~/.copper/ or %USERPROFILE%\\.copper\\):
        - <runtime>/<version>/ : Extracted runtime installations
        - <runtime>/default    : Symlink/junction to the default version
        - config.yaml          : Optional settings file

    Cache (<tmp>/copper/):
        - <archive-filename>   : Downloaded archives, reused while non-empty
        - <runtime>-<version>/ : Extraction scratch directories
"""

import logging
import os
from pathlib import Path

from copper import EXE_NAME
from copper.core.exceptions import UnableToCreateDirError, UnableToOpenDirError

logger = logging.getLogger(__name__)

STORE_DIR_NAME = f".{EXE_NAME}"


def get_store_dir() -> Path:
    """
    Get the platform-specific store directory path.

    Returns:
        Path: The store directory path.
            - Windows: %USERPROFILE%\\.copper
            - Linux/macOS: ~/.copper/

    Raises:
        UnableToOpenDirError: If the home directory cannot be determined.

    Example:
        >>> print(get_store_dir())
        /home/user/.copper  # on Linux
    """
    if os.name == "nt":  # Windows
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise UnableToOpenDirError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine store directory."
            )
        return Path(user_profile) / STORE_DIR_NAME

    try:
        return Path.home() / STORE_DIR_NAME
    except RuntimeError as e:
        raise UnableToOpenDirError(f"Cannot determine home directory: {e}") from e


def get_tmp_root() -> Path:
    """
    Get the system temporary directory.

    Uses TMPDIR on POSIX and TEMP or TMP on Windows, falling back to /tmp or
    C:\\temp when none is set.
    """
    if os.name == "nt":
        for var in ("TEMP", "TMP"):
            value = os.environ.get(var)
            if value:
                return Path(value)
        return Path("C:\\temp")

    value = os.environ.get("TMPDIR")
    if value:
        return Path(value)
    return Path("/tmp")


def get_cache_dir() -> Path:
    """Get the cache directory (``<tmp>/copper``)."""
    return get_tmp_root() / EXE_NAME


def open_or_make_dir(path: Path) -> Path:
    """
    Open a directory, creating it (and parents) if it does not exist.

    Args:
        path: Directory path.

    Returns:
        Path: The directory path.

    Raises:
        UnableToOpenDirError: If the path exists but cannot be opened as a
            directory.
        UnableToCreateDirError: If the directory is missing and cannot be
            created.
    """
    path = Path(path)
    try:
        with os.scandir(path):
            pass
        return path
    except FileNotFoundError:
        pass
    except OSError as e:
        raise UnableToOpenDirError(f"Unable to open directory {path}: {e}") from e

    logger.debug(f"Creating directory {path}")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise UnableToCreateDirError(f"Failed to create directory {path}: {e}") from e
    return path
