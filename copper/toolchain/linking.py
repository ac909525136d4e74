"""
Default-version links.

Each runtime directory in the store holds a ``default`` entry pointing at one
of its version directories. On Unix-like systems this is a relative symlink
(``default -> 22.1.0``) so the store can be moved; on Windows it is a
directory junction, which needs no elevated privileges.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from ..core.platform import detect_platform

logger = logging.getLogger(__name__)

FILE_ATTRIBUTE_REPARSE_POINT = 0x400


class DefaultLinkManager:
    """Creates, resolves and removes default-version links."""

    def __init__(self, platform=None):
        """
        Initialize link manager.

        Args:
            platform: PlatformInfo instance (auto-detected if None)
        """
        self.platform = platform or detect_platform()
        self._use_junctions = self.platform.os == "windows"

    def create_link(self, link_path: Path, target_path: Path) -> None:
        """
        Create symlink (Unix) or junction (Windows).

        The link must not exist yet; callers remove the previous one first.

        Args:
            link_path: Path where link should be created
            target_path: Existing directory the link should point to

        Raises:
            FileNotFoundError: If target doesn't exist
            OSError: If link creation fails
        """
        link_path = Path(link_path)
        target_path = Path(target_path)

        if not target_path.is_dir():
            raise FileNotFoundError(f"Target does not exist: {target_path}")

        if self._use_junctions:
            self._create_junction(link_path, target_path.resolve())
        else:
            self._create_symlink(link_path, target_path)

    def _create_symlink(self, link_path: Path, target_path: Path) -> None:
        """Create symbolic link, relative when both live in one directory."""
        if link_path.parent.resolve() == target_path.parent.resolve():
            target = target_path.name
        else:
            target = str(target_path.resolve())

        os.symlink(target, link_path, target_is_directory=True)
        logger.debug(f"Created symlink: {link_path} -> {target}")

    def _create_junction(self, link_path: Path, target_path: Path) -> None:
        """Create directory junction (Windows)."""
        try:
            import _winapi

            _winapi.CreateJunction(str(target_path), str(link_path))  # type: ignore
            logger.debug(f"Created junction: {link_path} -> {target_path}")
            return
        except (ImportError, AttributeError, OSError) as e:
            logger.debug(f"_winapi.CreateJunction failed: {e}, trying mklink")

        result = subprocess.run(
            ["cmd", "/c", "mklink", "/J", str(link_path), str(target_path)],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise OSError(f"Failed to create junction: {result.stderr.strip()}")
        logger.debug(f"Created junction: {link_path} -> {target_path}")

    def is_link(self, path: Path) -> bool:
        """Check if path is a symlink or junction, dangling or not."""
        path = Path(path)
        return path.is_symlink() or self._is_junction(path)

    def resolve_link(self, link_path: Path) -> Optional[Path]:
        """
        Resolve link to absolute target path.

        Args:
            link_path: Path to link

        Returns:
            Absolute path to link target, or None if not a link
        """
        link_path = Path(link_path)
        if not self.is_link(link_path):
            return None

        target_str = os.readlink(link_path)
        for prefix in ("\\\\?\\", "//?/"):
            if target_str.startswith(prefix):
                target_str = target_str[len(prefix):]

        target = Path(target_str)
        if not target.is_absolute():
            target = link_path.parent / target
        return target.resolve()

    def remove_link(self, link_path: Path) -> bool:
        """
        Remove symlink/junction.

        Args:
            link_path: Path to link to remove

        Returns:
            True if a link was removed, False if there was none

        Raises:
            OSError: If removal fails
        """
        link_path = Path(link_path)
        if not self.is_link(link_path):
            return False

        if self._is_junction(link_path):
            # Junctions are removed with rmdir, not unlink
            os.rmdir(link_path)
        else:
            link_path.unlink()

        logger.debug(f"Removed link: {link_path}")
        return True

    def _is_junction(self, path: Path) -> bool:
        """Check if path is a Windows directory junction."""
        if not self._use_junctions:
            return False

        try:
            st = os.stat(path, follow_symlinks=False)
        except OSError:
            return False

        attributes = getattr(st, "st_file_attributes", 0)
        return bool(attributes & FILE_ATTRIBUTE_REPARSE_POINT)
