"""
Platform detection for copper.

Runtimes publish archives per operating system and CPU architecture, each
with its own naming scheme. This module detects the host once and exposes it
in a normalized form that every provider maps to its own names.

Usage:
    from copper.core.platform import detect_platform

    platform_info = detect_platform()
    print(f"Platform string: {platform_info.platform_string()}")
"""

import functools
import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos', 'freebsd', 'netbsd', 'aix')
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm', 'riscv64',
            'ppc64le', 'ppc64', 's390x', 'loong64')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').

        Example:
            >>> PlatformInfo('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Example:
        >>> print(f"Running on {detect_platform()}")
        Running on linux-x64
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name

    Raises:
        RuntimeError: If OS is not supported
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "macos"
    elif system in ("freebsd", "netbsd", "aix"):
        return system
    else:
        raise RuntimeError(f"Unsupported operating system: {system}")


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture name; unknown machines are returned as-is
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    elif machine.startswith("riscv"):
        return "riscv64"
    elif machine in ("ppc64le", "powerpc64le"):
        return "ppc64le"
    elif machine in ("ppc64", "powerpc64"):
        return "ppc64"
    elif machine == "s390x":
        return "s390x"
    elif machine.startswith("loongarch"):
        return "loong64"
    else:
        return machine
