"""
Core functionality for copper.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_store_dir,
    get_tmp_root,
    get_cache_dir,
    open_or_make_dir,
)

from .platform import (
    PlatformInfo,
    detect_platform,
)

from .version import (
    MAX_COMPONENT,
    SemanticVersion,
    VersionRange,
    parse_user_version,
    compare_version_field,
    sort_by_version,
)

from .exceptions import (
    CopperError,
    ConfigurationError,
    UnknownRuntimeError,
    InvalidVersionError,
    SettingsError,
    CatalogError,
    DownloadError,
    ShasumError,
    DecompressError,
    StoreError,
    StateError,
    UpdateError,
)

__all__ = [
    # Directory management
    "get_store_dir",
    "get_tmp_root",
    "get_cache_dir",
    "open_or_make_dir",
    # Platform detection
    "PlatformInfo",
    "detect_platform",
    # Versions
    "MAX_COMPONENT",
    "SemanticVersion",
    "VersionRange",
    "parse_user_version",
    "compare_version_field",
    "sort_by_version",
    # Exceptions
    "CopperError",
    "ConfigurationError",
    "UnknownRuntimeError",
    "InvalidVersionError",
    "SettingsError",
    "CatalogError",
    "DownloadError",
    "ShasumError",
    "DecompressError",
    "StoreError",
    "StateError",
    "UpdateError",
]
