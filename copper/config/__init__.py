"""
Configuration for copper.

Settings come from an optional YAML file and environment overrides.
"""

from .settings import (
    CONFIG_FILE_NAME,
    Settings,
    find_config_file,
    load_settings,
    parse_settings,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "Settings",
    "find_config_file",
    "load_settings",
    "parse_settings",
]
