"""YAML settings for copper.

Settings are read from the first of:

1. the file passed with ``--config``
2. the file named by ``COPPER_CONFIG``
3. ``<store>/config.yaml``, if it exists

``COPPER_HOME`` and ``COPPER_CACHE_DIR`` override the store and cache
locations from any file.

Example config.yaml::

    store_dir: ~/runtimes
    timeout: 60
    mirrors:
      node:
        - https://mirrors.example.com/node/dist
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from copper import EXE_NAME
from copper.core.directory import get_store_dir
from copper.core.exceptions import SettingsError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.yaml"

ENV_CONFIG = "COPPER_CONFIG"
ENV_HOME = "COPPER_HOME"
ENV_CACHE_DIR = "COPPER_CACHE_DIR"


@dataclass
class Settings:
    """Effective copper settings."""

    store_dir: Optional[Path] = None  # None: ~/.copper
    cache_dir: Optional[Path] = None  # None: <tmp>/copper
    timeout: int = 30
    user_agent: str = EXE_NAME
    mirrors: Dict[str, List[str]] = field(default_factory=dict)
    release_feed: Optional[str] = None  # None: GitHub latest release
    source: Optional[Path] = None  # file the settings were read from

    def mirrors_for(self, runtime: str) -> Optional[List[str]]:
        """Mirror override for a runtime, or None to use its built-in list."""
        return self.mirrors.get(runtime) or None


def _read_yaml(path: Path) -> Dict[str, Any]:
    logger.debug(f"Loading settings from {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SettingsError(f"Cannot read settings file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(f"{path}: top level must be a mapping")
    return data


def _as_path(value: Any, key: str, source: Path) -> Path:
    if not isinstance(value, str) or not value:
        raise SettingsError(f"{source}: '{key}' must be a path string")
    return Path(value).expanduser()


def parse_settings(data: Dict[str, Any], source: Path) -> Settings:
    """
    Build Settings from a decoded YAML mapping.

    Raises:
        SettingsError: If a value has the wrong type
    """
    settings = Settings(source=source)

    for key, value in data.items():
        if key == "store_dir":
            settings.store_dir = _as_path(value, key, source)
        elif key == "cache_dir":
            settings.cache_dir = _as_path(value, key, source)
        elif key == "timeout":
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise SettingsError(f"{source}: 'timeout' must be a positive integer")
            settings.timeout = value
        elif key == "user_agent":
            if not isinstance(value, str) or not value:
                raise SettingsError(f"{source}: 'user_agent' must be a string")
            settings.user_agent = value
        elif key == "release_feed":
            if not isinstance(value, str) or not value:
                raise SettingsError(f"{source}: 'release_feed' must be a URL")
            settings.release_feed = value
        elif key == "mirrors":
            settings.mirrors = _parse_mirrors(value, source)
        else:
            logger.warning(f"{source}: ignoring unknown setting '{key}'")

    return settings


def _parse_mirrors(value: Any, source: Path) -> Dict[str, List[str]]:
    if not isinstance(value, dict):
        raise SettingsError(f"{source}: 'mirrors' must map runtime names to URL lists")

    mirrors = {}
    for runtime, urls in value.items():
        if not isinstance(urls, list) or not all(isinstance(u, str) and u for u in urls):
            raise SettingsError(f"{source}: mirrors.{runtime} must be a list of URLs")
        mirrors[str(runtime)] = [u.rstrip("/") for u in urls]
    return mirrors


def find_config_file(config_file: Optional[Path] = None) -> Optional[Path]:
    """
    Locate the settings file.

    Returns:
        Path of the file to read, or None when no file applies

    Raises:
        SettingsError: If an explicitly named file does not exist
    """
    explicit = config_file or os.environ.get(ENV_CONFIG)
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise SettingsError(f"Configuration file not found: {path}")
        return path

    home = os.environ.get(ENV_HOME)
    store_dir = Path(home).expanduser() if home else get_store_dir()
    default = store_dir / CONFIG_FILE_NAME
    if default.is_file():
        return default

    logger.debug(f"Config file not found (optional): {default}")
    return None


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """
    Load settings from YAML and the environment.

    Args:
        config_file: Explicit settings file

    Returns:
        Effective Settings

    Raises:
        SettingsError: If the file is missing, unreadable or invalid
    """
    path = find_config_file(config_file)
    settings = parse_settings(_read_yaml(path), path) if path else Settings()

    home = os.environ.get(ENV_HOME)
    if home:
        settings.store_dir = Path(home).expanduser()

    cache_dir = os.environ.get(ENV_CACHE_DIR)
    if cache_dir:
        settings.cache_dir = Path(cache_dir).expanduser()

    return settings
