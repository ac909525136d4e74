"""
Shared utilities for CLI commands.

Builds the objects every command needs (settings, store, HTTP client,
pipeline) the same way, and prints results.
"""

import logging
import sys

from copper.config import Settings, load_settings
from copper.core.download import HttpClient
from copper.runtimes import RUNTIMES, get_provider
from copper.toolchain.pipeline import AcquisitionPipeline
from copper.toolchain.store import Store

logger = logging.getLogger(__name__)


# ============================================================================
# Command Context
# ============================================================================


def get_settings(args) -> Settings:
    """Settings loaded by the CLI, or loaded now from ``args.config``."""
    settings = getattr(args, "settings", None)
    if settings is None:
        settings = load_settings(getattr(args, "config", None))
        args.settings = settings
    return settings


def open_store(settings: Settings) -> Store:
    """Open the store at the configured locations."""
    return Store(store_dir=settings.store_dir, tmp_dir=settings.cache_dir)


def create_client(settings: Settings) -> HttpClient:
    """HTTP client with the configured timeout and user agent."""
    return HttpClient(timeout=settings.timeout, user_agent=settings.user_agent)


def create_pipeline(
    store: Store, client: HttpClient, settings: Settings
) -> AcquisitionPipeline:
    """Pipeline whose providers use the configured mirrors."""
    providers = {
        name: get_provider(name, mirrors=settings.mirrors_for(name))
        for name in RUNTIMES
    }
    return AcquisitionPipeline(store, client, providers=providers)


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for Windows console.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    file = file or sys.stdout
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        encoding = getattr(file, "encoding", None) or "ascii"
        print(message.encode(encoding, errors="replace").decode(encoding), file=file)
