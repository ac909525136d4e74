"""
Pytest configuration and shared fixtures for copper tests.
"""

import io
import logging
import tarfile
import zipfile
from pathlib import Path

import pytest

from copper.core.platform import PlatformInfo
from copper.toolchain.store import Store


# ============================================================================
# Environment Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch) -> Path:
    """Point HOME and the copper variables away from the real user."""
    fake_home = tmp_path_factory.mktemp("home")

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))
    for var in ("COPPER_CONFIG", "COPPER_HOME", "COPPER_CACHE_DIR"):
        monkeypatch.delenv(var, raising=False)

    return fake_home


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the root logger changes made by CLI.run."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def platform_linux() -> PlatformInfo:
    """Linux x64 host."""
    return PlatformInfo(os="linux", arch="x64")


@pytest.fixture
def platform_macos() -> PlatformInfo:
    """macOS arm64 host."""
    return PlatformInfo(os="macos", arch="arm64")


@pytest.fixture
def platform_windows() -> PlatformInfo:
    """Windows x64 host."""
    return PlatformInfo(os="windows", arch="x64")


@pytest.fixture
def store(tmp_path: Path) -> Store:
    """Empty store with its own cache directory."""
    return Store(store_dir=tmp_path / "store", tmp_dir=tmp_path / "cache")


@pytest.fixture
def make_archive(tmp_path: Path):
    """
    Build an archive from ``{member: (data, mode)}``.

    The format follows the file name suffix (.zip, .tar.gz or .tar.xz).
    """

    def _make(name, files, directory=None):
        path = Path(directory or tmp_path) / name

        if name.endswith(".zip"):
            with zipfile.ZipFile(path, "w") as zf:
                for member, (data, mode) in files.items():
                    info = zipfile.ZipInfo(member)
                    info.external_attr = mode << 16
                    zf.writestr(info, data)
        else:
            tar_mode = "w:gz" if name.endswith(".tar.gz") else "w:xz"
            with tarfile.open(path, tar_mode) as tar:
                for member, (data, mode) in files.items():
                    info = tarfile.TarInfo(member)
                    info.size = len(data)
                    info.mode = mode
                    tar.addfile(info, io.BytesIO(data))

        return path

    return _make
