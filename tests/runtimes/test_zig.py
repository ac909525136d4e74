"""
Unit tests for the Zig provider.
"""

import pytest
import responses

from copper.core.download import HttpClient
from copper.core.exceptions import CatalogParseError, DownloadTargetConversionError
from copper.core.platform import PlatformInfo
from copper.runtimes.zig import MIRRORS, ZigProvider

MIRROR = "https://ziglang.org/download"

INDEX = {
    "master": {
        "version": "0.16.0-dev.1+abc",
        "date": "2025-06-01",
        "x86_64-linux": {
            "tarball": "https://ziglang.org/builds/zig-x86_64-linux-0.16.0-dev.1+abc.tar.xz",
            "shasum": "aa" * 32,
            "size": "50000000",
        },
    },
    "0.14.1": {
        "date": "2025-05-21",
        "x86_64-linux": {
            "tarball": "https://ziglang.org/download/0.14.1/zig-x86_64-linux-0.14.1.tar.xz",
            "shasum": "bb" * 32,
            "size": "49000000",
        },
        "aarch64-macos": {
            "tarball": "https://ziglang.org/download/0.14.1/zig-aarch64-macos-0.14.1.tar.xz",
            "shasum": "cc" * 32,
            "size": "45000000",
        },
    },
    "0.6.0": {
        "aarch64-macos": {
            "tarball": "https://ziglang.org/download/0.6.0/zig-macos.tar.xz",
            "shasum": "dd" * 32,
        },
    },
}


@pytest.fixture
def zig(platform_linux):
    return ZigProvider(platform=platform_linux, mirrors=[MIRROR])


def test_default_mirrors():
    provider = ZigProvider(platform=PlatformInfo("linux", "x64"))
    assert provider.mirrors == list(MIRRORS)
    assert provider.bin_subpath == ""


@pytest.mark.parametrize(
    "info,expected",
    [
        (PlatformInfo("linux", "x64"), "x86_64-linux"),
        (PlatformInfo("macos", "arm64"), "aarch64-macos"),
        (PlatformInfo("windows", "x64"), "x86_64-windows"),
        (PlatformInfo("linux", "riscv64"), "riscv64-linux"),
        (PlatformInfo("linux", "ppc64le"), "powerpc64le-linux"),
    ],
)
def test_target_key(info, expected):
    assert ZigProvider(platform=info).target_key() == expected


def test_target_key_unsupported():
    with pytest.raises(DownloadTargetConversionError):
        ZigProvider(platform=PlatformInfo("aix", "ppc64")).target_key()


def test_parse_catalog(zig):
    targets = {t.version_string: t for t in zig.parse_catalog(INDEX, MIRROR)}

    assert set(targets) == {"0.16.0-dev.1+abc", "0.14.1"}
    release = targets["0.14.1"]
    assert release.shasum == "bb" * 32
    assert release.tarball_url.endswith("/0.14.1/zig-x86_64-linux-0.14.1.tar.xz")
    assert release.filename == "zig-x86_64-linux-0.14.1.tar.xz"


def test_master_uses_embedded_version(zig):
    targets = zig.parse_catalog(INDEX, MIRROR)
    master = next(t for t in targets if t.version.prerelease)

    assert master.version_string == "0.16.0-dev.1+abc"
    assert master.version.build == "abc"


def test_not_a_map(zig):
    with pytest.raises(CatalogParseError):
        zig.parse_catalog([], MIRROR)


def test_build_without_shasum(zig):
    document = {"0.14.1": {"x86_64-linux": {"tarball": "https://x/zig.tar.xz"}}}

    with pytest.raises(DownloadTargetConversionError, match="no shasum"):
        zig.parse_catalog(document, MIRROR)


def test_release_not_an_object(zig):
    with pytest.raises(DownloadTargetConversionError):
        zig.parse_catalog({"0.14.1": "broken"}, MIRROR)


@responses.activate
def test_master_sorts_above_releases(zig):
    responses.add(responses.GET, f"{MIRROR}/index.json", json=INDEX)

    targets = zig.get_download_targets(HttpClient())

    assert [t.version_string for t in targets] == ["0.16.0-dev.1+abc", "0.14.1"]
