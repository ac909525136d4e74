"""
Unit tests for the Go provider.
"""

import pytest
import responses

from copper.core.download import HttpClient
from copper.core.exceptions import (
    CatalogParseError,
    DownloadTargetConversionError,
    InvalidVersionError,
)
from copper.core.platform import PlatformInfo
from copper.runtimes.go import GoProvider, go_version_to_semver

MIRROR = "https://go.dev/dl"


def release(version, *files):
    return {"version": version, "stable": True, "files": list(files)}


def archive(filename, os_name, arch, sha="ee" * 32, kind="archive"):
    return {"filename": filename, "os": os_name, "arch": arch, "sha256": sha, "kind": kind}


INDEX = [
    release(
        "go1.21.3",
        archive("go1.21.3.src.tar.gz", "", "", kind="source"),
        archive("go1.21.3.linux-amd64.tar.gz", "linux", "amd64", sha="11" * 32),
        archive("go1.21.3.darwin-arm64.pkg", "darwin", "arm64", kind="installer"),
        archive("go1.21.3.darwin-arm64.tar.gz", "darwin", "arm64", sha="22" * 32),
    ),
    release(
        "go1.22rc1",
        archive("go1.22rc1.linux-amd64.tar.gz", "linux", "amd64"),
    ),
    release(
        "go1.4",
        archive("go1.4.darwin-amd64-osx10.8.tar.gz", "darwin", "amd64"),
    ),
]


@pytest.fixture
def go(platform_linux):
    return GoProvider(platform=platform_linux)


@pytest.mark.parametrize(
    "go_version,expected",
    [
        ("go1.21.3", "1.21.3"),
        ("go1.21.0", "1.21.0"),
        ("go1.21rc2", "1.21.0-rc2"),
        ("go1.9beta1", "1.9.0-beta1"),
        ("go1.18", "1.18.0"),
        ("go1", "1.0.0"),
    ],
)
def test_go_version_to_semver(go_version, expected):
    assert go_version_to_semver(go_version) == expected


@pytest.mark.parametrize("go_version", ["1.21.3", "gox", "go1.x.1", "go"])
def test_go_version_to_semver_invalid(go_version):
    with pytest.raises(InvalidVersionError):
        go_version_to_semver(go_version)


def test_index_url(go):
    assert go.index_url(MIRROR) == "https://go.dev/dl/?mode=json&include=all"
    assert go.bin_subpath == "bin"


def test_parse_catalog_picks_platform_archive(go):
    targets = {t.version_string: t for t in go.parse_catalog(INDEX, MIRROR)}

    assert set(targets) == {"1.21.3", "1.22.0-rc1"}
    target = targets["1.21.3"]
    assert target.tarball_url == "https://go.dev/dl/go1.21.3.linux-amd64.tar.gz"
    assert target.shasum == "11" * 32


def test_parse_catalog_macos(platform_macos):
    targets = GoProvider(platform=platform_macos).parse_catalog(INDEX, MIRROR)

    assert [t.filename for t in targets] == ["go1.21.3.darwin-arm64.tar.gz"]
    assert targets[0].shasum == "22" * 32


def test_parse_catalog_not_a_list(go):
    with pytest.raises(CatalogParseError):
        go.parse_catalog({}, MIRROR)


def test_missing_files(go):
    with pytest.raises(DownloadTargetConversionError):
        go.parse_catalog([{"version": "go1.21.3"}], MIRROR)


def test_missing_sha256(go):
    document = [release("go1.21.3", archive("go1.21.3.linux-amd64.tar.gz", "linux", "amd64", sha=""))]

    with pytest.raises(DownloadTargetConversionError, match="sha256"):
        go.parse_catalog(document, MIRROR)


def test_invalid_version(go):
    with pytest.raises(DownloadTargetConversionError):
        go.parse_catalog([release("weekly.2011-01-01")], MIRROR)


def test_unsupported_platform():
    with pytest.raises(DownloadTargetConversionError):
        GoProvider(platform=PlatformInfo("windows", "mips")).parse_catalog(INDEX, MIRROR)


@responses.activate
def test_download_targets(go):
    responses.add(responses.GET, go.index_url(MIRROR), json=INDEX)

    targets = go.get_download_targets(HttpClient())

    assert [t.version_string for t in targets] == ["1.22.0-rc1", "1.21.3"]
