"""
Unit tests for archive extraction and file system helpers.
"""

import os
import sys

import pytest

from copper.core.exceptions import DecompressorCreationError, UnzipError
from copper.core.filesystem import (
    Compression,
    extract_archive,
    first_dir,
    is_empty_directory,
    remove_entry,
    safe_rmtree,
)


# ==============================================================================
# Compression Detection
# ==============================================================================


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("node-v22.1.0-linux-x64.tar.xz", Compression.TAR_XZ),
        ("go1.21.3.linux-amd64.tar.gz", Compression.TAR_GZ),
        ("archive.TGZ", Compression.TAR_GZ),
        ("zig-windows-x86_64-0.14.1.zip", Compression.ZIP),
    ],
)
def test_compression_from_filename(filename, expected):
    assert Compression.from_filename(filename) is expected


def test_compression_unknown_suffix():
    with pytest.raises(DecompressorCreationError):
        Compression.from_filename("node.pkg")


# ==============================================================================
# Extraction
# ==============================================================================


@pytest.mark.unit
def test_extract_tar_xz(tmp_path, make_archive):
    archive = make_archive(
        "node-v22.1.0-linux-x64.tar.xz",
        {
            "node-v22.1.0-linux-x64/bin/node": (b"#!/bin/sh\n", 0o755),
            "node-v22.1.0-linux-x64/README.md": (b"readme", 0o644),
        },
    )
    dest = tmp_path / "out"
    dest.mkdir()

    extract_archive(archive, dest)

    assert (dest / "node-v22.1.0-linux-x64" / "bin" / "node").read_bytes() == b"#!/bin/sh\n"
    assert (dest / "node-v22.1.0-linux-x64" / "README.md").exists()


@pytest.mark.unit
def test_extract_tar_gz(tmp_path, make_archive):
    archive = make_archive("go.tar.gz", {"go/bin/go": (b"go", 0o755)})
    dest = tmp_path / "out"
    dest.mkdir()

    extract_archive(archive, dest, Compression.TAR_GZ)

    assert (dest / "go" / "bin" / "go").exists()


@pytest.mark.unit
@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
def test_extract_zip_restores_exec_bit(tmp_path, make_archive):
    archive = make_archive(
        "zig.zip",
        {
            "zig-linux/zig": (b"\x7fELF", 0o755),
            "zig-linux/LICENSE": (b"MIT", 0o644),
        },
    )
    dest = tmp_path / "out"
    dest.mkdir()

    extract_archive(archive, dest)

    assert os.access(dest / "zig-linux" / "zig", os.X_OK)
    assert not os.access(dest / "zig-linux" / "LICENSE", os.X_OK)


@pytest.mark.unit
def test_extract_blocks_traversal(tmp_path, make_archive):
    archive = make_archive("evil.tar.xz", {"../evil.txt": (b"boom", 0o644)})
    dest = tmp_path / "out"
    dest.mkdir()

    with pytest.raises(UnzipError, match="traversal"):
        extract_archive(archive, dest)

    assert not (tmp_path / "evil.txt").exists()


@pytest.mark.unit
def test_extract_corrupt_archive(tmp_path):
    archive = tmp_path / "broken.tar.xz"
    archive.write_bytes(b"definitely not xz")
    dest = tmp_path / "out"
    dest.mkdir()

    with pytest.raises(UnzipError):
        extract_archive(archive, dest)


@pytest.mark.unit
def test_extract_corrupt_zip(tmp_path):
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"PK not really")
    dest = tmp_path / "out"
    dest.mkdir()

    with pytest.raises(UnzipError):
        extract_archive(archive, dest)


# ==============================================================================
# Directory Helpers
# ==============================================================================


def test_first_dir_sorted_and_skips_files(tmp_path):
    (tmp_path / "a-file").write_text("x")
    (tmp_path / "zeta").mkdir()
    (tmp_path / "beta").mkdir()

    assert first_dir(tmp_path) == tmp_path / "beta"


def test_first_dir_none(tmp_path):
    (tmp_path / "only-file").write_text("x")
    assert first_dir(tmp_path) is None


def test_is_empty_directory(tmp_path):
    assert is_empty_directory(tmp_path)
    (tmp_path / "f").write_text("x")
    assert not is_empty_directory(tmp_path)
    assert not is_empty_directory(tmp_path / "missing")


def test_safe_rmtree(tmp_path):
    tree = tmp_path / "tree"
    (tree / "nested").mkdir(parents=True)
    (tree / "nested" / "file").write_text("x")

    safe_rmtree(tree)
    safe_rmtree(tree)  # missing path is a no-op

    assert not tree.exists()


def test_remove_entry_file_and_dir(tmp_path):
    f = tmp_path / "archive.tar.xz"
    f.write_bytes(b"x")
    d = tmp_path / "node-22.1.0"
    (d / "bin").mkdir(parents=True)

    remove_entry(f)
    remove_entry(d)

    assert not f.exists()
    assert not d.exists()


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
def test_remove_entry_symlink_keeps_target(tmp_path):
    target = tmp_path / "target"
    target.mkdir()
    link = tmp_path / "link"
    link.symlink_to(target)

    remove_entry(link)

    assert not link.exists()
    assert target.is_dir()
