"""
Unit tests for download module.

Tests HTTP access with mocked network requests.
"""

import hashlib
import io

import pytest
import requests
import responses

from copper.core.download import (
    FetchResult,
    HttpClient,
    StreamingHasher,
    compute_shasum,
    verify_shasum,
)
from copper.core.exceptions import DownloadError

URL = "https://example.com/dist/index.json"
ARCHIVE_URL = "https://example.com/dist/node.tar.xz"


class TestStreamingHasher:
    """Test StreamingHasher class."""

    def test_update_and_finalize(self):
        hasher = StreamingHasher()
        hasher.update(b"hello ")
        hasher.update(b"world")

        assert hasher.finalize() == hashlib.sha256(b"hello world").hexdigest()

    def test_case_insensitive_verify(self):
        hasher = StreamingHasher()
        hasher.update(b"test")

        expected = hashlib.sha256(b"test").hexdigest()
        assert hasher.verify(expected.upper()) is True
        assert hasher.verify("a" * 64) is False


class TestShasum:
    """Test compute_shasum and verify_shasum."""

    def test_compute_rewinds_file(self):
        data = b"x" * 20000
        f = io.BytesIO(data)
        f.seek(100)

        assert compute_shasum(f) == hashlib.sha256(data).hexdigest()
        assert f.tell() == 0

    def test_verify_normalizes_expected(self):
        data = b"payload"
        expected = "  " + hashlib.sha256(data).hexdigest().upper() + "\n"
        assert verify_shasum(io.BytesIO(data), expected) is True

    def test_verify_mismatch(self):
        assert verify_shasum(io.BytesIO(b"payload"), "0" * 64) is False


class TestFetchResult:
    """Test FetchResult."""

    @pytest.mark.parametrize("status,ok", [(200, True), (204, True), (304, False), (404, False)])
    def test_ok(self, status, ok):
        assert FetchResult(status, b"").ok is ok

    def test_text(self):
        assert FetchResult(200, "héllo".encode()).text() == "héllo"


class TestHttpClient:
    """Test HttpClient."""

    @responses.activate
    def test_fetch_returns_status_and_body(self):
        responses.add(responses.GET, URL, body=b"[]", status=200)

        result = HttpClient().fetch(URL)

        assert result.ok
        assert result.body == b"[]"

    @responses.activate
    def test_fetch_sends_headers(self):
        responses.add(responses.GET, URL, body=b"{}")

        HttpClient(user_agent="copper-test").fetch(URL, headers={"Accept": "application/json"})

        sent = responses.calls[0].request.headers
        assert sent["User-Agent"] == "copper-test"
        assert sent["Connection"] == "close"
        assert sent["Accept"] == "application/json"

    @responses.activate
    def test_fetch_returns_error_status(self):
        responses.add(responses.GET, URL, status=404, body=b"not found")

        result = HttpClient().fetch(URL)

        assert not result.ok
        assert result.status == 404

    @responses.activate
    def test_fetch_transport_error(self):
        responses.add(
            responses.GET, URL, body=requests.exceptions.ConnectionError("refused")
        )

        with pytest.raises(DownloadError, match="refused"):
            HttpClient().fetch(URL)

    @responses.activate
    def test_download_to(self, tmp_path):
        content = b"archive-bytes" * 1000
        responses.add(responses.GET, ARCHIVE_URL, body=content, status=200)

        dest = tmp_path / "node.tar.xz"
        result = HttpClient().download_to(ARCHIVE_URL, dest)

        assert result == dest
        assert dest.read_bytes() == content

    @responses.activate
    def test_download_to_error_status(self, tmp_path):
        responses.add(responses.GET, ARCHIVE_URL, status=500)

        dest = tmp_path / "node.tar.xz"
        with pytest.raises(DownloadError, match="500"):
            HttpClient().download_to(ARCHIVE_URL, dest)

        assert not dest.exists()

    @responses.activate
    def test_download_to_transport_error(self, tmp_path):
        responses.add(
            responses.GET, ARCHIVE_URL, body=requests.exceptions.Timeout("timed out")
        )

        with pytest.raises(DownloadError):
            HttpClient().download_to(ARCHIVE_URL, tmp_path / "node.tar.xz")

    def test_context_manager_closes_session(self):
        client = HttpClient()
        with client as c:
            assert c is client
