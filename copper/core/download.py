"""
HTTP access and checksum helpers.

This module provides the single network capability copper needs:
- Buffered GET returning status and body (catalogs, checksum manifests, release feed)
- Streaming download of an archive straight into the cache
- Chunked SHA-256 over an open archive file

No retries happen here; providers fall back across mirrors instead.
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Optional

import requests
from requests.exceptions import RequestException

from copper import EXE_NAME
from copper.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass
class FetchResult:
    """Response of a buffered GET."""

    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        """True for a 2xx status."""
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpClient:
    """
    Thin wrapper around a requests session.

    One client is created per invocation. Every request carries
    ``Connection: close`` and the copper user agent.

    Example:
        >>> client = HttpClient(timeout=10)
        >>> result = client.fetch("https://nodejs.org/dist/index.json")
        >>> result.ok
        True
    """

    def __init__(
        self,
        timeout: int = 30,
        user_agent: str = EXE_NAME,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Connect/read timeout in seconds
            user_agent: Value of the User-Agent header
            session: Optional pre-built session (for testing)
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": user_agent, "Connection": "close"}
        )

    def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        """
        GET a URL and buffer the whole body.

        Non-2xx responses are returned, not raised; callers decide what a
        failed status means for them.

        Args:
            url: URL to fetch
            headers: Extra request headers

        Returns:
            FetchResult with status code and body

        Raises:
            DownloadError: On transport failure (DNS, connect, timeout, ...)
        """
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(
                url, headers=headers, timeout=self.timeout, allow_redirects=True
            )
        except RequestException as e:
            raise DownloadError(f"Request to {url} failed: {e}") from e

        logger.debug(f"GET {url} -> {response.status_code} ({len(response.content)} bytes)")
        return FetchResult(status=response.status_code, body=response.content)

    def download_to(self, url: str, destination: Path) -> Path:
        """
        Stream a URL into a file.

        Args:
            url: URL to download from
            destination: File to write; truncated first

        Returns:
            Path to downloaded file

        Raises:
            DownloadError: On non-2xx status or transport failure
        """
        destination = Path(destination)
        logger.info(f"Downloading from {url}")

        try:
            with self.session.get(
                url, stream=True, timeout=self.timeout, allow_redirects=True
            ) as response:
                if not 200 <= response.status_code < 300:
                    raise DownloadError(
                        f"Download of {url} failed with status {response.status_code}"
                    )

                downloaded = 0
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
                            downloaded += len(chunk)
        except RequestException as e:
            logger.error(f"Error during download: {e}")
            raise DownloadError(f"Download of {url} failed: {e}") from e

        logger.debug(f"Download complete: {destination} ({downloaded} bytes)")
        return destination

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class StreamingHasher:
    """Compute a SHA-256 digest incrementally."""

    def __init__(self):
        self.hasher = hashlib.sha256()

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def finalize(self) -> str:
        """Get final hash value as lowercase hex string."""
        return self.hasher.hexdigest()

    def verify(self, expected_hash: str) -> bool:
        """Check if computed hash matches expected value (case-insensitive)."""
        return self.finalize() == expected_hash.lower()


def compute_shasum(file: BinaryIO) -> str:
    """
    SHA-256 of an open binary file, read in chunks from the start.

    The file position is rewound to the start afterwards so the caller can
    keep using the handle.

    Args:
        file: File object opened in binary mode

    Returns:
        Lowercase hex digest (64 characters)
    """
    file.seek(0)
    hasher = StreamingHasher()
    while chunk := file.read(CHUNK_SIZE):
        hasher.update(chunk)
    file.seek(0)
    return hasher.finalize()


def verify_shasum(file: BinaryIO, expected: str) -> bool:
    """
    Compare the SHA-256 of an open binary file against a hex digest.

    Args:
        file: File object opened in binary mode
        expected: Expected digest; compared in lowercase

    Returns:
        True if checksum matches, False otherwise
    """
    return compute_shasum(file) == expected.strip().lower()
