"""Streams a resolved image back to the caller with retry on connect."""

import logging
import mimetypes
import time
from dataclasses import dataclass
from typing import Iterator, Optional
from urllib.parse import urlparse

import requests

from . import LOGGER_NAME
from .config import DownloadConfig
from .exceptions import DownloadError

logger = logging.getLogger(LOGGER_NAME)

MIME_TO_EXT = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/heic": ".heic",
}

CHUNK_SIZE = 8192


@dataclass
class DownloadedImage:
    """An open image stream plus the headers to send with it."""
    chunks: Iterator[bytes]
    content_type: str
    filename: str
    content_length: Optional[int] = None


class ImageDownloader:
    """Fetches image bytes from the CDN without touching disk."""

    def __init__(
        self,
        config: Optional[DownloadConfig] = None,
        session: Optional[requests.Session] = None,
        max_retries: int = 3,
    ):
        config = config or DownloadConfig()
        self.timeout = config.timeout
        self.max_size = config.max_file_size_mb * 1024 * 1024
        self.max_retries = max_retries
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                          "AppleWebKit/537.36 (KHTML, like Gecko) "
                          "Chrome/120.0.0.0 Safari/537.36",
            "Accept": "image/*,*/*",
        })
        return session

    def open(self, url: str) -> DownloadedImage:
        """Start streaming url. Raises DownloadError if it cannot be fetched."""
        response = self._open_with_retry(url)

        content_length = response.headers.get("Content-Length")
        size = int(content_length) if content_length and content_length.isdigit() else None
        if size is not None and size > self.max_size:
            response.close()
            raise DownloadError(f"File too large: {size / 1024 / 1024:.1f}MB")

        content_type = (response.headers.get("Content-Type") or "image/jpeg").split(";")[0].strip()
        ext = self._get_extension(url, content_type)
        filename = f"instagram-image-{int(time.time() * 1000)}{ext}"

        return DownloadedImage(
            chunks=self._iter_chunks(response, url),
            content_type=content_type,
            filename=filename,
            content_length=size,
        )

    def _open_with_retry(self, url: str) -> requests.Response:
        """Open the stream with exponential backoff retry."""
        last_error = None

        for attempt in range(self.max_retries):
            try:
                response = self.session.get(url, stream=True, timeout=self.timeout)
                response.raise_for_status()
                return response

            except requests.exceptions.RequestException as e:
                last_error = e
                if attempt < self.max_retries - 1:
                    wait_time = 2 ** attempt
                    logger.warning(
                        f"Download failed (attempt {attempt + 1}/{self.max_retries}), "
                        f"retrying in {wait_time}s: {e}"
                    )
                    time.sleep(wait_time)

        raise DownloadError(f"Failed to download image: {last_error}") from last_error

    def _iter_chunks(self, response: requests.Response, url: str) -> Iterator[bytes]:
        total_size = 0
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                total_size += len(chunk)
                if total_size > self.max_size:
                    raise DownloadError("File exceeded max size during download")
                yield chunk
        finally:
            response.close()
        logger.debug(f"Streamed {url} ({total_size} bytes)")

    def _get_extension(self, url: str, content_type: Optional[str]) -> str:
        """Determine file extension from Content-Type or URL."""
        if content_type in MIME_TO_EXT:
            return MIME_TO_EXT[content_type]

        path = urlparse(url).path.lower()
        for ext in [".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic"]:
            if path.endswith(ext):
                return ext if ext != ".jpeg" else ".jpg"

        guess = mimetypes.guess_extension(content_type or "")
        if guess:
            return guess

        return ".jpg"
