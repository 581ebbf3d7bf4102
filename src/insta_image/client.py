"""HTTP access to Instagram with a browser-like identity."""

import logging
from typing import Optional, Union

import requests

from . import LOGGER_NAME
from .config import ExtractionConfig
from .exceptions import StrategyTransportError, UpstreamUnavailable

logger = logging.getLogger(LOGGER_NAME)


def create_session(config: ExtractionConfig) -> requests.Session:
    """
    Create a requests session with browser headers.
    Instagram serves stripped-down markup to clients that do not look like a browser.
    """
    session = requests.Session()
    session.headers.update({
        "User-Agent": config.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,"
                  "image/webp,*/*;q=0.8",
        "Accept-Language": config.accept_language,
        "Cache-Control": "no-cache",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
    })
    return session


class PageFetcher:
    """
    Fetches pages for a single extraction request.

    Bodies (and failures) are cached by URL, so strategies that parse the
    same post page share one network round trip.
    """

    def __init__(self, session: requests.Session):
        self.session = session
        self._cache: dict[str, Union[str, StrategyTransportError]] = {}
        self.requests_made = 0

    def get_html(self, url: str, timeout: float) -> str:
        """Return the HTML body of url, raising StrategyTransportError on failure."""
        cached = self._cache.get(url)
        if isinstance(cached, StrategyTransportError):
            raise cached
        if cached is not None:
            return cached

        try:
            body = self._fetch_html(url, timeout)
        except StrategyTransportError as e:
            self._cache[url] = e
            raise

        self._cache[url] = body
        return body

    def _fetch_html(self, url: str, timeout: float) -> str:
        response = self._get(url, timeout)

        content_type = response.headers.get("Content-Type")
        if content_type and "html" not in content_type.lower():
            raise StrategyTransportError(f"Unexpected content-type: {content_type}")

        logger.debug(f"Page response length for {url}: {len(response.text)}")
        return response.text

    def get_json(self, url: str, timeout: float, params: Optional[dict] = None) -> dict:
        """Fetch JSON from a third-party API. Not cached."""
        response = self._get(url, timeout, params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise StrategyTransportError(f"Response was not JSON: {e}") from e
        if not isinstance(data, dict):
            raise StrategyTransportError("Response JSON was not an object")
        return data

    def _get(
        self, url: str, timeout: float, params: Optional[dict] = None
    ) -> requests.Response:
        self.requests_made += 1
        try:
            response = self.session.get(url, params=params, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise StrategyTransportError(f"Timed out after {timeout}s") from e
        except requests.exceptions.ConnectionError as e:
            raise UpstreamUnavailable(f"Connection failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise StrategyTransportError(f"Request failed: {e}") from e

        if response.status_code >= 500:
            raise UpstreamUnavailable(f"Upstream returned HTTP {response.status_code}")
        if response.status_code >= 400:
            raise StrategyTransportError(f"HTTP {response.status_code}")
        return response
