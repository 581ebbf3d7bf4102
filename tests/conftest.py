"""
Shared fixtures and fakes for the test suite.

No test touches the network: HTTP goes through FakeSession, which maps
URLs to canned FakeResponse objects and records every call.
"""

import json
from typing import Optional

import pytest
import requests

from insta_image.config import ExtractionConfig
from insta_image.models import PostReference

POST_URL = "https://www.instagram.com/p/CuNfJ2FrL7Z/"
PAGE_URL = "https://www.instagram.com/p/CuNfJ2FrL7Z/"
EMBED_URL = "https://www.instagram.com/p/CuNfJ2FrL7Z/embed/captioned/"
OEMBED_URL = "https://api.instagram.com/oembed/"

CDN = "https://scontent-lax3-1.cdninstagram.com/v/t51.29350-15"


class FakeResponse:
    def __init__(
        self,
        text: str = "",
        status_code: int = 200,
        headers: Optional[dict] = None,
        payload=None,
        chunks: Optional[list] = None,
    ):
        self.text = text
        self.status_code = status_code
        self.headers = headers if headers is not None else {"Content-Type": "text/html; charset=utf-8"}
        self._payload = payload
        self._chunks = chunks or []
        self.closed = False

    def json(self):
        if self._payload is not None:
            return self._payload
        return json.loads(self.text)

    def iter_content(self, chunk_size=1):
        yield from self._chunks

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"HTTP {self.status_code}")

    def close(self):
        self.closed = True


class FakeSession:
    """requests.Session stand-in answering from a URL -> response/exception map."""

    def __init__(self, routes: Optional[dict] = None):
        self.routes = routes or {}
        self.calls = []
        self.headers = {}

    def get(self, url, params=None, timeout=None, stream=False):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, list):
            item = route.pop(0) if len(route) > 1 else route[0]
            if isinstance(item, Exception):
                raise item
            return item
        return route

    def urls(self):
        return [c["url"] for c in self.calls]


def html_page(body: str = "", head: str = "") -> str:
    return f"<!DOCTYPE html><html><head>{head}</head><body>{body}</body></html>"


def shared_data_script(media: dict) -> str:
    data = {"entry_data": {"PostPage": [{"graphql": {"shortcode_media": media}}]}}
    return f"<script type=\"text/javascript\">window._sharedData = {json.dumps(data)};</script>"


@pytest.fixture
def post_ref():
    return PostReference(original_url=POST_URL, post_id="CuNfJ2FrL7Z", kind="p")


@pytest.fixture
def extraction_config():
    return ExtractionConfig()


@pytest.fixture
def fake_session():
    return FakeSession()
