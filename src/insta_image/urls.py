"""Post URL validation and helpers for image URLs found in page payloads."""

import re
from typing import Tuple
from urllib.parse import urljoin, urlparse

from .exceptions import InvalidUrl
from .models import PostReference

POST_URL_RE = re.compile(
    r"^https?://(?:www\.)?instagram\.com/(p|reel|tv)/([A-Za-z0-9_-]+)(?:[/?#].*)?$",
    re.IGNORECASE,
)
DIMENSIONS_RE = re.compile(r"(\d+)x(\d+)")
UNICODE_ESCAPE_RE = re.compile(r"\\u([0-9a-fA-F]{4})")


def validate(raw: str) -> PostReference:
    """
    Check that raw is an Instagram post URL and pull out the shortcode.
    Raises InvalidUrl for anything else. Never touches the network.
    """
    if not isinstance(raw, str):
        raise InvalidUrl(str(raw))

    url = raw.strip()
    match = POST_URL_RE.match(url)
    if not match:
        raise InvalidUrl(url)

    return PostReference(
        original_url=url,
        post_id=match.group(2),
        kind=match.group(1).lower(),
    )


def is_valid_post_url(raw: str) -> bool:
    try:
        validate(raw)
    except InvalidUrl:
        return False
    return True


def parse_dimensions(url: str) -> Tuple[int, int]:
    """
    Read the first WIDTHxHEIGHT token in an image URL, e.g. s640x640.
    Returns (0, 0) when the URL carries no size hint.
    """
    match = DIMENSIONS_RE.search(url or "")
    if not match:
        return 0, 0
    return int(match.group(1)), int(match.group(2))


def normalize_escapes(url: str) -> str:
    """Undo JSON and HTML escaping left in a URL scraped from page text."""
    url = UNICODE_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), url)
    url = url.replace("\\/", "/")
    url = url.replace("&amp;", "&")
    return url.replace("\\", "").strip()


def to_absolute(url: str, base: str) -> str:
    if url.startswith("//"):
        return "https:" + url
    return urljoin(base, url)


def is_absolute_http(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
