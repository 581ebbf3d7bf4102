"""Common strategy contract and HTML helpers shared by the extractors."""

import logging
from typing import Iterator, Optional, Union

from bs4 import BeautifulSoup

from .. import LOGGER_NAME
from ..client import PageFetcher
from ..config import ExtractionConfig
from ..exceptions import StrategyError, StrategyNotFound
from ..models import ImageCandidate, Method, NotFound, PostReference

logger = logging.getLogger(LOGGER_NAME)

INSTAGRAM_BASE = "https://www.instagram.com"
MEDIA_CDN_HOSTS = ("cdninstagram.com", "fbcdn.net")
PROFILE_PICTURE_MARKERS = ("profile", "/t51.2885-19/")


class Strategy:
    """
    One technique for finding a post's image.

    Subclasses implement _extract() and raise StrategyNotFound or
    StrategyTransportError; fetch_candidate() turns those into NotFound.
    """

    name = "strategy"
    method: Method
    confidence = 0.5

    def __init__(self, config: ExtractionConfig):
        self.config = config

    def fetch_candidate(
        self, ref: PostReference, fetcher: PageFetcher
    ) -> Union[ImageCandidate, NotFound]:
        try:
            candidate = self._extract(ref, fetcher)
        except StrategyError as e:
            logger.debug(f"{self.name} found nothing for {ref.post_id}: {e}")
            return NotFound(str(e), e.kind)
        if candidate.source is None:
            candidate.source = self.method
        return candidate

    def _extract(self, ref: PostReference, fetcher: PageFetcher) -> ImageCandidate:
        raise NotImplementedError

    def post_page_url(self, ref: PostReference) -> str:
        return f"{INSTAGRAM_BASE}/{ref.kind}/{ref.post_id}/"


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def require_html(html: str) -> str:
    if not html or not html.strip():
        raise StrategyNotFound("Empty response body")
    return html


def widest_srcset_entry(srcset: str) -> tuple[Optional[str], int]:
    """
    Pick the widest entry of an img srcset.
    Entries without a width descriptor count as 0; the last one wins ties.
    """
    best_url, best_width = None, -1
    for part in srcset.split(","):
        pieces = part.strip().split()
        if not pieces:
            continue
        width = 0
        if len(pieces) > 1 and pieces[1].endswith("w") and pieces[1][:-1].isdigit():
            width = int(pieces[1][:-1])
        if width >= best_width:
            best_url, best_width = pieces[0], width
    return best_url, max(best_width, 0)


def iter_images(soup: BeautifulSoup) -> Iterator[tuple[str, int, dict]]:
    """
    Yield (url, srcset_width, attrs) for every img element with a usable source,
    preferring the widest srcset entry over src.
    """
    for img in soup.find_all("img"):
        url, width = None, 0
        srcset = img.get("srcset")
        if srcset:
            url, width = widest_srcset_entry(srcset)
        if not url:
            url = img.get("src")
        if not url or url.startswith("data:"):
            continue
        yield url, width, img.attrs


def is_profile_picture(url: str) -> bool:
    low = url.lower()
    return any(marker in low for marker in PROFILE_PICTURE_MARKERS)


def attr_int(attrs: dict, name: str) -> int:
    value = str(attrs.get(name, "")).strip()
    return int(value) if value.isdigit() else 0


def to_int(value) -> int:
    """Loose JSON number (640, "640", "640.0") as a non-negative int, else 0."""
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(number, 0)
