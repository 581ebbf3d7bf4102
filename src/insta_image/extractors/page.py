"""Extract the post image by scoring every CDN image on the full post page."""

import logging
from urllib.parse import urlparse

from .. import LOGGER_NAME
from ..client import PageFetcher
from ..exceptions import StrategyNotFound
from ..models import ImageCandidate, Method, PostReference
from ..scoring import pick_best, score
from ..urls import parse_dimensions
from .base import (
    MEDIA_CDN_HOSTS,
    Strategy,
    attr_int,
    is_profile_picture,
    iter_images,
    parse_html,
    require_html,
)

logger = logging.getLogger(LOGGER_NAME)

STORY_THUMBNAIL_MARKERS = ("stories", "story", "highlight")


def is_media_cdn(url: str) -> bool:
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except ValueError:
        return False
    return any(hostname == host or hostname.endswith("." + host) for host in MEDIA_CDN_HOSTS)


def is_story_thumbnail(url: str) -> bool:
    low = url.lower()
    return any(marker in low for marker in STORY_THUMBNAIL_MARKERS)


class DirectPageStrategy(Strategy):
    """Score all media CDN images on the post page and keep the best one."""

    name = "page"
    method = Method.PAGE
    confidence = 0.9

    def _extract(self, ref: PostReference, fetcher: PageFetcher) -> ImageCandidate:
        url = self.post_page_url(ref)
        logger.info(f"Trying page scraping: {url}")
        html = require_html(fetcher.get_html(url, self.config.page_timeout))
        soup = parse_html(html)

        scored = []
        for image_url, srcset_width, attrs in iter_images(soup):
            if not is_media_cdn(image_url):
                continue
            if is_profile_picture(image_url) or is_story_thumbnail(image_url):
                continue

            width, height = parse_dimensions(image_url)
            if not width:
                width, height = attr_int(attrs, "width"), attr_int(attrs, "height")

            candidate = ImageCandidate(url=image_url, width=width, height=height)
            css_hints = " ".join(attrs.get("class", []))
            value = score(candidate, attrs.get("alt", ""), css_hints)
            candidate.confidence = value
            scored.append((candidate, value))

        best = pick_best(scored)
        if best is None:
            raise StrategyNotFound("No media CDN image elements on post page")

        logger.debug(
            f"Picked {best.url} ({best.width}x{best.height}) "
            f"out of {len(scored)} page images"
        )
        return best
