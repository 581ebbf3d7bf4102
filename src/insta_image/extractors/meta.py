"""Extract the post image from social preview meta tags."""

import logging

from .. import LOGGER_NAME
from ..client import PageFetcher
from ..exceptions import StrategyNotFound
from ..models import ImageCandidate, Method, PostReference
from ..urls import parse_dimensions
from .base import Strategy, parse_html, require_html

logger = logging.getLogger(LOGGER_NAME)


def _meta_content(soup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return (tag.get("content") or "").strip()


def _meta_int(soup, prop: str) -> int:
    value = _meta_content(soup, property=prop)
    return int(value) if value.isdigit() else 0


class MetaTagStrategy(Strategy):
    """og:image, falling back to twitter:image."""

    name = "meta"
    method = Method.META
    confidence = 0.6

    def _extract(self, ref: PostReference, fetcher: PageFetcher) -> ImageCandidate:
        html = require_html(
            fetcher.get_html(self.post_page_url(ref), self.config.page_timeout)
        )
        soup = parse_html(html)

        image_url = _meta_content(soup, property="og:image")
        if image_url:
            logger.info(f"Found og:image: {image_url}")
            width = _meta_int(soup, "og:image:width")
            height = _meta_int(soup, "og:image:height")
        else:
            image_url = _meta_content(soup, name="twitter:image")
            if not image_url:
                raise StrategyNotFound("No og:image or twitter:image meta tag")
            logger.info(f"Found twitter:image: {image_url}")
            width, height = 0, 0

        if not width or not height:
            width, height = parse_dimensions(image_url)

        return ImageCandidate(
            url=image_url,
            width=width,
            height=height,
            confidence=self.confidence,
        )
