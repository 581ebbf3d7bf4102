"""Extract the post image from Instagram's lightweight embed rendering."""

import logging

from .. import LOGGER_NAME
from ..client import PageFetcher
from ..exceptions import StrategyNotFound
from ..models import ImageCandidate, Method, PostReference
from ..urls import parse_dimensions
from .base import (
    INSTAGRAM_BASE,
    Strategy,
    attr_int,
    is_profile_picture,
    iter_images,
    parse_html,
    require_html,
)

logger = logging.getLogger(LOGGER_NAME)

# Fixed sizes Instagram uses for avatars and grid thumbnails.
SMALL_THUMBNAIL_SIZES = {(150, 150), (240, 240)}


def is_small_thumbnail(url: str) -> bool:
    return parse_dimensions(url) in SMALL_THUMBNAIL_SIZES


class EmbedPageStrategy(Strategy):
    """First img element in the embed page that is not a thumbnail or avatar."""

    name = "embed"
    method = Method.EMBED
    confidence = 0.8

    def embed_url(self, ref: PostReference) -> str:
        return f"{INSTAGRAM_BASE}/{ref.kind}/{ref.post_id}/embed/captioned/"

    def _extract(self, ref: PostReference, fetcher: PageFetcher) -> ImageCandidate:
        url = self.embed_url(ref)
        logger.info(f"Trying embed URL: {url}")
        html = require_html(fetcher.get_html(url, self.config.embed_timeout))
        soup = parse_html(html)

        for image_url, srcset_width, attrs in iter_images(soup):
            if is_profile_picture(image_url) or is_small_thumbnail(image_url):
                continue

            width, height = parse_dimensions(image_url)
            if not width:
                width, height = attr_int(attrs, "width"), attr_int(attrs, "height")

            logger.debug(f"Embed extraction result: {image_url}")
            return ImageCandidate(
                url=image_url,
                width=width,
                height=height,
                confidence=self.confidence,
            )

        raise StrategyNotFound("No full-size image element in embed page")
