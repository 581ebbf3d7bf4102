"""Extract the post thumbnail from Instagram's public oEmbed endpoint."""

import logging

from .. import LOGGER_NAME
from ..client import PageFetcher
from ..exceptions import StrategyNotFound
from ..models import ImageCandidate, Method, PostReference
from .base import Strategy, to_int

logger = logging.getLogger(LOGGER_NAME)

OEMBED_URL = "https://api.instagram.com/oembed/"


class OEmbedStrategy(Strategy):
    name = "oembed"
    method = Method.OEMBED
    confidence = 0.4

    def _extract(self, ref: PostReference, fetcher: PageFetcher) -> ImageCandidate:
        logger.info(f"Trying oEmbed: {ref.original_url}")
        data = fetcher.get_json(
            OEMBED_URL,
            self.config.oembed_timeout,
            params={"url": ref.original_url},
        )

        thumbnail_url = data.get("thumbnail_url")
        if not thumbnail_url or not isinstance(thumbnail_url, str):
            raise StrategyNotFound("oEmbed response has no thumbnail_url")

        logger.info(f"Found from oEmbed: {thumbnail_url}")
        return ImageCandidate(
            url=thumbnail_url,
            width=to_int(data.get("thumbnail_width")),
            height=to_int(data.get("thumbnail_height")),
            confidence=self.confidence,
        )
