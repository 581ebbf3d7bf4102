"""Extract the post image from structured data in inline scripts."""

import json
import logging
import re
from typing import Optional

from .. import LOGGER_NAME
from ..client import PageFetcher
from ..exceptions import StrategyNotFound
from ..models import ImageCandidate, Method, PostReference
from ..urls import normalize_escapes, parse_dimensions
from .base import Strategy, parse_html, require_html, to_int

logger = logging.getLogger(LOGGER_NAME)

SHARED_DATA_MARKER = "window._sharedData"
DISPLAY_URL_RE = re.compile(r'"display_url"\s*:\s*"((?:[^"\\]|\\.)*)"')


def load_shared_data(script: str) -> Optional[dict]:
    """Decode the object assigned to window._sharedData, or None."""
    start = script.find(SHARED_DATA_MARKER)
    if start < 0:
        return None
    brace = script.find("{", start)
    if brace < 0:
        return None
    try:
        data, _ = json.JSONDecoder().raw_decode(script, brace)
    except ValueError:
        logger.debug("Failed to parse _sharedData JSON")
        return None
    return data if isinstance(data, dict) else None


def find_post_media(shared_data: dict) -> Optional[dict]:
    entry_data = shared_data.get("entry_data")
    if not isinstance(entry_data, dict):
        return None
    post_pages = entry_data.get("PostPage")
    if not isinstance(post_pages, list) or not post_pages or not isinstance(post_pages[0], dict):
        return None
    graphql = post_pages[0].get("graphql")
    if not isinstance(graphql, dict):
        return None
    media = graphql.get("shortcode_media")
    return media if isinstance(media, dict) else None


def candidate_from_media(media: dict) -> Optional[ImageCandidate]:
    """
    The display URL, upgraded to the largest resolution variant only when
    that variant is strictly bigger than the display URL itself.
    """
    display_url = media.get("display_url")
    if not display_url or not isinstance(display_url, str):
        return None

    dims = media.get("dimensions")
    if not isinstance(dims, dict):
        dims = {}
    width, height = to_int(dims.get("width")), to_int(dims.get("height"))
    if not width or not height:
        width, height = parse_dimensions(display_url)
    best = ImageCandidate(url=display_url, width=width, height=height)

    resources = media.get("display_resources")
    if not isinstance(resources, list):
        resources = []
    variant = None
    for resource in resources:
        if not isinstance(resource, dict) or not isinstance(resource.get("src"), str):
            continue
        current = ImageCandidate(
            url=resource["src"],
            width=to_int(resource.get("config_width")),
            height=to_int(resource.get("config_height")),
        )
        if not current.url:
            continue
        if variant is None or current.area > variant.area:
            variant = current

    if variant is not None and variant.area > best.area:
        best = variant
    return best


def scan_display_urls(scripts: list[str]) -> Optional[ImageCandidate]:
    """Best loose "display_url" occurrence by resolution; first one wins ties."""
    best = None
    for script in scripts:
        for match in DISPLAY_URL_RE.finditer(script):
            url = normalize_escapes(match.group(1))
            width, height = parse_dimensions(url)
            candidate = ImageCandidate(url=url, width=width, height=height)
            if best is None or candidate.area > best.area:
                best = candidate
    return best


class ScriptJSONStrategy(Strategy):
    """Reads window._sharedData, then falls back to loose display_url keys."""

    name = "script_json"
    method = Method.SCRIPT_JSON
    confidence = 0.85

    def _extract(self, ref: PostReference, fetcher: PageFetcher) -> ImageCandidate:
        html = require_html(
            fetcher.get_html(self.post_page_url(ref), self.config.page_timeout)
        )
        soup = parse_html(html)
        scripts = [s.string or s.get_text() for s in soup.find_all("script")]
        scripts = [s for s in scripts if s]

        candidate = None
        for script in scripts:
            if SHARED_DATA_MARKER not in script:
                continue
            shared_data = load_shared_data(script)
            media = find_post_media(shared_data) if shared_data else None
            if media:
                candidate = candidate_from_media(media)
            if candidate:
                logger.info(f"Found from _sharedData: {candidate.url}")
                break

        if candidate is None:
            candidate = scan_display_urls(scripts)
            if candidate:
                logger.info(f"Found display_url: {candidate.url}")

        if candidate is None:
            raise StrategyNotFound("No display_url in page scripts")

        candidate.confidence = self.confidence
        return candidate
