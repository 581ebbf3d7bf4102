"""Runs the extraction strategies in priority order and aggregates failures."""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, Union

import requests

from . import LOGGER_NAME
from .client import PageFetcher, create_session
from .config import ExtractionConfig
from .exceptions import AllStrategiesExhausted, InvalidUrl
from .extractors import Strategy, build_strategies
from .models import (
    ExtractionFailure,
    ExtractionResult,
    ImageCandidate,
    NotFound,
    PostReference,
    StrategyAttempt,
)
from .urls import is_absolute_http, normalize_escapes, to_absolute, validate

logger = logging.getLogger(LOGGER_NAME)


class Extractor:
    """
    First-success-wins pipeline over a fixed list of strategies.

    Strategies run sequentially. A strategy that finds nothing, fails on the
    network, or raises anything unexpected is recorded and the next one is
    tried. Each extract() call gets its own PageFetcher, so the post page is
    downloaded at most once per call and nothing is shared across requests.
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        strategies: Optional[Sequence[Strategy]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or ExtractionConfig()
        self.strategies = list(strategies) if strategies is not None else build_strategies(self.config)
        self.session = session or create_session(self.config)

    def extract(self, ref: PostReference) -> Union[ExtractionResult, ExtractionFailure]:
        logger.info(f"Starting extraction for: {ref.original_url}")
        fetcher = PageFetcher(self.session)
        failure = ExtractionFailure(post_id=ref.post_id)

        for strategy in self.strategies:
            logger.debug(f"Trying {strategy.name} method...")
            outcome = self._run(strategy, ref, fetcher)

            if isinstance(outcome, NotFound):
                logger.info(f"{strategy.name} method failed: {outcome.reason}")
                failure.attempts.append(
                    StrategyAttempt(strategy.name, outcome.reason, outcome.kind)
                )
                continue

            image_url = to_absolute(normalize_escapes(outcome.url), ref.original_url)
            if not is_absolute_http(image_url):
                reason = f"Candidate is not an absolute URL: {outcome.url!r}"
                logger.info(f"{strategy.name} method failed: {reason}")
                failure.attempts.append(StrategyAttempt(strategy.name, reason))
                continue

            logger.info(f"Success with {strategy.name} method: {image_url}")
            return ExtractionResult(
                image_url=image_url,
                width=outcome.width,
                height=outcome.height,
                method=outcome.source or strategy.method,
                post_id=ref.post_id,
                original_url=ref.original_url,
            )

        logger.warning(
            f"All extraction methods failed for {ref.post_id}: {failure.summary()}"
        )
        return failure

    def _run(
        self, strategy: Strategy, ref: PostReference, fetcher: PageFetcher
    ) -> Union[ImageCandidate, NotFound]:
        try:
            outcome = strategy.fetch_candidate(ref, fetcher)
        except Exception as e:
            logger.exception(f"{strategy.name} method raised unexpectedly")
            return NotFound(f"{type(e).__name__}: {e}", "error")
        if isinstance(outcome, NotFound):
            return outcome
        if outcome is None or not outcome.url:
            return NotFound("Strategy returned no image URL")
        return outcome

    def resolve(self, raw_url: str) -> ExtractionResult:
        """Validate and extract; raises InvalidUrl or AllStrategiesExhausted."""
        ref = validate(raw_url)
        outcome = self.extract(ref)
        if isinstance(outcome, ExtractionFailure):
            raise AllStrategiesExhausted(outcome)
        return outcome

    def probe(self, raw_url: str) -> dict:
        """Run every strategy on its own and report each outcome."""
        report = {
            "url": raw_url,
            "isValidFormat": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "methods": {},
        }
        try:
            ref = validate(raw_url)
        except InvalidUrl:
            report["isValidFormat"] = False
            return report

        fetcher = PageFetcher(self.session)
        for strategy in self.strategies:
            outcome = self._run(strategy, ref, fetcher)
            if isinstance(outcome, NotFound):
                report["methods"][strategy.name] = {
                    "success": False,
                    "result": None,
                    "error": outcome.reason,
                }
            else:
                report["methods"][strategy.name] = {
                    "success": True,
                    "result": normalize_escapes(outcome.url),
                    "dimensions": {"width": outcome.width, "height": outcome.height},
                    "error": None,
                }
        return report
