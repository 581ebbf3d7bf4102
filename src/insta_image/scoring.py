"""
Heuristic ranking of image candidates found on a post page.

The weights approximate Instagram's markup and are meant to be retuned.
Each rule adds an independent term; rules run in table order.
"""

from typing import Callable, Iterable, NamedTuple, Optional, Sequence

from .models import ImageCandidate

PIXELS_PER_POINT = 1_000_000

SQUARE_RATIO_MIN = 0.8
SQUARE_RATIO_MAX = 1.25
LANDSCAPE_RATIO_MAX = 2.0
SQUARE_BONUS = 10.0
LANDSCAPE_BONUS = 8.0

ALT_TEXT_KEYWORDS = ("photo", "image")
ALT_TEXT_BONUS = 5.0
POST_IMAGE_CLASS_MARKERS = ("ffvad", "post-image", "postimage", "post_image")
POST_IMAGE_CLASS_BONUS = 5.0

SMALL_IMAGE_MIN_SIDE = 400
SMALL_IMAGE_PENALTY = -20.0

HIGH_RES_MIN_SIDE = 1080
HIGH_RES_BONUS = 15.0


class ScoringContext(NamedTuple):
    candidate: ImageCandidate
    alt_text: str
    css_hints: str


class Rule(NamedTuple):
    name: str
    apply: Callable[[ScoringContext], float]


def _resolution(ctx: ScoringContext) -> float:
    return ctx.candidate.area / PIXELS_PER_POINT


def _aspect_ratio(ctx: ScoringContext) -> float:
    c = ctx.candidate
    if c.height <= 0:
        return 0.0
    ratio = c.width / c.height
    if SQUARE_RATIO_MIN <= ratio <= SQUARE_RATIO_MAX:
        return SQUARE_BONUS
    if SQUARE_RATIO_MAX < ratio <= LANDSCAPE_RATIO_MAX:
        return LANDSCAPE_BONUS
    return 0.0


def _alt_text(ctx: ScoringContext) -> float:
    alt = ctx.alt_text.lower()
    if any(k in alt for k in ALT_TEXT_KEYWORDS):
        return ALT_TEXT_BONUS
    return 0.0


def _post_image_class(ctx: ScoringContext) -> float:
    hints = ctx.css_hints.lower()
    if any(m in hints for m in POST_IMAGE_CLASS_MARKERS):
        return POST_IMAGE_CLASS_BONUS
    return 0.0


def _small_image(ctx: ScoringContext) -> float:
    c = ctx.candidate
    if c.width < SMALL_IMAGE_MIN_SIDE or c.height < SMALL_IMAGE_MIN_SIDE:
        return SMALL_IMAGE_PENALTY
    return 0.0


def _high_resolution(ctx: ScoringContext) -> float:
    c = ctx.candidate
    if c.width >= HIGH_RES_MIN_SIDE or c.height >= HIGH_RES_MIN_SIDE:
        return HIGH_RES_BONUS
    return 0.0


RULES: Sequence[Rule] = (
    Rule("resolution", _resolution),
    Rule("aspect_ratio", _aspect_ratio),
    Rule("alt_text", _alt_text),
    Rule("post_image_class", _post_image_class),
    Rule("small_image", _small_image),
    Rule("high_resolution", _high_resolution),
)


def score_breakdown(
    candidate: ImageCandidate,
    alt_text: str = "",
    css_hints: str = "",
    rules: Sequence[Rule] = RULES,
) -> dict[str, float]:
    """Per-rule contributions, useful when retuning weights."""
    ctx = ScoringContext(candidate, alt_text or "", css_hints or "")
    return {rule.name: rule.apply(ctx) for rule in rules}


def score(
    candidate: ImageCandidate,
    alt_text: str = "",
    css_hints: str = "",
    rules: Sequence[Rule] = RULES,
) -> float:
    return sum(score_breakdown(candidate, alt_text, css_hints, rules).values())


def pick_best(
    scored: Iterable[tuple[ImageCandidate, float]]
) -> Optional[ImageCandidate]:
    """Highest score wins; the first one seen wins a tie."""
    best = None
    best_score = None
    for candidate, value in scored:
        if best_score is None or value > best_score:
            best = candidate
            best_score = value
    return best
