"""Data types passed between the validator, strategies and orchestrator."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Method(str, Enum):
    """Which strategy produced an image."""
    PAGE = "page"
    EMBED = "embed"
    SCRIPT_JSON = "script_json"
    META = "meta"
    OEMBED = "oembed"


@dataclass(frozen=True)
class PostReference:
    """A validated post URL and its shortcode."""
    original_url: str
    post_id: str
    kind: str = "p"  # path segment: p, reel or tv


@dataclass
class ImageCandidate:
    """A tentative image found by a strategy. (0, 0) means unknown size."""
    url: str
    width: int = 0
    height: int = 0
    source: Optional[Method] = None
    confidence: float = 0.0

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass
class NotFound:
    """A strategy's explanation for producing nothing."""
    reason: str
    kind: str = "not_found"

    def __bool__(self) -> bool:
        return False


@dataclass
class ExtractionResult:
    image_url: str
    width: int
    height: int
    method: Method
    post_id: str
    original_url: str = ""

    def to_dict(self) -> dict:
        return {
            "success": True,
            "imageUrl": self.image_url,
            "dimensions": {"width": self.width, "height": self.height},
            "method": self.method.value,
            "postId": self.post_id,
            "originalUrl": self.original_url,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


@dataclass
class StrategyAttempt:
    strategy: str
    reason: str
    kind: str = "not_found"  # not_found, transport or error

    def to_dict(self) -> dict:
        return {"strategy": self.strategy, "reason": self.reason, "kind": self.kind}


@dataclass
class ExtractionFailure:
    """Every reason collected, in the order strategies were attempted."""
    post_id: str
    attempts: list[StrategyAttempt] = field(default_factory=list)

    @property
    def all_not_found(self) -> bool:
        """True when every strategy ran cleanly and simply found nothing."""
        return all(a.kind == "not_found" for a in self.attempts)

    def summary(self) -> str:
        return "; ".join(f"{a.strategy} method failed: {a.reason}" for a in self.attempts)

    def to_dict(self) -> dict:
        return {
            "postId": self.post_id,
            "attempts": [a.to_dict() for a in self.attempts],
        }

    def __bool__(self) -> bool:
        return False
