"""Image extraction strategies, one per payload shape."""

from ..config import ExtractionConfig
from .base import Strategy
from .embed import EmbedPageStrategy
from .meta import MetaTagStrategy
from .oembed import OEmbedStrategy
from .page import DirectPageStrategy
from .script_json import ScriptJSONStrategy

STRATEGY_CLASSES: dict[str, type[Strategy]] = {
    cls.name: cls
    for cls in (
        DirectPageStrategy,
        EmbedPageStrategy,
        ScriptJSONStrategy,
        MetaTagStrategy,
        OEmbedStrategy,
    )
}


def build_strategies(config: ExtractionConfig) -> list[Strategy]:
    """Instantiate strategies in the configured priority order."""
    return [STRATEGY_CLASSES[name](config) for name in config.strategies]


__all__ = [
    "Strategy",
    "DirectPageStrategy",
    "EmbedPageStrategy",
    "ScriptJSONStrategy",
    "MetaTagStrategy",
    "OEmbedStrategy",
    "STRATEGY_CLASSES",
    "build_strategies",
]
