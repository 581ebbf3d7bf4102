"""Exception hierarchy for the image extractor."""


class InstaImageError(Exception):
    """Base class for all extractor errors."""


class InvalidUrl(InstaImageError, ValueError):
    """The input is not a recognizable Instagram post URL."""

    def __init__(self, url: str, message: str = "Invalid Instagram URL format"):
        self.url = url
        super().__init__(f"{message}: {url!r}")


class StrategyError(InstaImageError):
    """A single strategy could not produce a candidate."""

    kind = "error"


class StrategyNotFound(StrategyError):
    """The strategy ran but the payload held no usable image."""

    kind = "not_found"


class StrategyTransportError(StrategyError):
    """Network failure, timeout, bad status or unexpected content type."""

    kind = "transport"


class UpstreamUnavailable(StrategyTransportError):
    """A third-party collaborator could not be reached at all."""


class AllStrategiesExhausted(InstaImageError):
    """Every strategy was tried and none produced an image."""

    def __init__(self, failure):
        self.failure = failure
        super().__init__(
            f"All extraction methods failed. Errors: {failure.summary()}"
        )


class RateLimitExceeded(InstaImageError):
    """The client sent too many requests in the current window."""

    def __init__(self, key: str, retry_after: float):
        self.key = key
        self.retry_after = retry_after
        super().__init__("Rate limit exceeded. Try again later.")


class DownloadError(InstaImageError):
    """The resolved image could not be fetched."""
