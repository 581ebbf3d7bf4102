"""Instagram post image extractor."""

__version__ = "1.0.0"

LOGGER_NAME = "insta_image"
