"""Configuration loader and validator."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from . import LOGGER_NAME

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

STRATEGY_NAMES = ("page", "embed", "script_json", "meta", "oembed")


@dataclass
class ExtractionConfig:
    page_timeout: float = 15.0
    embed_timeout: float = 10.0
    oembed_timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.5"
    strategies: list[str] = field(default_factory=lambda: list(STRATEGY_NAMES))


@dataclass
class RateLimitConfig:
    requests_per_window: int = 10
    window_seconds: float = 60.0
    stripes: int = 16


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3001
    static_dir: Optional[str] = "public"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class DownloadConfig:
    timeout: float = 30.0
    max_file_size_mb: int = 50


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class Config:
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load and validate configuration from a YAML file.
    With no path, defaults are used. PORT in the environment overrides server.port.
    """
    data = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {config_path}\n"
                "Please copy config.yaml.example to config.yaml and customize."
            )
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    extraction_data = data.get("extraction", {})
    extraction = ExtractionConfig(
        page_timeout=float(extraction_data.get("page_timeout", 15.0)),
        embed_timeout=float(extraction_data.get("embed_timeout", 10.0)),
        oembed_timeout=float(extraction_data.get("oembed_timeout", 10.0)),
        user_agent=extraction_data.get("user_agent", DEFAULT_USER_AGENT),
        accept_language=extraction_data.get("accept_language", "en-US,en;q=0.5"),
        strategies=list(extraction_data.get("strategies", STRATEGY_NAMES)),
    )

    unknown = [s for s in extraction.strategies if s not in STRATEGY_NAMES]
    if unknown:
        raise ValueError(
            f"Unknown strategies in config: {', '.join(unknown)}. "
            f"Choose from: {', '.join(STRATEGY_NAMES)}"
        )
    if not extraction.strategies:
        raise ValueError("No extraction strategies configured.")
    for name in ("page_timeout", "embed_timeout", "oembed_timeout"):
        if getattr(extraction, name) <= 0:
            raise ValueError(f"extraction.{name} must be positive")

    rate_data = data.get("rate_limit", {})
    rate_limit = RateLimitConfig(
        requests_per_window=rate_data.get("requests_per_window", 10),
        window_seconds=float(rate_data.get("window_seconds", 60.0)),
        stripes=rate_data.get("stripes", 16),
    )
    if rate_limit.requests_per_window <= 0 or rate_limit.window_seconds <= 0:
        raise ValueError("rate_limit values must be positive")
    if rate_limit.stripes <= 0:
        raise ValueError("rate_limit.stripes must be positive")

    server_data = data.get("server", {})
    server = ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=int(os.environ.get("PORT", server_data.get("port", 3001))),
        static_dir=server_data.get("static_dir", "public"),
        cors_origins=list(server_data.get("cors_origins", ["*"])),
    )

    download_data = data.get("download", {})
    download = DownloadConfig(
        timeout=float(download_data.get("timeout", 30.0)),
        max_file_size_mb=download_data.get("max_file_size_mb", 50),
    )

    log_data = data.get("logging", {})
    logging_config = LoggingConfig(
        level=log_data.get("level", "INFO"),
        file=log_data.get("file"),
    )

    return Config(
        extraction=extraction,
        rate_limit=rate_limit,
        server=server,
        download=download,
        logging=logging_config,
    )


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """Configure logging based on config."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, config.level.upper()))

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if config.file:
            file_handler = logging.FileHandler(config.file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
