"""FastAPI web application exposing the image extractor."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from .. import LOGGER_NAME, __version__
from ..config import Config
from ..downloader import ImageDownloader
from ..exceptions import AllStrategiesExhausted, DownloadError, InvalidUrl
from ..orchestrator import Extractor
from ..rate_limit import RateLimitStore

logger = logging.getLogger(LOGGER_NAME)

INVALID_URL_MESSAGE = (
    "Invalid Instagram URL format. Please use: https://www.instagram.com/p/POST_ID/"
)


class UrlRequest(BaseModel):
    url: Optional[str] = None


def _require_url(data: UrlRequest) -> str:
    if not data.url:
        raise HTTPException(status_code=400, detail={"error": "URL is required"})
    return data.url


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(request: Request) -> None:
    """Dependency rejecting clients over their request budget with 429."""
    limiter: RateLimitStore = request.app.state.rate_limiter
    key = _client_key(request)
    if not limiter.hit(key):
        raise HTTPException(
            status_code=429,
            detail={"error": "Rate limit exceeded. Try again later."},
            headers={"Retry-After": str(int(limiter.retry_after(key)) + 1)},
        )


async def _resolve(extractor: Extractor, url: str):
    """Run extraction in the threadpool and map failures to HTTP errors."""
    try:
        return await run_in_threadpool(extractor.resolve, url)
    except InvalidUrl:
        logger.info(f"Invalid Instagram URL format: {url}")
        raise HTTPException(status_code=400, detail={"error": INVALID_URL_MESSAGE})
    except AllStrategiesExhausted as e:
        failure = e.failure
        if failure.all_not_found:
            raise HTTPException(
                status_code=404,
                detail={
                    "error": "No image found at the provided URL",
                    **failure.to_dict(),
                },
            )
        raise HTTPException(
            status_code=500,
            detail={"error": f"Failed to extract image: {e}", **failure.to_dict()},
        )


def create_app(
    config: Optional[Config] = None,
    extractor: Optional[Extractor] = None,
    downloader: Optional[ImageDownloader] = None,
) -> FastAPI:
    config = config or Config()

    app = FastAPI(title="Instagram Image Extractor", version=__version__)
    app.state.config = config
    app.state.extractor = extractor or Extractor(config.extraction)
    app.state.downloader = downloader or ImageDownloader(config.download)
    app.state.rate_limiter = RateLimitStore.from_config(config.rate_limit)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def index():
        """Service info."""
        return {
            "message": "Instagram Image Extractor API",
            "endpoints": {
                "/api/extract": "POST - Extract image URL only",
                "/api/download": "POST - Download Instagram image",
                "/api/test": "POST - Run every extraction method and report each",
                "/health": "GET - Health check",
            },
        }

    @app.post("/api/extract", dependencies=[Depends(enforce_rate_limit)])
    async def extract(data: UrlRequest, request: Request):
        """Extract the post's image URL."""
        url = _require_url(data)
        logger.info(f"New extraction request for {url} from {_client_key(request)}")

        result = await _resolve(app.state.extractor, url)
        return result.to_dict()

    @app.post("/api/download", dependencies=[Depends(enforce_rate_limit)])
    async def download(data: UrlRequest):
        """Extract the post's image and stream its bytes as an attachment."""
        url = _require_url(data)
        result = await _resolve(app.state.extractor, url)

        try:
            image = await run_in_threadpool(app.state.downloader.open, result.image_url)
        except DownloadError as e:
            logger.error(f"Download error for {result.image_url}: {e}")
            raise HTTPException(
                status_code=502,
                detail={"error": f"Failed to download image: {e}"},
            )

        headers = {"Content-Disposition": f'attachment; filename="{image.filename}"'}
        if image.content_length is not None:
            headers["Content-Length"] = str(image.content_length)
        return StreamingResponse(image.chunks, media_type=image.content_type, headers=headers)

    @app.post("/api/test")
    async def test_methods(data: UrlRequest):
        """Run each extraction method individually for debugging."""
        url = _require_url(data)
        return await run_in_threadpool(app.state.extractor.probe, url)

    @app.get("/health")
    async def health():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    static_dir = config.server.static_dir
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


app = create_app()
