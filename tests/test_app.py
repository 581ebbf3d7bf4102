"""Tests for the FastAPI application."""

import pytest
from fastapi.testclient import TestClient

from conftest import POST_URL, FakeResponse, FakeSession
from insta_image.config import Config, ExtractionConfig, RateLimitConfig, ServerConfig
from insta_image.downloader import ImageDownloader
from insta_image.extractors import Strategy
from insta_image.models import ImageCandidate, Method, NotFound
from insta_image.orchestrator import Extractor
from insta_image.web.app import create_app

IMAGE_URL = "https://cdn.example/s1080x1080/photo.jpg"


class FixedStrategy(Strategy):
    name = "embed"
    method = Method.EMBED

    def __init__(self, outcome):
        super().__init__(ExtractionConfig())
        self.outcome = outcome

    def fetch_candidate(self, ref, fetcher):
        return self.outcome


def build_client(outcome, limit=10, image_session=None):
    config = Config(
        rate_limit=RateLimitConfig(requests_per_window=limit),
        server=ServerConfig(static_dir=None),
    )
    extractor = Extractor(config.extraction, strategies=[FixedStrategy(outcome)], session=FakeSession())
    downloader = ImageDownloader(config.download, session=image_session or FakeSession())
    return TestClient(create_app(config, extractor=extractor, downloader=downloader))


@pytest.fixture
def client():
    return build_client(ImageCandidate(url=IMAGE_URL, width=1080, height=1080))


class TestInfoEndpoints:
    def test_index(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "/api/extract" in response.json()["endpoints"]

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "OK"


class TestExtractEndpoint:
    def test_success(self, client):
        response = client.post("/api/extract", json={"url": POST_URL})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["imageUrl"] == IMAGE_URL
        assert body["dimensions"] == {"width": 1080, "height": 1080}
        assert body["method"] == "embed"
        assert body["postId"] == "CuNfJ2FrL7Z"
        assert "timestamp" in body

    def test_missing_url(self, client):
        response = client.post("/api/extract", json={})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "URL is required"

    def test_invalid_url(self, client):
        response = client.post("/api/extract", json={"url": "https://example.com/p/abc"})
        assert response.status_code == 400
        assert "Invalid Instagram URL format" in response.json()["detail"]["error"]

    def test_no_image_found(self):
        client = build_client(NotFound("No full-size image element in embed page"))
        response = client.post("/api/extract", json={"url": POST_URL})

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["error"] == "No image found at the provided URL"
        assert detail["attempts"] == [{
            "strategy": "embed",
            "reason": "No full-size image element in embed page",
            "kind": "not_found",
        }]

    def test_transport_failure(self):
        client = build_client(NotFound("HTTP 429", "transport"))
        response = client.post("/api/extract", json={"url": POST_URL})

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert "embed method failed: HTTP 429" in detail["error"]
        assert detail["attempts"][0]["kind"] == "transport"

    def test_rate_limited(self):
        client = build_client(ImageCandidate(url=IMAGE_URL), limit=2)

        codes = [client.post("/api/extract", json={"url": POST_URL}).status_code for _ in range(3)]

        assert codes == [200, 200, 429]


class TestDownloadEndpoint:
    def test_streams_image(self):
        session = FakeSession({
            IMAGE_URL: FakeResponse(headers={"Content-Type": "image/jpeg"}, chunks=[b"\xff\xd8", b"\xff\xd9"]),
        })
        client = build_client(ImageCandidate(url=IMAGE_URL), image_session=session)

        response = client.post("/api/download", json={"url": POST_URL})

        assert response.status_code == 200
        assert response.content == b"\xff\xd8\xff\xd9"
        assert response.headers["content-type"] == "image/jpeg"
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="instagram-image-')
        assert disposition.endswith('.jpg"')

    def test_upstream_image_failure(self):
        session = FakeSession({IMAGE_URL: FakeResponse(status_code=404)})
        client = build_client(ImageCandidate(url=IMAGE_URL), image_session=session)
        client.app.state.downloader.max_retries = 1

        response = client.post("/api/download", json={"url": POST_URL})

        assert response.status_code == 502

    def test_invalid_url(self, client):
        response = client.post("/api/download", json={"url": "nope"})
        assert response.status_code == 400


class TestProbeEndpoint:
    def test_reports_methods(self, client):
        response = client.post("/api/test", json={"url": POST_URL})

        assert response.status_code == 200
        body = response.json()
        assert body["isValidFormat"] is True
        assert body["methods"]["embed"]["success"] is True
        assert body["methods"]["embed"]["result"] == IMAGE_URL

    def test_not_rate_limited(self):
        client = build_client(ImageCandidate(url=IMAGE_URL), limit=1)
        codes = [client.post("/api/test", json={"url": POST_URL}).status_code for _ in range(3)]
        assert codes == [200, 200, 200]
