"""
Image proxy test configuration

Shared fixtures:
- FakeOrigin: stands in for the remote image host, counts every request
- png_bytes / jpeg_bytes: real image payloads generated with Pillow
- settings / app / client: a FastAPI app wired to the fake origin
"""

import sys
from io import BytesIO
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Add the backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from imgur_proxy import CacheStore, ProxySettings, create_app

IMAGE_BASE = "https://images.test/"
GALLERY_BASE = "https://gallery.test/gallery/"


# ============================================
# Fake remote origin
# ============================================

class FakeOrigin:
    """
    In-process replacement for the remote host.

    Usage:
        origin.add(IMAGE_BASE + "a.png", png_bytes)
        origin.fail(IMAGE_BASE + "down.png")
        client = origin.client()
    """

    def __init__(self):
        self.routes = {}
        self.failures = set()
        self.calls = []

    def add(self, url, body, status=200, content_type="application/octet-stream"):
        self.routes[url] = (status, body, content_type)

    def fail(self, url):
        self.failures.add(url)

    def count(self, url):
        return self.calls.count(url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        if url in self.failures:
            raise httpx.ConnectError("connection refused", request=request)
        if url not in self.routes:
            return httpx.Response(404, content=b"not found")
        status, body, content_type = self.routes[url]
        if isinstance(body, httpx.AsyncByteStream):
            return httpx.Response(status, stream=body, headers={"content-type": content_type})
        return httpx.Response(status, content=body, headers={"content-type": content_type})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


class BrokenStream(httpx.AsyncByteStream):
    """Body stream that fails after the first chunk."""

    async def __aiter__(self):
        yield b"<html>\n"
        raise httpx.ReadError("connection reset")


# ============================================
# Payload fixtures
# ============================================

def make_image(image_format: str, size=(4, 4), color=(200, 30, 30)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format=image_format)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_image("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG")


# ============================================
# Component fixtures
# ============================================

@pytest.fixture
def origin():
    return FakeOrigin()


@pytest.fixture
def http_client(origin):
    return origin.client()


@pytest.fixture
def store():
    return CacheStore(max_entries=2)


@pytest.fixture
def settings():
    return ProxySettings(
        prefix="/img/",
        image_base_url=IMAGE_BASE,
        gallery_base_url=GALLERY_BASE,
    )


@pytest.fixture
def app(settings, http_client):
    return create_app(settings, http_client=http_client)


@pytest.fixture
def client(app):
    return TestClient(app)
