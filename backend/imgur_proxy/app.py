"""
Application Factory

Wires one CacheStore, ImageFetcher and GallerySeeker around a shared
httpx client and mounts the proxy router on a FastAPI app.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from .cache_store import CacheStore
from .config import ProxySettings
from .errors import ProxyError
from .fetcher import ImageFetcher
from .gallery import GallerySeeker
from .routes_fastapi import create_router

logger = logging.getLogger(__name__)


def create_http_client(settings: ProxySettings) -> httpx.AsyncClient:
    """Outbound client. No timeout: remote calls run to completion or failure."""
    return httpx.AsyncClient(
        timeout=None,
        follow_redirects=True,
        headers={
            "User-Agent": settings.user_agent,
            "Accept": "image/*,text/html;q=0.9,*/*;q=0.8",
        },
    )


async def proxy_error_handler(request: Request, exc: ProxyError) -> PlainTextResponse:
    """Log the failure with its resource and answer with its status."""
    if exc.status_code >= 500:
        logger.error(f"[Router] {exc}")
    else:
        logger.warning(f"[Router] {request.method} {request.url.path}: {exc}")
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(
    settings: Optional[ProxySettings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the proxy application.

    Args:
        settings: Runtime settings (defaults from the environment)
        http_client: Outbound client; one is created, and closed on
            shutdown, when not given
    """
    settings = settings or ProxySettings.from_env()
    owns_client = http_client is None
    client = http_client or create_http_client(settings)

    store = CacheStore(max_entries=settings.cache_size)
    fetcher = ImageFetcher(
        store,
        client,
        base_url=settings.image_base_url,
        size_limit=settings.image_size_limit,
    )
    seeker = GallerySeeker(client, base_url=settings.gallery_base_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"[ImageProxy] Serving under {settings.prefix} (cache size {settings.cache_size})")
        yield
        if owns_client:
            await client.aclose()

    app = FastAPI(title="imgurproxy", lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.store = store
    app.state.fetcher = fetcher
    app.state.seeker = seeker

    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.include_router(create_router(settings, store, fetcher, seeker))
    return app
