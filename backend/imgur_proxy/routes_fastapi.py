"""
Image Proxy Routes

One catch-all endpoint dispatches every request:
- GET <prefix>                -> informational page
- GET <prefix><name>          -> image bytes (through the cache)
- GET <prefix>gallery/        -> informational page
- GET <prefix>gallery/<id>    -> HTML page of <img> tags pointing at <prefix><ref>
- any other method            -> 405
- any path outside <prefix>   -> 404

After an image or gallery response is sent, a cache trim runs as a
background task.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import HTMLResponse, Response

from .cache_store import CacheStore
from .config import ProxySettings
from .errors import MethodError, RouteError
from .fetcher import ImageFetcher
from .gallery import GallerySeeker
from .templates import NO_IMAGE_HTML, render_gallery

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_router(
    settings: ProxySettings,
    store: CacheStore,
    fetcher: ImageFetcher,
    seeker: GallerySeeker,
) -> APIRouter:
    """Build the proxy router bound to one set of components."""
    router = APIRouter(tags=["Image Proxy"])
    prefix = settings.prefix
    gallery_prefix = settings.gallery_prefix

    async def serve_image(name: str) -> Response:
        data = await fetcher.fetch(name)
        return Response(content=data, media_type=data.content_type)

    async def serve_gallery(gallery_id: str) -> Response:
        images = await seeker.list(gallery_id)
        return HTMLResponse(content=render_gallery(gallery_id, prefix, images))

    @router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def proxy(request: Request, background_tasks: BackgroundTasks):
        path = request.url.path
        if request.method != "GET":
            raise MethodError(path)
        if not path.startswith(prefix):
            raise RouteError(path)

        if path.startswith(gallery_prefix):
            gallery_id = path[len(gallery_prefix):]
            if not gallery_id:
                return HTMLResponse(content=NO_IMAGE_HTML)
            response = await serve_gallery(gallery_id)
        else:
            name = path[len(prefix):]
            if not name:
                return HTMLResponse(content=NO_IMAGE_HTML)
            response = await serve_image(name)

        background_tasks.add_task(store.trim)
        return response

    return router
