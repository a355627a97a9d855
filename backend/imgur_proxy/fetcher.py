"""
Image Fetcher

Cache-or-fetch for single images:
1. Look the name up in the CacheStore
2. On a miss, GET <image_base_url><name> and read at most `size_limit` bytes
3. Sniff the payload, refuse anything that is not an image
4. Cache and return the bytes

The store lock is held for the whole call, network included, so image
traffic is serialized process-wide.
"""

import logging
from io import BytesIO
from typing import Optional

import httpx
from PIL import Image, UnidentifiedImageError

from .cache_store import CacheStore
from .errors import ContentError, FetchError

logger = logging.getLogger(__name__)


class ImageBytes(bytes):
    """Raw image payload tagged with the MIME type it sniffed as."""

    def __new__(cls, data: bytes, content_type: str):
        obj = super().__new__(cls, data)
        obj.content_type = content_type
        return obj


def sniff_image_type(data: bytes) -> Optional[str]:
    """
    Infer an image MIME type from the payload itself.

    Only the header is parsed, pixel data is never decoded, so truncated
    images still sniff as their format and declared dimensions are not
    subject to Pillow's decompression-bomb limit.

    Returns:
        MIME type such as "image/png", or None if the bytes are not an image.
    """
    max_pixels = Image.MAX_IMAGE_PIXELS
    Image.MAX_IMAGE_PIXELS = None
    try:
        with Image.open(BytesIO(data)) as img:
            image_format = img.format
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return None
    finally:
        Image.MAX_IMAGE_PIXELS = max_pixels
    if not image_format:
        return None
    return Image.MIME.get(image_format, f"image/{image_format.lower()}")


async def read_capped(response: httpx.Response, limit: int) -> bytes:
    """Read a streamed body, silently truncating it at `limit` bytes."""
    buf = bytearray()
    async for chunk in response.aiter_bytes():
        buf += chunk
        if len(buf) >= limit:
            break
    return bytes(buf[:limit])


class ImageFetcher:
    """
    Serves images from the CacheStore, filling it from the remote host.

    Usage:
        fetcher = ImageFetcher(store, http_client)
        data = await fetcher.fetch("abc123.jpg")
    """

    def __init__(
        self,
        store: CacheStore,
        http_client: httpx.AsyncClient,
        base_url: str = "https://i.imgur.com/",
        size_limit: int = 10 << 20,
    ):
        self.store = store
        self.http_client = http_client
        self.base_url = base_url
        self.size_limit = size_limit

    async def fetch(self, name: str) -> ImageBytes:
        """
        Return the image bytes for `name`, tagged with their MIME type.

        Raises:
            FetchError: the remote request failed or returned a non-2xx status
            ContentError: the (possibly truncated) body is not an image
        """
        async with self.store.lock:
            cached = self.store.lookup(name)
            if cached is not None:
                logger.debug(f"[ImageFetcher] Cache hit: {name}")
                return cached

            # name is used verbatim, no escaping or traversal checks
            url = self.base_url + name
            try:
                async with self.http_client.stream("GET", url) as response:
                    response.raise_for_status()
                    body = await read_capped(response, self.size_limit)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise FetchError(name, e) from e

            content_type = sniff_image_type(body)
            if content_type is None:
                raise ContentError(name)

            logger.info(f"[ImageFetcher] fetched {name} ({len(body)} bytes)")
            image = ImageBytes(body, content_type)
            self.store.insert(name, image)
            return image
