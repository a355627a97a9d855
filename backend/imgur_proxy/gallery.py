"""
Gallery Seeker

Lists the images of a remote gallery page. The page is fetched whole, then
scanned line by line for `//i.imgur.com/<ref>.jpg"` references. Only the
references are returned; the images themselves are fetched later, one
request at a time, through the image route and its cache.
"""

import logging
import re
from typing import Iterable, Set

import httpx

from .errors import FetchError, ReadError, ScanError

logger = logging.getLogger(__name__)

IMG_MARKER = "//i.imgur.com/"
# TODO: jpg only; png and gif references in gallery markup are skipped
IMG_PATTERN = re.compile(r".*" + re.escape(IMG_MARKER) + r'(.*?\.jpg)".*')

# Longest line the scanner accepts before giving up on the page
MAX_LINE_BYTES = 64 * 1024


class LineTooLong(ValueError):
    """A line exceeded MAX_LINE_BYTES."""


def iter_lines(body: bytes, max_line: int = MAX_LINE_BYTES) -> Iterable[str]:
    """Split on "\\n", dropping a trailing "\\r" from each line."""
    for raw in body.split(b"\n"):
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        if len(raw) > max_line:
            raise LineTooLong(f"line of {len(raw)} bytes exceeds {max_line}")
        yield raw.decode("utf-8", errors="replace")


def scan_gallery(body: bytes, max_line: int = MAX_LINE_BYTES) -> Set[str]:
    """
    Extract distinct image references from a gallery page.

    Raises:
        LineTooLong: the page has a line the scanner cannot hold
    """
    images: Set[str] = set()
    for line in iter_lines(body, max_line):
        if IMG_MARKER not in line:
            continue
        match = IMG_PATTERN.match(line)
        if match is None:
            continue
        images.add(match.group(1))
    return images


class GallerySeeker:
    """
    Fetches a gallery page and returns the image references it contains.

    Holds no CacheStore lock; gallery pages are never cached.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = "https://imgur.com/gallery/",
        max_line: int = MAX_LINE_BYTES,
    ):
        self.http_client = http_client
        self.base_url = base_url
        self.max_line = max_line

    async def list(self, gallery_id: str) -> Set[str]:
        """
        Return the set of image references on gallery `gallery_id`.

        Raises:
            FetchError: the request failed or returned a non-2xx status
            ReadError: the body could not be read in full
            ScanError: the body could not be scanned; no partial result
        """
        url = self.base_url + gallery_id
        try:
            async with self.http_client.stream("GET", url) as response:
                response.raise_for_status()
                try:
                    body = await response.aread()
                except httpx.HTTPError as e:
                    raise ReadError(gallery_id, e) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(gallery_id, e, message="error fetching gallery") from e

        logger.info(f"[GallerySeeker] fetched gallery {gallery_id}")

        try:
            images = scan_gallery(body, self.max_line)
        except LineTooLong as e:
            raise ScanError(gallery_id, e) from e

        logger.debug(f"[GallerySeeker] {len(images)} images in gallery {gallery_id}")
        return images
