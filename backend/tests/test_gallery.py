"""
GallerySeeker tests

Run:
    pytest tests/test_gallery.py -v
"""

import pytest

from conftest import GALLERY_BASE, BrokenStream
from imgur_proxy import GallerySeeker
from imgur_proxy.errors import FetchError, ReadError, ScanError
from imgur_proxy.gallery import scan_gallery

GALLERY_PAGE = b"""<!DOCTYPE html>
<html>
<head><title>gallery</title></head>
<body>
  <div class="post-image"><img src="//i.imgur.com/aaa111.jpg" class="zoom"></div>
  <div class="post-image"><img src="//i.imgur.com/bbb222.jpg"></div>
  <a href="//i.imgur.com/aaa111.jpg">full size</a>
  <img src="//i.imgur.com/ccc333.png">
  <img src="//s.imgur.com/logo.jpg">
  <p>no images here</p>
</body>
</html>
"""


# ============================================
# scan_gallery
# ============================================

class TestScanGallery:

    def test_extracts_jpg_references(self):
        assert scan_gallery(GALLERY_PAGE) == {"aaa111.jpg", "bbb222.jpg"}

    def test_duplicate_reference_appears_once(self):
        page = (
            b'<img src="//i.imgur.com/dup.jpg">\n'
            b'<img src="//i.imgur.com/dup.jpg">\n'
        )
        assert scan_gallery(page) == {"dup.jpg"}

    def test_marker_without_jpg_is_skipped(self):
        assert scan_gallery(b'<img src="//i.imgur.com/x.gif">') == set()

    def test_last_reference_on_a_line_wins(self):
        line = b'<img src="//i.imgur.com/first.jpg"><img src="//i.imgur.com/second.jpg">'
        assert scan_gallery(line) == {"second.jpg"}

    def test_crlf_line_endings(self):
        page = b'<img src="//i.imgur.com/a.jpg">\r\n<img src="//i.imgur.com/b.jpg">\r\n'
        assert scan_gallery(page) == {"a.jpg", "b.jpg"}

    def test_empty_page(self):
        assert scan_gallery(b"") == set()

    def test_line_too_long_fails(self):
        with pytest.raises(ValueError):
            scan_gallery(b"x" * 101, max_line=100)


# ============================================
# GallerySeeker.list
# ============================================

class TestGallerySeeker:

    @pytest.mark.asyncio
    async def test_list_returns_references(self, origin, http_client):
        origin.add(GALLERY_BASE + "abcde", GALLERY_PAGE, content_type="text/html")
        seeker = GallerySeeker(http_client, base_url=GALLERY_BASE)

        images = await seeker.list("abcde")

        assert images == {"aaa111.jpg", "bbb222.jpg"}
        assert origin.calls == [GALLERY_BASE + "abcde"]

    @pytest.mark.asyncio
    async def test_list_is_not_cached(self, origin, http_client):
        origin.add(GALLERY_BASE + "abcde", GALLERY_PAGE, content_type="text/html")
        seeker = GallerySeeker(http_client, base_url=GALLERY_BASE)

        await seeker.list("abcde")
        await seeker.list("abcde")

        assert origin.count(GALLERY_BASE + "abcde") == 2

    @pytest.mark.asyncio
    async def test_body_is_not_size_capped(self, origin, http_client):
        filler = b"<p>filler</p>\n" * 200_000
        origin.add(GALLERY_BASE + "huge", filler + b'<img src="//i.imgur.com/end.jpg">\n')
        seeker = GallerySeeker(http_client, base_url=GALLERY_BASE)

        assert await seeker.list("huge") == {"end.jpg"}

    @pytest.mark.asyncio
    async def test_connection_failure_raises_fetch_error(self, origin, http_client):
        origin.fail(GALLERY_BASE + "down")
        seeker = GallerySeeker(http_client, base_url=GALLERY_BASE)

        with pytest.raises(FetchError) as exc_info:
            await seeker.list("down")

        assert exc_info.value.resource == "down"
        assert exc_info.value.message == "error fetching gallery"

    @pytest.mark.asyncio
    async def test_broken_body_raises_read_error(self, origin, http_client):
        origin.add(GALLERY_BASE + "broken", BrokenStream(), content_type="text/html")
        seeker = GallerySeeker(http_client, base_url=GALLERY_BASE)

        with pytest.raises(ReadError):
            await seeker.list("broken")

    @pytest.mark.asyncio
    async def test_overlong_line_raises_scan_error(self, origin, http_client):
        page = b'<img src="//i.imgur.com/ok.jpg">\n' + b"y" * 200 + b"\n"
        origin.add(GALLERY_BASE + "long", page)
        seeker = GallerySeeker(http_client, base_url=GALLERY_BASE, max_line=100)

        with pytest.raises(ScanError):
            await seeker.list("long")

    @pytest.mark.asyncio
    async def test_seeker_does_not_touch_store(self, origin, http_client, store):
        origin.add(GALLERY_BASE + "abcde", GALLERY_PAGE)
        seeker = GallerySeeker(http_client, base_url=GALLERY_BASE)

        async with store.lock:
            # would deadlock if the seeker waited on the store lock
            assert await seeker.list("abcde")
