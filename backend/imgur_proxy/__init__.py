"""
Imgur Proxy

Caching reverse proxy for images hosted on imgur.

Features:
- In-memory image cache behind one process-wide lock
- Content sniffing, non-images are refused and never cached
- Gallery pages rendered as lists of proxied <img> tags
- Best-effort cache trimming after each response
"""

from .app import create_app
from .cache_store import CacheStore
from .config import ProxySettings
from .fetcher import ImageFetcher
from .gallery import GallerySeeker

__all__ = ["create_app", "CacheStore", "ProxySettings", "ImageFetcher", "GallerySeeker"]
