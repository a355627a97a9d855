"""
Proxy Configuration

Defaults mirror the reference deployment: a two-entry cache and a 10 MiB
per-image read cap. Environment variables override the defaults, command
line flags (see main.py) override both.
"""

import os
import posixpath
from dataclasses import dataclass, field
from typing import Tuple

# ============================================
# Defaults
# ============================================

DEFAULT_HOST = "localhost:8080"
DEFAULT_PREFIX = "/"
CACHE_SIZE = 2
IMG_SIZE_LIMIT = 10 << 20

IMAGE_BASE_URL = "https://i.imgur.com/"
GALLERY_BASE_URL = "https://imgur.com/gallery/"

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


def normalize_prefix(prefix: str) -> str:
    """
    Clean a mount prefix into "/" or "/<segments>/".

    Examples:
        "" -> "/", "img" -> "/img/", "//img//" -> "/img/", "/a/../b" -> "/b/"
    """
    cleaned = posixpath.normpath("/" + prefix)
    # normpath keeps a leading "//" as-is
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    if cleaned != "/":
        cleaned += "/"
    return cleaned


def split_host(host: str) -> Tuple[str, int]:
    """Split "host:port" into its parts. An empty host binds all interfaces."""
    name, sep, port = host.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address {host!r}, want host:port")
    return name or "0.0.0.0", int(port)


@dataclass
class ProxySettings:
    """Runtime settings for one proxy process."""
    host: str = DEFAULT_HOST
    prefix: str = DEFAULT_PREFIX
    cache_size: int = CACHE_SIZE              # Entries kept after a trim
    image_size_limit: int = IMG_SIZE_LIMIT    # Max bytes read per image
    image_base_url: str = IMAGE_BASE_URL
    gallery_base_url: str = GALLERY_BASE_URL
    user_agent: str = field(default=USER_AGENT, repr=False)

    def __post_init__(self):
        self.prefix = normalize_prefix(self.prefix)
        if self.cache_size < 0:
            raise ValueError("cache_size must not be negative")
        if self.image_size_limit <= 0:
            raise ValueError("image_size_limit must be positive")

    @property
    def gallery_prefix(self) -> str:
        return self.prefix + "gallery/"

    @classmethod
    def from_env(cls, **overrides) -> "ProxySettings":
        """Build settings from IMGUR_PROXY_* variables, then apply overrides."""
        values = {
            "host": os.getenv("IMGUR_PROXY_HOST", DEFAULT_HOST),
            "prefix": os.getenv("IMGUR_PROXY_PREFIX", DEFAULT_PREFIX),
            "cache_size": int(os.getenv("IMGUR_PROXY_CACHE_SIZE", str(CACHE_SIZE))),
            "image_size_limit": int(os.getenv("IMGUR_PROXY_IMAGE_SIZE_LIMIT", str(IMG_SIZE_LIMIT))),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
