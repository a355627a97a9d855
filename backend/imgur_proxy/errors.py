"""
Proxy Errors

Every failure the proxy can report to a client. Each error knows the HTTP
status it maps to and the resource identifier it was raised for, so the
exception handler can log and answer without inspecting the cause.
"""

from typing import Optional


class ProxyError(Exception):
    """Base class for failures surfaced at the handler boundary."""

    status_code: int = 500
    message: str = "internal error"

    def __init__(self, resource: str = "", cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.resource = resource
        self.cause = cause
        if message is not None:
            self.message = message
        detail = f"{self.message}: {resource}" if resource else self.message
        if cause is not None:
            detail = f"{detail} ({cause})"
        super().__init__(detail)


class MethodError(ProxyError):
    """Request used a verb other than GET."""
    status_code = 405
    message = "Want GET"


class RouteError(ProxyError):
    """Request path is not under the mount prefix."""
    status_code = 404
    message = "NOPE"


class FetchError(ProxyError):
    """Outbound request to the remote origin failed."""
    status_code = 500
    message = "error fetching image"


class ContentError(ProxyError):
    """Fetched bytes do not sniff as an image."""
    status_code = 404
    message = "not an image"


class ReadError(ProxyError):
    """Gallery body could not be fully read."""
    status_code = 500
    message = "error reading gallery"


class ScanError(ProxyError):
    """Gallery body could not be scanned line by line."""
    status_code = 500
    message = "error parsing gallery"


class TemplateError(ProxyError):
    """Gallery page could not be rendered."""
    status_code = 500
    message = "error serving template"
