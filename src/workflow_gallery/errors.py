"""Exception types shared by the connector, catalog and API layers."""

from __future__ import annotations


class GalleryError(Exception):
    """Base error for the workflow gallery."""

    def __init__(self, message: str, error_type: str = "gallery_error"):
        self.error_type = error_type
        super().__init__(message)


class TransportError(GalleryError):
    """The upstream host could not be reached (network failure or timeout)."""

    def __init__(self, message: str, url: str = ""):
        self.url = url
        super().__init__(message, "transport_error")


class UpstreamStatusError(GalleryError):
    """The upstream host answered with a non-2xx status."""

    def __init__(self, status: int, body: str = "", url: str = ""):
        self.status = status
        self.body = body
        self.url = url
        super().__init__(f"Upstream returned HTTP {status} for {url or 'request'}", "upstream_status")

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class ShapeError(GalleryError):
    """Upstream JSON did not have a recognised shape."""

    def __init__(self, message: str):
        super().__init__(message, "shape_error")


class NotFound(GalleryError):
    """The requested workflow filename is not in the current listing."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__("Workflow not found", "not_found")
