"""
Error taxonomy for visual property search.

ValidationError and ImageProcessingError abort a search call.
FetchError is returned by byte fetchers rather than raised, and is
recorded as a per-photo failure during indexing.
"""

from typing import Optional


class VisualSearchError(Exception):
    """Base class for all errors raised by this package."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(VisualSearchError):
    """Upload or search filter rejected at the boundary."""


class ImageProcessingError(VisualSearchError):
    """Bytes could not be decoded or resampled as a raster image."""


class FetchError(VisualSearchError):
    """A photo URL could not be retrieved."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)
