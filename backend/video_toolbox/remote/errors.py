"""
Remote provider error types.

All errors inherit from ProviderError for easy catching.
"""


class ProviderError(Exception):
    """Base exception for remote provider failures."""
    pass


class InvalidVideoUrlError(ProviderError):
    """Raised when a URL does not identify a YouTube video."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Not a valid YouTube URL: {url}")


class VideoNotFoundError(ProviderError):
    """Raised when the provider cannot find or read the video."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Video not found: {url}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class FormatNotAvailableError(ProviderError):
    """Raised when the requested itag is not offered for the video."""

    def __init__(self, url: str, itag: int):
        self.url = url
        self.itag = itag
        super().__init__(f"Format {itag} is not available for {url}")
