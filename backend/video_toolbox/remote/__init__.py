"""
Remote video providers: metadata lookup and download.
"""

from .errors import (
    ProviderError,
    InvalidVideoUrlError,
    VideoNotFoundError,
    FormatNotAvailableError,
)
from .models import VideoFormat, VideoInfo
from .base import RemoteVideoProvider, extract_video_id
from .simulated import SimulatedProvider
from .ytdlp import YtDlpProvider

__all__ = [
    # Errors
    "ProviderError",
    "InvalidVideoUrlError",
    "VideoNotFoundError",
    "FormatNotAvailableError",
    # Models
    "VideoFormat",
    "VideoInfo",
    # Providers
    "RemoteVideoProvider",
    "extract_video_id",
    "SimulatedProvider",
    "YtDlpProvider",
]
