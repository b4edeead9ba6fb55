"""
Remote video provider abstraction.

A provider answers two questions:
- get_info: what is this video, and which encodings can be fetched?
- download: fetch one encoding to a local file, reporting progress

The provider is chosen once at startup (real yt-dlp backed provider or the
simulated development provider) and never switched per request.
"""

import re
from abc import ABC, abstractmethod
from typing import Optional

from ..execution.events import EventStream
from .models import VideoFormat, VideoInfo

# Matches watch?v=, youtu.be/, embed/, v/ and /u/x/ URL forms
_VIDEO_ID_PATTERN = re.compile(
    r"^.*((youtu\.be/)|(v/)|(/u/\w/)|(embed/)|(watch\?))\??v?=?([^#&?]*).*"
)


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract the 11-character YouTube video id from a URL.

    Returns:
        The video id, or None if the URL is not a recognizable video URL
    """
    match = _VIDEO_ID_PATTERN.match(url or "")
    if match and len(match.group(7)) == 11:
        return match.group(7)
    return None


class RemoteVideoProvider(ABC):
    """Abstract base class for remote video providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def get_info(self, url: str) -> VideoInfo:
        """
        Fetch descriptive metadata and the available encodings.

        Raises:
            InvalidVideoUrlError: URL is not a YouTube video URL
            VideoNotFoundError: The provider could not read the video
        """
        pass

    @abstractmethod
    def download(self, url: str, video_format: VideoFormat, output_path: str) -> EventStream:
        """
        Fetch one encoding to output_path.

        Yields ProgressEvent as bytes arrive, then exactly one CompletedEvent
        or FailedEvent.
        """
        pass
