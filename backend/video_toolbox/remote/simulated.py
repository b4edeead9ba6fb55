"""
Simulated remote provider for development and tests.

No network access. Metadata is canned and the "download" copies a sample
file (or writes an empty one) then reports progress in fixed steps.
"""

import logging
import shutil
import time
from pathlib import Path
from typing import List, Optional, Union

from ..execution.events import CompletedEvent, EventStream, FailedEvent, ProgressEvent
from .base import RemoteVideoProvider, extract_video_id
from .errors import InvalidVideoUrlError
from .models import VideoFormat, VideoInfo

logger = logging.getLogger(__name__)

DEFAULT_FORMATS: List[VideoFormat] = [
    VideoFormat(
        itag=22,
        quality="720p",
        mime_type='video/mp4; codecs="avc1.64001F, mp4a.40.2"',
        container="mp4",
        has_video=True,
        has_audio=True,
        codecs="H.264, AAC",
        bitrate=2000000,
    ),
    VideoFormat(
        itag=18,
        quality="360p",
        mime_type='video/mp4; codecs="avc1.42001E, mp4a.40.2"',
        container="mp4",
        has_video=True,
        has_audio=True,
        codecs="H.264, AAC",
        bitrate=500000,
    ),
    VideoFormat(
        itag=43,
        quality="360p",
        mime_type='video/webm; codecs="vp8.0, vorbis"',
        container="webm",
        has_video=True,
        has_audio=True,
        codecs="VP8, Vorbis",
        bitrate=500000,
    ),
]


class SimulatedProvider(RemoteVideoProvider):
    """Offline stand-in for a real provider."""

    def __init__(
        self,
        sample_video_path: Optional[Union[str, Path]] = None,
        step_delay: float = 0.5,
        step: int = 10,
    ):
        self.sample_video_path = Path(sample_video_path) if sample_video_path else None
        self.step_delay = step_delay
        self.step = step

    @property
    def name(self) -> str:
        return "simulated"

    def get_info(self, url: str) -> VideoInfo:
        video_id = extract_video_id(url)
        if video_id is None:
            raise InvalidVideoUrlError(url)

        return VideoInfo(
            video_id=video_id,
            title=f"Sample video {video_id}",
            author="Sample channel",
            thumbnail_url=f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
            duration=0,
            formats=DEFAULT_FORMATS,
        )

    def download(self, url: str, video_format: VideoFormat, output_path: str) -> EventStream:
        destination = Path(output_path)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if self.sample_video_path is not None and self.sample_video_path.is_file():
                shutil.copyfile(self.sample_video_path, destination)
            else:
                destination.write_bytes(b"")
        except OSError as e:
            yield FailedEvent(f"Could not write {destination}: {e}")
            return

        logger.info(f"[Simulated] Downloading {url} (itag {video_format.itag}) to {destination}")

        progress = 0
        while progress < 100:
            if self.step_delay:
                time.sleep(self.step_delay)
            progress = min(progress + self.step, 100)
            yield ProgressEvent(progress)

        yield CompletedEvent(str(destination))
