"""
Remote video metadata models.

VideoFormat describes one encoding offered by the remote provider.
The itag is the opaque selector a client sends back to request a download.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class VideoFormat(BaseModel):
    """A single downloadable encoding of a remote video."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    itag: int
    quality: str
    mime_type: str
    container: str
    has_video: bool
    has_audio: bool
    codecs: str
    bitrate: int
    size: Optional[int] = None  # Unknown for most formats


class VideoInfo(BaseModel):
    """Descriptive metadata for a remote video."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    video_id: str
    title: str
    author: str
    thumbnail_url: str
    duration: int  # Seconds
    formats: List[VideoFormat]

    def find_format(self, itag: int) -> Optional[VideoFormat]:
        """Return the format with the given itag, if offered."""
        for fmt in self.formats:
            if fmt.itag == itag:
                return fmt
        return None
