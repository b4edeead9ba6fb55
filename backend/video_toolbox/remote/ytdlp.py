"""
yt-dlp backed remote provider.

Metadata comes from extract_info(download=False). Only formats with a
numeric format_id (YouTube itags) are exposed, since the itag is the
selector clients send back.

Downloads run yt-dlp on a helper thread; its progress hook feeds a queue
that the event stream drains.
"""

import logging
import queue
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import yt_dlp
from yt_dlp.utils import DownloadError

from ..execution.events import (
    CapabilityEvent,
    CompletedEvent,
    EventStream,
    FailedEvent,
    ProgressEvent,
    is_terminal,
)
from .base import RemoteVideoProvider, extract_video_id
from .errors import InvalidVideoUrlError, VideoNotFoundError
from .models import VideoFormat, VideoInfo

logger = logging.getLogger(__name__)

# How often the event stream checks that the download thread is still alive
QUEUE_POLL_SECONDS = 1.0


def _has_stream(codec: Optional[str]) -> bool:
    return bool(codec) and codec != "none"


def format_from_ytdlp(entry: Dict[str, Any]) -> Optional[VideoFormat]:
    """Map one yt-dlp format dict to a VideoFormat, or None if it has no itag."""
    format_id = str(entry.get("format_id") or "")
    if not format_id.isdigit():
        return None

    vcodec = entry.get("vcodec")
    acodec = entry.get("acodec")
    has_video = _has_stream(vcodec)
    has_audio = _has_stream(acodec)
    container = entry.get("ext") or "mp4"
    codecs = [codec for codec in (vcodec, acodec) if _has_stream(codec)]
    major = "video" if has_video else "audio"

    mime_type = f"{major}/{container}"
    if codecs:
        mime_type += f'; codecs="{", ".join(codecs)}"'

    quality = entry.get("format_note") or entry.get("resolution") or ""
    bitrate = int((entry.get("tbr") or 0) * 1000)
    size = entry.get("filesize") or entry.get("filesize_approx")

    return VideoFormat(
        itag=int(format_id),
        quality=str(quality),
        mime_type=mime_type,
        container=container,
        has_video=has_video,
        has_audio=has_audio,
        codecs=", ".join(codecs),
        bitrate=bitrate,
        size=int(size) if size else None,
    )


def info_from_ytdlp(video_id: str, info: Dict[str, Any]) -> VideoInfo:
    formats: List[VideoFormat] = []
    for entry in info.get("formats") or []:
        fmt = format_from_ytdlp(entry)
        if fmt is not None:
            formats.append(fmt)

    return VideoInfo(
        video_id=info.get("id") or video_id,
        title=info.get("title") or "",
        author=info.get("uploader") or info.get("channel") or "",
        thumbnail_url=info.get("thumbnail") or "",
        duration=int(info.get("duration") or 0),
        formats=formats,
    )


class YtDlpProvider(RemoteVideoProvider):
    """Remote provider using the yt-dlp library."""

    @property
    def name(self) -> str:
        return "yt-dlp"

    def get_info(self, url: str) -> VideoInfo:
        video_id = extract_video_id(url)
        if video_id is None:
            raise InvalidVideoUrlError(url)

        opts = {"quiet": True, "no_warnings": True, "skip_download": True}
        logger.debug(f"[yt-dlp] get_info url={url}")
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                info = ydl.extract_info(url, download=False)
                info = ydl.sanitize_info(info)
        except DownloadError as e:
            raise VideoNotFoundError(url, str(e)) from e

        if not info:
            raise VideoNotFoundError(url)
        return info_from_ytdlp(video_id, info)

    def download(self, url: str, video_format: VideoFormat, output_path: str) -> EventStream:
        events: "queue.Queue[CapabilityEvent]" = queue.Queue()
        destination = Path(output_path)

        def hook(status: Dict[str, Any]) -> None:
            if status.get("status") != "downloading":
                return
            total = status.get("total_bytes") or status.get("total_bytes_estimate")
            downloaded = status.get("downloaded_bytes")
            if total and downloaded is not None:
                events.put(ProgressEvent(downloaded * 100.0 / total))

        def worker() -> None:
            opts = {
                "format": str(video_format.itag),
                "outtmpl": str(destination),
                "quiet": True,
                "no_warnings": True,
                "noprogress": True,
                "overwrites": True,
                "progress_hooks": [hook],
            }
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                with yt_dlp.YoutubeDL(opts) as ydl:
                    ydl.download([url])
            except (DownloadError, OSError) as e:
                events.put(FailedEvent(str(e)))
                return
            except Exception as e:
                logger.exception(f"[yt-dlp] Unexpected error downloading {url}")
                events.put(FailedEvent(f"Unexpected yt-dlp error: {e}"))
                return

            if destination.is_file():
                events.put(CompletedEvent(str(destination)))
            else:
                events.put(FailedEvent(f"yt-dlp finished without writing {destination}"))

        logger.info(f"[yt-dlp] Downloading {url} (itag {video_format.itag}) to {destination}")
        thread = threading.Thread(target=worker, daemon=True, name="ytdlp-download")
        thread.start()

        while True:
            try:
                event = events.get(timeout=QUEUE_POLL_SECONDS)
            except queue.Empty:
                # The worker always queues a terminal event before exiting
                if thread.is_alive() or not events.empty():
                    continue
                event = FailedEvent("yt-dlp download thread exited without a result")
            yield event
            if is_terminal(event):
                break
