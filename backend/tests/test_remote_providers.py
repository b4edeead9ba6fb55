"""
Tests for remote video providers.

yt-dlp is never contacted: YoutubeDL is replaced with a stub that returns
canned metadata and replays progress hook updates on download.
"""

from pathlib import Path

import pytest

from video_toolbox.execution.events import CompletedEvent, FailedEvent, ProgressEvent
from video_toolbox.execution.executor import TaskExecutor
from video_toolbox.execution.profiles import DownloadOperation
from video_toolbox.remote import (
    InvalidVideoUrlError,
    SimulatedProvider,
    VideoNotFoundError,
    YtDlpProvider,
    extract_video_id,
)
from video_toolbox.remote import ytdlp as ytdlp_module
from video_toolbox.remote.ytdlp import format_from_ytdlp
from video_toolbox.tasks import DownloadTask, TaskStatus


class TestExtractVideoId:
    """Tests for URL parsing."""

    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "https://www.youtube.com/v/dQw4w9WgXcQ",
    ])
    def test_recognized_forms(self, url):
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    @pytest.mark.parametrize("url", [
        "",
        "https://example.com/video.mp4",
        "https://www.youtube.com/watch?v=short",
    ])
    def test_rejected_forms(self, url):
        assert extract_video_id(url) is None


class TestSimulatedProvider:
    """Tests for the offline provider."""

    def test_info_has_default_formats(self):
        info = SimulatedProvider().get_info("https://youtu.be/dQw4w9WgXcQ")

        assert info.video_id == "dQw4w9WgXcQ"
        assert [fmt.itag for fmt in info.formats] == [22, 18, 43]
        assert info.find_format(43).container == "webm"
        assert info.find_format(999) is None

        dumped = info.model_dump(mode="json", by_alias=True)
        assert "thumbnailUrl" in dumped
        assert "mimeType" in dumped["formats"][0]

    def test_invalid_url(self):
        with pytest.raises(InvalidVideoUrlError):
            SimulatedProvider().get_info("https://example.com/")

    def test_download_copies_sample_in_steps(self, tmp_path):
        sample = tmp_path / "sample.mp4"
        sample.write_bytes(b"sample video")
        provider = SimulatedProvider(sample, step_delay=0)
        fmt = provider.get_info("https://youtu.be/dQw4w9WgXcQ").formats[0]
        output = tmp_path / "downloads" / "task.mp4"

        events = list(provider.download("https://youtu.be/dQw4w9WgXcQ", fmt, str(output)))

        assert [event.percent for event in events[:-1]] == [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
        assert all(isinstance(event, ProgressEvent) for event in events[:-1])
        assert events[-1] == CompletedEvent(str(output))
        assert output.read_bytes() == b"sample video"

    def test_download_without_sample_writes_empty_file(self, tmp_path):
        provider = SimulatedProvider(step_delay=0)
        fmt = provider.get_info("https://youtu.be/dQw4w9WgXcQ").formats[1]
        output = tmp_path / "task.mp4"

        events = list(provider.download("https://youtu.be/dQw4w9WgXcQ", fmt, str(output)))

        assert isinstance(events[-1], CompletedEvent)
        assert output.read_bytes() == b""


class FakeYoutubeDL:
    """Stand-in for yt_dlp.YoutubeDL returning canned metadata."""

    info = None
    error = None
    hook_updates = []
    download_error = None
    writes_file = True

    def __init__(self, opts):
        self.opts = opts

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def extract_info(self, url, download=False):
        if self.error is not None:
            raise self.error
        return self.info

    def sanitize_info(self, info):
        return info

    def download(self, urls):
        for status in self.hook_updates:
            for hook in self.opts["progress_hooks"]:
                hook(status)
        if self.download_error is not None:
            raise self.download_error
        if self.writes_file:
            Path(self.opts["outtmpl"]).write_bytes(b"remote video")
        return 0


CANNED_INFO = {
    "id": "dQw4w9WgXcQ",
    "title": "Never Gonna Give You Up",
    "uploader": "Rick Astley",
    "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
    "duration": 212.0,
    "formats": [
        {"format_id": "18", "ext": "mp4", "vcodec": "avc1.42001E", "acodec": "mp4a.40.2",
         "format_note": "360p", "tbr": 500.5, "filesize": 1000},
        {"format_id": "140", "ext": "m4a", "vcodec": "none", "acodec": "mp4a.40.2",
         "format_note": "medium", "tbr": 129.5},
        {"format_id": "hls-720p", "ext": "mp4", "vcodec": "avc1", "acodec": "mp4a"},
    ],
}


class TestYtDlpProvider:
    """Tests for the yt-dlp mapping."""

    def test_format_mapping(self):
        fmt = format_from_ytdlp(CANNED_INFO["formats"][0])

        assert fmt.itag == 18
        assert fmt.container == "mp4"
        assert fmt.has_video and fmt.has_audio
        assert fmt.codecs == "avc1.42001E, mp4a.40.2"
        assert fmt.mime_type == 'video/mp4; codecs="avc1.42001E, mp4a.40.2"'
        assert fmt.bitrate == 500500
        assert fmt.size == 1000

    def test_audio_only_format(self):
        fmt = format_from_ytdlp(CANNED_INFO["formats"][1])

        assert not fmt.has_video
        assert fmt.has_audio
        assert fmt.mime_type.startswith("audio/m4a")
        assert fmt.size is None

    def test_non_numeric_format_ids_skipped(self):
        assert format_from_ytdlp(CANNED_INFO["formats"][2]) is None

    def test_get_info(self, monkeypatch):
        FakeYoutubeDL.info = CANNED_INFO
        FakeYoutubeDL.error = None
        monkeypatch.setattr(ytdlp_module.yt_dlp, "YoutubeDL", FakeYoutubeDL)

        info = YtDlpProvider().get_info("https://youtu.be/dQw4w9WgXcQ")

        assert info.title == "Never Gonna Give You Up"
        assert info.author == "Rick Astley"
        assert info.duration == 212
        assert [fmt.itag for fmt in info.formats] == [18, 140]

    def test_get_info_not_found(self, monkeypatch):
        FakeYoutubeDL.info = None
        FakeYoutubeDL.error = ytdlp_module.DownloadError("Video unavailable")
        monkeypatch.setattr(ytdlp_module.yt_dlp, "YoutubeDL", FakeYoutubeDL)

        with pytest.raises(VideoNotFoundError):
            YtDlpProvider().get_info("https://youtu.be/dQw4w9WgXcQ")

    def test_get_info_rejects_non_youtube_url(self):
        with pytest.raises(InvalidVideoUrlError):
            YtDlpProvider().get_info("https://vimeo.com/12345")


@pytest.fixture
def fake_ytdlp(monkeypatch):
    FakeYoutubeDL.info = CANNED_INFO
    FakeYoutubeDL.error = None
    FakeYoutubeDL.hook_updates = []
    FakeYoutubeDL.download_error = None
    FakeYoutubeDL.writes_file = True
    monkeypatch.setattr(ytdlp_module.yt_dlp, "YoutubeDL", FakeYoutubeDL)
    return FakeYoutubeDL


def itag_18():
    return format_from_ytdlp(CANNED_INFO["formats"][0])


class TestYtDlpDownload:
    """Tests for YtDlpProvider.download() event streams."""

    def test_hook_progress_then_completed(self, fake_ytdlp, tmp_path):
        fake_ytdlp.hook_updates = [
            {"status": "downloading", "downloaded_bytes": 250, "total_bytes": 1000},
            {"status": "downloading", "downloaded_bytes": 500, "total_bytes_estimate": 1000},
            {"status": "downloading", "downloaded_bytes": 100},
            {"status": "finished", "downloaded_bytes": 1000, "total_bytes": 1000},
        ]
        output = tmp_path / "downloads" / "task.mp4"

        events = list(YtDlpProvider().download("https://youtu.be/dQw4w9WgXcQ", itag_18(), str(output)))

        assert events == [ProgressEvent(25.0), ProgressEvent(50.0), CompletedEvent(str(output))]
        assert output.read_bytes() == b"remote video"

    def test_download_error_becomes_failed_event(self, fake_ytdlp, tmp_path):
        fake_ytdlp.download_error = ytdlp_module.DownloadError("Requested format is not available")

        events = list(YtDlpProvider().download("https://youtu.be/dQw4w9WgXcQ", itag_18(), str(tmp_path / "t.mp4")))

        assert len(events) == 1
        assert isinstance(events[0], FailedEvent)
        assert "not available" in events[0].reason

    def test_unexpected_error_becomes_failed_event(self, fake_ytdlp, tmp_path):
        fake_ytdlp.download_error = ValueError("extractor blew up")

        events = list(YtDlpProvider().download("https://youtu.be/dQw4w9WgXcQ", itag_18(), str(tmp_path / "t.mp4")))

        assert len(events) == 1
        assert isinstance(events[0], FailedEvent)
        assert "extractor blew up" in events[0].reason

    def test_finished_without_file_fails(self, fake_ytdlp, tmp_path):
        fake_ytdlp.writes_file = False

        events = list(YtDlpProvider().download("https://youtu.be/dQw4w9WgXcQ", itag_18(), str(tmp_path / "t.mp4")))

        assert isinstance(events[-1], FailedEvent)
        assert "without writing" in events[-1].reason

    def test_unexpected_error_ends_task_in_error(self, fake_ytdlp, registry, storage):
        fake_ytdlp.download_error = ValueError("extractor blew up")
        profile = DownloadOperation(YtDlpProvider())
        task = DownloadTask(url="https://youtu.be/dQw4w9WgXcQ", format=itag_18())
        registry.set(task.key, task)
        executor = TaskExecutor(registry, storage)

        try:
            executor.run(task.key, None, profile.output_location(storage, task, None), profile, task)
        finally:
            executor.shutdown()

        final = registry.get(task.key)
        assert final.status == TaskStatus.ERROR
        assert final.error == "An error occurred while downloading the video."
        assert final.output_path is None
