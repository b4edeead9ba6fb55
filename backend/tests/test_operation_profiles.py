"""
Tests for per-kind operation profiles.

These tests verify the engine arguments, output naming, statuses and
failure messages each operation kind contributes to the generic executor.
"""

from pathlib import Path

import pytest

from video_toolbox.execution.profiles import (
    CompressOperation,
    ConvertOperation,
    DownloadOperation,
    ScreenshotOperation,
    TrimOperation,
    build_profiles,
)
from video_toolbox.remote.simulated import DEFAULT_FORMATS, SimulatedProvider
from video_toolbox.storage.layout import StorageArea
from video_toolbox.tasks import (
    CompressionLevel,
    CompressionTask,
    ConversionTask,
    DownloadTask,
    ImageFormat,
    OutputFormat,
    ScreenshotQuality,
    ScreenshotTask,
    TargetResolution,
    TaskKind,
    TaskStatus,
    TrimTask,
)

from conftest import ScriptedEngine

INPUT = Path("/uploads/temp/abc.mp4")


def args_after(args, flag):
    return args[args.index(flag) + 1]


class TestConvertOperation:
    """Tests for format conversion."""

    @pytest.mark.parametrize("fmt, video_codec, audio_codec, muxer", [
        (OutputFormat.MP4, "libx264", "aac", "mp4"),
        (OutputFormat.MOV, "libx264", "aac", "mov"),
        (OutputFormat.AVI, "libxvid", "libmp3lame", "avi"),
        (OutputFormat.WEBM, "libvpx", "libvorbis", "webm"),
        (OutputFormat.MKV, "libx264", "aac", "matroska"),
    ])
    def test_codec_table(self, fmt, video_codec, audio_codec, muxer):
        task = ConversionTask(input_file="abc.mp4", output_format=fmt)
        request = ConvertOperation(ScriptedEngine()).build_request(task, INPUT, Path("/out/abc.x"))

        assert args_after(request.output_args, "-c:v") == video_codec
        assert args_after(request.output_args, "-c:a") == audio_codec
        assert args_after(request.output_args, "-f") == muxer

    def test_gif_drops_audio(self):
        task = ConversionTask(input_file="abc.mp4", output_format=OutputFormat.GIF)
        request = ConvertOperation(ScriptedEngine()).build_request(task, INPUT, Path("/out/abc.gif"))

        assert "-an" in request.output_args
        assert args_after(request.output_args, "-f") == "gif"

    def test_output_name_keeps_stem(self):
        task = ConversionTask(input_file="abc.mp4", output_format=OutputFormat.WEBM)
        assert ConvertOperation(ScriptedEngine()).output_filename(task, "abc") == "abc.webm"


class TestTrimOperation:
    """Tests for clip extraction."""

    def test_seek_and_duration(self):
        task = TrimTask(input_file="abc.mp4", start_time=2, end_time=5, output_format=OutputFormat.MP4)
        request = TrimOperation(ScriptedEngine()).build_request(task, INPUT, Path("/out/t.mp4"))

        assert request.input_args == ["-ss", "2"]
        assert args_after(request.output_args, "-t") == "3"
        assert request.duration == 3
        assert args_after(request.output_args, "-c:v") == "libx264"

    def test_gif_clip_filter(self):
        task = TrimTask(input_file="abc.mp4", start_time=0.5, end_time=2, output_format=OutputFormat.GIF)
        request = TrimOperation(ScriptedEngine()).build_request(task, INPUT, Path("/out/t.gif"))

        assert args_after(request.output_args, "-vf") == "fps=10,scale=320:-1:flags=lanczos"
        assert "-an" in request.output_args
        assert request.input_args == ["-ss", "0.5"]

    def test_output_name(self):
        task = TrimTask(input_file="abc.mp4", start_time=2, end_time=5, output_format=OutputFormat.MOV)
        assert TrimOperation(ScriptedEngine()).output_filename(task, "abc") == "trimmed-abc.mov"


class TestScreenshotOperation:
    """Tests for single-frame capture."""

    @pytest.mark.parametrize("fmt, quality, qscale", [
        (ImageFormat.JPG, ScreenshotQuality.LOW, "10"),
        (ImageFormat.JPG, ScreenshotQuality.MEDIUM, "5"),
        (ImageFormat.JPG, ScreenshotQuality.HIGH, "2"),
        (ImageFormat.PNG, ScreenshotQuality.LOW, "2"),
        (ImageFormat.PNG, ScreenshotQuality.MEDIUM, "5"),
        (ImageFormat.PNG, ScreenshotQuality.HIGH, "9"),
    ])
    def test_quality_tiers(self, fmt, quality, qscale):
        task = ScreenshotTask(input_file="abc.mp4", timestamp=12.5, format=fmt, quality=quality)
        request = ScreenshotOperation(ScriptedEngine()).build_request(task, INPUT, Path("/out/s.img"))

        assert request.input_args == ["-ss", "12.5"]
        assert args_after(request.output_args, "-frames:v") == "1"
        assert args_after(request.output_args, "-q:v") == qscale

    def test_progress_jumps_on_start(self):
        task = ScreenshotTask(input_file="abc.mp4", timestamp=1, format=ImageFormat.PNG, quality=ScreenshotQuality.LOW)
        request = ScreenshotOperation(ScriptedEngine()).build_request(task, INPUT, Path("/out/s.png"))
        assert request.progress_on_start == 50

    def test_output_name(self):
        task = ScreenshotTask(input_file="abc.mp4", timestamp=3, format=ImageFormat.JPG, quality=ScreenshotQuality.HIGH)
        assert ScreenshotOperation(ScriptedEngine()).output_filename(task, "abc") == "screenshot-abc-3.jpg"


class TestCompressOperation:
    """Tests for size reduction."""

    def make_task(self, level, resolution):
        return CompressionTask(input_file="abc.mp4", compression_level=level, resolution=resolution)

    def test_high_compression_at_480p(self):
        task = self.make_task(CompressionLevel.HIGH, TargetResolution.SD)
        request = CompressOperation(ScriptedEngine()).build_request(task, INPUT, Path("/out/c.mp4"))
        args = request.output_args

        assert args_after(args, "-b:v") == "1000k"
        assert args_after(args, "-b:a") == "96k"
        assert args_after(args, "-preset") == "veryslow"
        assert args_after(args, "-crf") == "23"
        assert args_after(args, "-vf") == "scale=-2:480,hqdn3d"
        assert args_after(args, "-movflags") == "+faststart"
        assert args_after(args, "-f") == "mp4"

    def test_light_compression_keeps_resolution_without_denoise(self):
        task = self.make_task(CompressionLevel.LIGHT, TargetResolution.ORIGINAL)
        request = CompressOperation(ScriptedEngine()).build_request(task, INPUT, Path("/out/c.mp4"))

        assert "-vf" not in request.output_args
        assert args_after(request.output_args, "-b:v") == "5000k"
        assert args_after(request.output_args, "-preset") == "medium"

    def test_medium_compression_denoise_only(self):
        task = self.make_task(CompressionLevel.MEDIUM, TargetResolution.ORIGINAL)
        request = CompressOperation(ScriptedEngine()).build_request(task, INPUT, Path("/out/c.mp4"))

        assert args_after(request.output_args, "-vf") == "hqdn3d"
        assert args_after(request.output_args, "-b:a") == "128k"

    def test_completion_reports_output_size(self, tmp_path):
        artifact = tmp_path / "compressed-abc.mp4"
        artifact.write_bytes(b"x" * 123)
        task = self.make_task(CompressionLevel.MEDIUM, TargetResolution.HD)

        fields = CompressOperation(ScriptedEngine()).completion_fields(task, artifact)

        assert fields == {"output_size": 123}

    def test_output_name_is_always_mp4(self):
        task = self.make_task(CompressionLevel.HIGH, TargetResolution.FHD)
        assert CompressOperation(ScriptedEngine()).output_filename(task, "abc") == "compressed-abc.mp4"


class TestDownloadOperation:
    """Tests for remote downloads."""

    def test_downloads_into_downloads_area(self, storage):
        task = DownloadTask(url="https://youtu.be/dQw4w9WgXcQ", format=DEFAULT_FORMATS[2])
        profile = DownloadOperation(SimulatedProvider(step_delay=0))

        location = profile.output_location(storage, task, None)

        assert location == storage.downloads_dir / f"{task.id}.webm"
        assert profile.active_status == TaskStatus.DOWNLOADING
        assert profile.output_area == StorageArea.DOWNLOADS


class TestBuildProfiles:
    """Tests for the profile table."""

    def test_one_profile_per_kind(self):
        profiles = build_profiles(ScriptedEngine(), SimulatedProvider(step_delay=0))

        assert set(profiles) == set(TaskKind)
        for kind, profile in profiles.items():
            assert profile.kind == kind
            assert profile.failure_message.startswith("An error occurred while")

    def test_ffmpeg_kinds_process(self):
        profiles = build_profiles(ScriptedEngine(), SimulatedProvider(step_delay=0))
        for kind in (TaskKind.CONVERT, TaskKind.TRIM, TaskKind.SCREENSHOT, TaskKind.COMPRESS):
            assert profiles[kind].active_status == TaskStatus.PROCESSING
            assert profiles[kind].output_area == StorageArea.OUTPUTS
