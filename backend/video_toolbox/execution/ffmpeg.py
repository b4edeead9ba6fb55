"""
FFmpeg execution engine.

Real transcoding via subprocess.Popen.

Design rules:
- One subprocess per task
- stderr is streamed line by line and parsed for progress
- Persist full command string in the log
- Non-zero exit code = FAILED
- Zero exit code without an output file = FAILED
- The process is killed if the consumer abandons the event stream
"""

import logging
import os
import shutil
import subprocess
from collections import deque
from pathlib import Path
from typing import Deque, List, Optional

from .base import MediaEngine, EngineRequest
from .errors import EngineNotAvailableError, OutputVerificationError
from .events import EventStream, ProgressEvent, CompletedEvent, FailedEvent
from .progress import ProgressParser

logger = logging.getLogger(__name__)

# Lines of stderr kept for the failure reason
STDERR_TAIL_LINES = 20


class FFmpegEngine(MediaEngine):
    """
    FFmpeg-based execution engine.

    Uses subprocess.Popen for real transcoding and reports progress parsed
    from stderr.
    """

    def __init__(self, ffmpeg_path: Optional[str] = None):
        """
        Args:
            ffmpeg_path: Explicit binary path. Discovered from PATH when None.
        """
        self._ffmpeg_path: Optional[str] = ffmpeg_path

    @property
    def name(self) -> str:
        return "FFmpeg"

    @property
    def available(self) -> bool:
        """Check if ffmpeg is installed and accessible."""
        return self._find_ffmpeg() is not None

    def _find_ffmpeg(self) -> Optional[str]:
        """Find ffmpeg binary path."""
        if self._ffmpeg_path:
            return self._ffmpeg_path

        # Try to find ffmpeg in PATH
        ffmpeg_path = shutil.which("ffmpeg")
        if ffmpeg_path:
            self._ffmpeg_path = ffmpeg_path
            return ffmpeg_path

        # Common install locations
        common_paths = [
            "/usr/local/bin/ffmpeg",
            "/usr/bin/ffmpeg",
            "/opt/homebrew/bin/ffmpeg",
        ]
        for path in common_paths:
            if os.path.isfile(path) and os.access(path, os.X_OK):
                self._ffmpeg_path = path
                return path

        return None

    def build_command(self, request: EngineRequest) -> List[str]:
        """
        Build FFmpeg command line arguments.

        Raises:
            EngineNotAvailableError: If ffmpeg cannot be found
        """
        ffmpeg_path = self._find_ffmpeg()
        if not ffmpeg_path:
            raise EngineNotAvailableError(self.name, "ffmpeg is not installed or not in PATH")

        cmd = [ffmpeg_path, "-hide_banner", "-y"]  # -y to overwrite output
        cmd.extend(request.input_args)
        cmd.extend(["-i", request.input_path])
        cmd.extend(request.output_args)
        cmd.append(request.output_path)
        return cmd

    def run(self, request: EngineRequest) -> EventStream:
        """
        Execute a request with FFmpeg.

        Yields ProgressEvent while encoding, then one CompletedEvent or
        FailedEvent.
        """
        try:
            cmd = self.build_command(request)
        except EngineNotAvailableError as e:
            logger.error(f"[FFmpeg] {e}")
            yield FailedEvent(str(e))
            return

        output_path = Path(request.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        # Log the command for audit
        logger.info(f"[FFmpeg] Executing: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.error(f"[FFmpeg] Failed to start: {e}")
            yield FailedEvent(f"Failed to start FFmpeg: {e}")
            return

        logger.info(f"[FFmpeg] Started PID {process.pid}")

        try:
            if request.progress_on_start is not None:
                yield ProgressEvent(request.progress_on_start)

            parser = ProgressParser(duration=request.duration)
            stderr_tail: Deque[str] = deque(maxlen=STDERR_TAIL_LINES)

            # Universal newlines split ffmpeg's carriage-return progress lines
            assert process.stderr is not None
            for line in process.stderr:
                stderr_tail.append(line.rstrip())
                progress = parser.parse_line(line)
                if progress is not None:
                    yield ProgressEvent(progress.progress_percent)

            exit_code = process.wait()
            logger.info(f"[FFmpeg] PID {process.pid} exited with code {exit_code}")

            # Non-zero exit = FAILED
            if exit_code != 0:
                tail = "\n".join(line for line in stderr_tail if line)
                failure_reason = tail or f"FFmpeg exited with code {exit_code}"
                logger.error(f"[FFmpeg] Failed: {failure_reason}")
                yield FailedEvent(failure_reason)
                return

            # Verify output exists
            if not output_path.is_file():
                yield FailedEvent(str(OutputVerificationError(str(output_path))))
                return

            logger.info(f"[FFmpeg] Completed: {output_path}")
            yield CompletedEvent(str(output_path))

        finally:
            if process.poll() is None:
                logger.warning(f"[FFmpeg] Killing abandoned PID {process.pid}")
                process.kill()
                process.wait()
            if process.stderr is not None:
                process.stderr.close()
