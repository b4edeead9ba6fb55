"""
FFmpeg progress parsing.

FFmpeg reports the input duration once, then progress lines, on stderr:
    Duration: 00:02:00.00, start: 0.000000, bitrate: 1205 kb/s
    frame=   24 fps= 12 q=28.0 size=       0kB time=00:00:01.00 bitrate=   0.0kbits/s

We parse:
- Duration: HH:MM:SS.ss -> total length, unless the caller already knows it
- time=HH:MM:SS.ss -> current position
- Position against duration -> percentage
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


# Matches: Duration: 00:02:00.00
DURATION_PATTERN = re.compile(r'Duration:\s*(\d{2}):(\d{2}):(\d{2})\.(\d{2})')

# Matches: time=00:00:01.00 or time=00:01:23.45
TIME_PATTERN = re.compile(r'time=(\d{2}):(\d{2}):(\d{2})\.(\d{2})')

# Matches: speed=1.52x
SPEED_PATTERN = re.compile(r'speed=\s*([\d.]+)x')


def _to_seconds(match: "re.Match[str]") -> float:
    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3))
    centiseconds = int(match.group(4))
    return hours * 3600 + minutes * 60 + seconds + centiseconds / 100.0


@dataclass
class ProgressInfo:
    """Progress information for a running ffmpeg process."""

    # Progress percentage (0-100)
    progress_percent: float = 0.0

    # Current position in seconds
    current_time: float = 0.0

    # Total duration in seconds
    total_duration: float = 0.0

    # Encoding speed relative to realtime
    speed: Optional[float] = None

    last_update: datetime = field(default_factory=datetime.now)


class ProgressParser:
    """
    Parse FFmpeg stderr output for progress information.

    Usage:
        parser = ProgressParser(duration=120.0)
        for line in ffmpeg_stderr:
            progress = parser.parse_line(line)
            if progress:
                report(progress.progress_percent)
    """

    def __init__(self, duration: Optional[float] = None):
        """
        Args:
            duration: Expected output duration in seconds. When None or not
                positive, the first Duration line of the input is used.
        """
        self.duration = duration if duration and duration > 0 else 0.0
        self._progress = ProgressInfo(total_duration=self.duration)

    def parse_line(self, line: str) -> Optional[ProgressInfo]:
        """
        Parse a single line of FFmpeg stderr output.

        Returns:
            Updated ProgressInfo if the line carried a position, None otherwise
        """
        if self.duration <= 0:
            duration_match = DURATION_PATTERN.search(line)
            if duration_match:
                self.duration = _to_seconds(duration_match)
                self._progress.total_duration = self.duration
                return None

        time_match = TIME_PATTERN.search(line)
        if not time_match:
            return None

        current_time = _to_seconds(time_match)
        self._progress.current_time = current_time

        if self.duration > 0:
            self._progress.progress_percent = min(100.0, (current_time / self.duration) * 100.0)
        else:
            self._progress.progress_percent = 0.0

        speed_match = SPEED_PATTERN.search(line)
        if speed_match:
            self._progress.speed = float(speed_match.group(1))

        self._progress.last_update = datetime.now()
        return self._progress
