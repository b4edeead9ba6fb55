"""
Video Toolbox backend.

HTTP API for asynchronous video operations (convert, trim, screenshot,
compress, remote download) executed in the background with ffmpeg.
"""

__version__ = "0.1.0"
