"""
Logging setup.

One stdout handler on the root logger. Modules log through
logging.getLogger(__name__) with a bracketed component prefix.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the stdout handler at the given level. Safe to call twice."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in root.handlers:
        if getattr(handler, "_video_toolbox", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._video_toolbox = True  # type: ignore[attr-defined]
    root.addHandler(handler)
