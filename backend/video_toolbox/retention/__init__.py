"""
Retention: periodic deletion of expired files and task records.
"""

from .reaper import RetentionReaper, SweepReport, REAPER_INTERVAL_SECONDS

__all__ = [
    "RetentionReaper",
    "SweepReport",
    "REAPER_INTERVAL_SECONDS",
]
