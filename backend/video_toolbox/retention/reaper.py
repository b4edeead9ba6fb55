"""
Retention reaper.

Reclaims disk space and memory on a fixed interval:
- Files in the temp, downloads and outputs areas whose mtime is older than
  the file retention window are deleted (directories are left alone)
- Task records older than the task retention window are purged

The reaper only deletes. A failure on one file or one directory is logged
and the sweep moves on.
"""

import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from ..storage.layout import StorageLayout, remove_if_exists
from ..tasks.registry import TaskRegistry

logger = logging.getLogger(__name__)

# Default sweep interval
REAPER_INTERVAL_SECONDS = 3600

# Default retention window for files and records
DEFAULT_RETENTION = timedelta(hours=24)


@dataclass
class SweepReport:
    """Outcome of one sweep."""

    files_removed: int = 0
    tasks_removed: int = 0
    failures: int = 0


class RetentionReaper:
    """
    Periodic cleanup of expired files and task records.

    Runs in a background daemon thread. The first sweep happens
    immediately on start().
    """

    def __init__(
        self,
        storage: StorageLayout,
        registry: Optional[TaskRegistry] = None,
        file_retention: timedelta = DEFAULT_RETENTION,
        task_retention: Optional[timedelta] = None,
        interval: float = REAPER_INTERVAL_SECONDS,
    ):
        """
        Args:
            storage: Uploads layout whose areas are swept
            registry: Task registry to purge. Files only when None.
            file_retention: Maximum file age (by mtime)
            task_retention: Maximum record age. Defaults to file_retention.
            interval: Seconds between sweeps
        """
        self.storage = storage
        self.registry = registry
        self.file_retention = file_retention
        self.task_retention = task_retention if task_retention is not None else file_retention
        self.interval = interval

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sweep(self, now: Optional[datetime] = None) -> SweepReport:
        """Run one cleanup pass over every area and the registry."""
        now = now or datetime.now(timezone.utc)
        report = SweepReport()

        cutoff = (now - self.file_retention).timestamp()
        for directory in self.storage.all_areas():
            self._sweep_directory(directory, cutoff, report)

        if self.registry is not None:
            try:
                report.tasks_removed = self.registry.purge_expired(self.task_retention, now=now)
            except Exception as e:
                logger.error(f"[Reaper] Task purge failed: {e}")
                report.failures += 1

        if report.files_removed or report.tasks_removed or report.failures:
            logger.info(
                f"[Reaper] Sweep removed {report.files_removed} file(s) and "
                f"{report.tasks_removed} task(s), {report.failures} failure(s)"
            )
        return report

    def _sweep_directory(self, directory: Path, cutoff: float, report: SweepReport) -> None:
        if not directory.is_dir():
            return

        try:
            entries = list(os.scandir(directory))
        except OSError as e:
            logger.error(f"[Reaper] Could not scan {directory}: {e}")
            report.failures += 1
            return

        for entry in entries:
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                if entry.stat(follow_symlinks=False).st_mtime >= cutoff:
                    continue
                if remove_if_exists(entry.path):
                    report.files_removed += 1
                    logger.debug(f"[Reaper] Deleted expired file {entry.path}")
            except OSError as e:
                logger.warning(f"[Reaper] Could not delete {entry.path}: {e}")
                report.failures += 1

    def _reaper_loop(self) -> None:
        """Background thread that sweeps until stopped."""
        while not self._stop_event.wait(self.interval):
            try:
                self.sweep()
            except Exception:
                logger.exception("[Reaper] Sweep crashed")

    def start(self) -> None:
        """Sweep once, then start the background thread."""
        if self.running:
            return

        self._stop_event.clear()
        try:
            self.sweep()
        except Exception:
            logger.exception("[Reaper] Initial sweep crashed")

        self._thread = threading.Thread(
            target=self._reaper_loop,
            daemon=True,
            name="retention-reaper",
        )
        self._thread.start()
        logger.info(f"[Reaper] Started (interval {self.interval}s)")

    def stop(self, timeout: float = 2.0) -> None:
        """Wake the background thread and wait for it to exit."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("[Reaper] Stopped")
