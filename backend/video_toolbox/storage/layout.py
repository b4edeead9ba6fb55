"""
Uploads directory layout.

All files live under one uploads root with three areas:

    <root>/temp/        staged uploads awaiting an executor
    <root>/downloads/   remote videos fetched by the download executor
    <root>/outputs/     artifacts produced by ffmpeg operations

Clients address artifacts by their path relative to the root
(e.g. "outputs/clip.mp4"). resolve_artifact() is the only way such a path
is turned back into a filesystem location.
"""

import logging
import os
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import List, Union

from .errors import (
    UnsafePathError,
    PathOutsideRootError,
    ArtifactNotFoundError,
    NotAFileError,
)

logger = logging.getLogger(__name__)


class StorageArea(str, Enum):
    TEMP = "temp"
    DOWNLOADS = "downloads"
    OUTPUTS = "outputs"


class StorageLayout:
    """Filesystem locations for staged, downloaded and produced files."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def area(self, area: StorageArea) -> Path:
        return self.root / area.value

    @property
    def temp_dir(self) -> Path:
        return self.area(StorageArea.TEMP)

    @property
    def downloads_dir(self) -> Path:
        return self.area(StorageArea.DOWNLOADS)

    @property
    def outputs_dir(self) -> Path:
        return self.area(StorageArea.OUTPUTS)

    def all_areas(self) -> List[Path]:
        return [self.area(area) for area in StorageArea]

    def ensure_directories(self) -> None:
        """Create the root and every area if missing."""
        for directory in self.all_areas():
            directory.mkdir(parents=True, exist_ok=True)

    def web_path(self, path: Union[str, Path]) -> str:
        """
        Convert an absolute path under the root to its client-facing form.

        Always uses forward slashes.
        """
        relative = Path(path).resolve().relative_to(self.root)
        return relative.as_posix()

    def resolve_artifact(self, requested: str) -> Path:
        """
        Resolve a client-supplied relative path to a file under the root.

        Rejects, regardless of nesting depth:
        - empty or absolute paths, and any path with a '..' segment
        - paths whose resolved location (symlinks included) leaves the root

        Raises:
            UnsafePathError: Path is malformed or attempts traversal (400)
            PathOutsideRootError: Resolved path escapes the root (403)
            ArtifactNotFoundError: Nothing exists at the path (404)
            NotAFileError: Path exists but is not a regular file (400)
        """
        if not requested or not requested.strip() or "\x00" in requested:
            raise UnsafePathError(requested)

        # Treat backslashes as separators so Windows-style traversal is caught
        normalized = requested.replace("\\", "/")
        posix = PurePosixPath(normalized)
        if posix.is_absolute() or os.path.isabs(requested) or ".." in posix.parts:
            raise UnsafePathError(requested)

        candidate = (self.root / Path(*posix.parts)).resolve()
        if not candidate.is_relative_to(self.root):
            logger.warning(f"[Storage] Rejected path outside root: {requested!r} -> {candidate}")
            raise PathOutsideRootError(requested)

        if not candidate.exists():
            raise ArtifactNotFoundError(requested)

        if not candidate.is_file():
            raise NotAFileError(requested)

        return candidate


def remove_if_exists(path: Union[str, Path]) -> bool:
    """
    Delete a file if it still exists.

    Idempotent: an executor and the reaper may both try to remove the same
    staged upload.

    Returns:
        True if a file was deleted

    Raises:
        OSError: If the file exists but cannot be deleted
    """
    try:
        os.unlink(path)
        return True
    except FileNotFoundError:
        return False
