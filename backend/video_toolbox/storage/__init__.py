"""
Storage: uploads root layout, upload staging and safe artifact resolution.
"""

from .errors import (
    StorageError,
    ArtifactAccessError,
    UnsafePathError,
    PathOutsideRootError,
    ArtifactNotFoundError,
    NotAFileError,
    UploadRejectedError,
    UploadTooLargeError,
)
from .layout import StorageArea, StorageLayout, remove_if_exists

__all__ = [
    "StorageError",
    "ArtifactAccessError",
    "UnsafePathError",
    "PathOutsideRootError",
    "ArtifactNotFoundError",
    "NotAFileError",
    "UploadRejectedError",
    "UploadTooLargeError",
    "StorageArea",
    "StorageLayout",
    "remove_if_exists",
]
