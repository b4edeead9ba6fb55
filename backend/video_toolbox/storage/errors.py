"""
Storage-specific error types.

Artifact access errors carry the HTTP status the API layer should answer
with, so route handlers can translate them without a lookup table.
"""


class StorageError(Exception):
    """Base exception for storage failures."""
    pass


class ArtifactAccessError(StorageError):
    """Base exception for rejected artifact retrievals."""

    status_code = 400

    def __init__(self, requested_path: str, reason: str):
        self.requested_path = requested_path
        self.reason = reason
        super().__init__(reason)


class UnsafePathError(ArtifactAccessError):
    """Raised when a requested path is empty, absolute or contains '..'."""

    status_code = 400

    def __init__(self, requested_path: str):
        super().__init__(requested_path, "Invalid file path.")


class PathOutsideRootError(ArtifactAccessError):
    """Raised when a requested path resolves outside the uploads root."""

    status_code = 403

    def __init__(self, requested_path: str):
        super().__init__(requested_path, "Access denied.")


class ArtifactNotFoundError(ArtifactAccessError):
    """Raised when a requested artifact does not exist."""

    status_code = 404

    def __init__(self, requested_path: str):
        super().__init__(requested_path, "File not found.")


class NotAFileError(ArtifactAccessError):
    """Raised when a requested path is a directory or special file."""

    status_code = 400

    def __init__(self, requested_path: str):
        super().__init__(requested_path, "The requested path is not a file.")


class UploadRejectedError(StorageError):
    """Raised when an uploaded file cannot be staged."""

    status_code = 400

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class UploadTooLargeError(UploadRejectedError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413

    def __init__(self, max_size: int):
        self.max_size = max_size
        super().__init__(f"File exceeds the maximum upload size of {max_size} bytes.")
