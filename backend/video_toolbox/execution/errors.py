"""
Execution-specific errors.

All errors are non-fatal to the application.
They indicate that one task cannot be processed; the service keeps running.
"""


class ExecutionError(Exception):
    """
    Base exception for execution failures.

    All execution errors inherit from this.
    """

    pass


class EngineNotAvailableError(ExecutionError):
    """Raised when the transcoding binary cannot be found."""

    def __init__(self, engine_name: str, reason: str = ""):
        self.engine_name = engine_name
        self.reason = reason
        message = f"Engine '{engine_name}' is not available"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class OutputVerificationError(ExecutionError):
    """
    Output verification failed.

    Raised when the engine reports success but the artifact is missing.
    """

    def __init__(self, output_path: str):
        self.output_path = output_path
        super().__init__(f"Output file was not created: {output_path}")
