"""
Service configuration.

Settings are read once from environment variables by Settings.from_env()
and passed explicitly to the application factory. Invalid values fail at
startup with ConfigError instead of surfacing later in a request.
"""

import os
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ConfigError(Exception):
    """Raised when an environment variable holds an invalid value."""

    def __init__(self, variable: str, reason: str):
        self.variable = variable
        self.reason = reason
        super().__init__(f"Invalid configuration for {variable}: {reason}")


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


class RemoteProviderKind(str, Enum):
    YTDLP = "ytdlp"
    SIMULATED = "simulated"


def parse_cors_origins(value: str) -> List[str]:
    """
    Parse CORS_ORIGIN.

    "*" allows every origin; otherwise a single origin or a comma-separated
    list.
    """
    origins = [origin.strip() for origin in value.split(",") if origin.strip()]
    return origins or ["*"]


class Settings(BaseModel):
    """Runtime settings for the API server and its background workers."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    environment: Environment = Environment.DEVELOPMENT
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Storage
    uploads_dir: Path = Path("./public/uploads")
    max_file_size: int = Field(default=500 * 1024 * 1024, gt=0)  # 500MB

    # Retention
    file_retention_hours: float = Field(default=24, gt=0)
    task_retention_hours: Optional[float] = Field(default=None, gt=0)
    reaper_interval_seconds: float = Field(default=3600, gt=0)

    # Execution
    worker_threads: int = Field(default=4, ge=1)
    ffmpeg_path: Optional[str] = None

    # Remote provider
    remote_provider: RemoteProviderKind = RemoteProviderKind.YTDLP
    sample_video_path: Optional[Path] = None

    @property
    def file_retention(self) -> timedelta:
        return timedelta(hours=self.file_retention_hours)

    @property
    def task_retention(self) -> timedelta:
        """Record retention; follows the file window unless set."""
        if self.task_retention_hours is None:
            return self.file_retention
        return timedelta(hours=self.task_retention_hours)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ConfigError: If any variable is malformed or out of range
        """
        env = os.environ if environ is None else environ

        # environment variable -> field name
        mapping = {
            "HOST": "host",
            "PORT": "port",
            "ENVIRONMENT": "environment",
            "UPLOADS_DIR": "uploads_dir",
            "MAX_FILE_SIZE": "max_file_size",
            "FILE_RETENTION_HOURS": "file_retention_hours",
            "TASK_RETENTION_HOURS": "task_retention_hours",
            "REAPER_INTERVAL_SECONDS": "reaper_interval_seconds",
            "WORKER_THREADS": "worker_threads",
            "FFMPEG_PATH": "ffmpeg_path",
            "LOG_LEVEL": "log_level",
            "REMOTE_PROVIDER": "remote_provider",
            "SAMPLE_VIDEO_PATH": "sample_video_path",
        }

        values = {}
        for variable, field_name in mapping.items():
            raw = env.get(variable)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()

        cors = env.get("CORS_ORIGIN")
        if cors is not None and cors.strip():
            values["cors_origins"] = parse_cors_origins(cors)

        log_level = env.get("LOG_LEVEL")
        if log_level is not None and log_level.strip():
            values["log_level"] = log_level.strip().upper()

        try:
            return cls(**values)
        except ValidationError as e:
            error = e.errors()[0]
            field_name = str(error["loc"][0]) if error["loc"] else ""
            variable = next(
                (var for var, name in mapping.items() if name == field_name),
                field_name.upper(),
            )
            raise ConfigError(variable, error["msg"]) from e
