"""
Pytest configuration and shared fixtures.

ScriptedEngine stands in for ffmpeg and the simulated provider (with no
step delay) stands in for yt-dlp, so the suite needs neither.
"""

import time
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from video_toolbox.config import Environment, RemoteProviderKind, Settings
from video_toolbox.execution.base import EngineRequest, MediaEngine
from video_toolbox.execution.events import CompletedEvent, EventStream, FailedEvent, ProgressEvent
from video_toolbox.main import create_app
from video_toolbox.remote.simulated import SimulatedProvider
from video_toolbox.storage.layout import StorageLayout
from video_toolbox.tasks.registry import TaskRegistry


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "e2e: marks tests that exercise the HTTP layer and worker pool"
    )


class ScriptedEngine(MediaEngine):
    """
    Media engine that replays a fixed script instead of running ffmpeg.

    Yields one ProgressEvent per entry in progress, then fails with
    fail_reason if set, otherwise writes a small artifact and completes.
    """

    def __init__(
        self,
        progress: Sequence[float] = (25, 50, 75),
        fail_reason: Optional[str] = None,
        available: bool = True,
    ):
        self.progress = list(progress)
        self.fail_reason = fail_reason
        self._available = available
        self.requests = []

    @property
    def name(self) -> str:
        return "scripted"

    @property
    def available(self) -> bool:
        return self._available

    def run(self, request: EngineRequest) -> EventStream:
        self.requests.append(request)
        for percent in self.progress:
            yield ProgressEvent(percent)

        if self.fail_reason is not None:
            yield FailedEvent(self.fail_reason)
            return

        output = Path(request.output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(b"artifact")
        yield CompletedEvent(str(output))


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll predicate until it holds or the timeout expires."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not met before timeout")
        time.sleep(0.02)


def wait_for_terminal(client: TestClient, kind: str, task_id: str, timeout: float = 5.0) -> dict:
    """Poll the status endpoint until the task is completed or failed."""
    snapshot = {}

    def terminal() -> bool:
        nonlocal snapshot
        snapshot = client.get(f"/api/video/{kind}/{task_id}").json()["data"]
        return snapshot["status"] in ("completed", "error")

    wait_until(terminal, timeout)
    return snapshot


@pytest.fixture
def storage(tmp_path):
    layout = StorageLayout(tmp_path / "uploads")
    layout.ensure_directories()
    return layout


@pytest.fixture
def registry():
    return TaskRegistry()


@pytest.fixture
def engine():
    return ScriptedEngine()


@pytest.fixture
def provider():
    return SimulatedProvider(step_delay=0)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        uploads_dir=tmp_path / "uploads",
        environment=Environment.TEST,
        remote_provider=RemoteProviderKind.SIMULATED,
        worker_threads=2,
        max_file_size=1024 * 1024,
    )


@pytest.fixture
def app(settings, engine, provider):
    return create_app(settings=settings, engine=engine, provider=provider)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
