"""Test configuration and fixtures."""

import json
import socket
import threading
import time
from pathlib import Path

import pytest
import uvicorn

from ws_workflow_mock.config import MockServerSettings
from ws_workflow_mock.server.app import create_app
from ws_workflow_mock.workflow.steps import Step, StepDirection

RETRAIN_SCRIPT = [
    {"type": "client", "payload": {"action": "retrain", "model": "m-1"}},
    {"type": "server", "payload": {"message": "retrain_started"}},
    {"type": "server", "payload": {"message": "progress", "data": {"pct": 50}}},
    {"type": "reconnect"},
    {"type": "server", "payload": {"message": "retrain_done"}},
    {"type": "client", "payload": {"action": "ack"}},
]


class RecordingConnection:
    """In-memory stand-in for a peer connection."""

    def __init__(self, name: str = "peer-test") -> None:
        self.name = name
        self.sent: list[str] = []

    async def send_text(self, data: str) -> None:
        self.sent.append(data)

    def sent_json(self) -> list[object]:
        return [json.loads(s) for s in self.sent]


def write_script(folder: Path, name: str, records: object) -> Path:
    path = folder / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


@pytest.fixture
def fixtures_dir(tmp_path: Path) -> Path:
    """Provide a fixtures folder with a couple of workflows."""
    folder = tmp_path / "fixtures"
    write_script(folder, "websocket-workflow/retrain.json", RETRAIN_SCRIPT)
    write_script(
        folder,
        "websocket-workflow/simple.json",
        [
            {"type": "client", "payload": {"a": 1}},
            {"type": "server", "payload": {"b": 2}},
        ],
    )
    write_script(folder, "websocket-workflow/empty.json", [])
    return folder


@pytest.fixture
def settings(fixtures_dir: Path) -> MockServerSettings:
    """Provide test server settings."""
    return MockServerSettings(
        fixtures_folder=str(fixtures_dir),
        control_token="test-token",
        log_level="DEBUG",
    )


@pytest.fixture
def connection() -> RecordingConnection:
    return RecordingConnection()


@pytest.fixture
def simple_steps() -> list[Step]:
    return [
        Step(direction=StepDirection.FROM_PEER, payload={"a": 1}),
        Step(direction=StepDirection.TO_PEER, payload={"b": 2}),
    ]


@pytest.fixture
def make_connection():
    """Factory for additional in-memory connections (e.g. a reconnecting client)."""
    return RecordingConnection


@pytest.fixture
def live_server(settings: MockServerSettings):
    """Serve the app with uvicorn on a free local port; yields `(app, port)`."""
    app = create_app(settings)
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]

    server = uvicorn.Server(
        uvicorn.Config(app, host="127.0.0.1", port=port, log_config=None, lifespan="off")
    )
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not server.started:
        if not thread.is_alive() or time.monotonic() > deadline:
            raise RuntimeError(f"uvicorn did not start on port {port}")
        time.sleep(0.01)

    yield app, port

    server.should_exit = True
    thread.join(timeout=10)
