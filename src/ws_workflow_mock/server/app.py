"""FastAPI app factory.

One WebSocket endpoint serves both kinds of connection:
- `/?token=<control_token>` is the control channel (loads workflows)
- anything else is the peer under test, driven by the workflow engine
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from ws_workflow_mock import __version__
from ws_workflow_mock.config import MockServerSettings
from ws_workflow_mock.server.models import Health, WorkflowStatus
from ws_workflow_mock.server.transport import FastAPIConnection
from ws_workflow_mock.workflow.control import (
    ControlChannelHandler,
    ControlReply,
    WorkflowNotFound,
)
from ws_workflow_mock.workflow.engine import WorkflowEngine
from ws_workflow_mock.workflow.loader import FixtureScriptLoader, ScriptLoader

logger = logging.getLogger(__name__)

# Close code for "the server hit a condition that prevented it from fulfilling the request".
CLOSE_INTERNAL_ERROR = 1011


def create_app(
    settings: MockServerSettings | None = None, *, loader: ScriptLoader | None = None
) -> FastAPI:
    settings = settings or MockServerSettings()
    engine = WorkflowEngine()
    control = ControlChannelHandler(
        loader=loader or FixtureScriptLoader(settings.fixtures_path),
        engine=engine,
    )

    app = FastAPI(
        title="WebSocket Workflow Mock",
        version=__version__,
        description="Scripted WebSocket counterpart for end-to-end tests.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url=None,
    )

    # Expose collaborators for tests and request handlers that want to read them.
    app.state.settings = settings
    app.state.engine = engine
    app.state.control = control

    @app.get("/api/v1/health", response_model=Health)
    def health() -> Health:
        return Health(status="ok")

    @app.get("/api/v1/workflow", response_model=WorkflowStatus)
    def workflow_status() -> WorkflowStatus:
        return WorkflowStatus.model_validate(engine.snapshot().to_json())

    async def workflow_socket(websocket: WebSocket, token: str | None = None) -> None:
        await websocket.accept()

        if token is not None and token == settings.control_token:
            await _serve_control(websocket, control)
            return

        connection = FastAPIConnection(websocket)
        try:
            await engine.run(connection, connection.frames())
        except WebSocketDisconnect:
            # Peer went away while the opening drain was still sending.
            logger.info("App client disconnected", extra={"connection": connection.name})

    # The app under test may connect on any path; the control client uses `/`.
    app.add_api_websocket_route("/", workflow_socket)
    app.add_api_websocket_route("/{path:path}", workflow_socket)

    logger.info(
        "Websocket workflow server ready",
        extra={"fixtures_folder": settings.fixtures_folder, "port": settings.port},
    )
    return app


async def _serve_control(websocket: WebSocket, control: ControlChannelHandler) -> None:
    """Answer control frames until the client hangs up or a load fails."""

    try:
        await _answer_control_frames(websocket, control)
    except WebSocketDisconnect as e:
        # Fire-and-forget clients close right after sending; the load still applies.
        logger.info("Control client disconnected before the reply", extra={"code": e.code})
        return
    logger.info("Control client disconnected")


async def _answer_control_frames(websocket: WebSocket, control: ControlChannelHandler) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return

        raw = message.get("text")
        if raw is None:
            raw = message.get("bytes") or b""

        try:
            reply = await control.handle(raw)
        except WorkflowNotFound as e:
            failure = ControlReply(ok=False, fixture_path=e.identifier, error=str(e))
            await websocket.send_text(failure.to_wire())
            await websocket.close(code=CLOSE_INTERNAL_ERROR, reason="Websocket workflow not found")
            return

        await websocket.send_text(reply.to_wire())
