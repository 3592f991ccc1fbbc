"""Control-channel client.

Test suites call :func:`set_websocket_workflow` before driving the application
under test, e.g. in a pytest fixture::

    await set_websocket_workflow("websocket-workflow/retrain.json")
"""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlencode

import websockets

from ws_workflow_mock.workflow.control import (
    SET_WORKFLOW_TYPE,
    ControlReply,
    SetWorkflowRequest,
    WorkflowNotFound,
)

logger = logging.getLogger(__name__)


def control_url(host: str = "localhost", port: int = 1999, token: str = "cypress") -> str:
    return f"ws://{host}:{port}/?{urlencode({'token': token})}"


async def set_websocket_workflow(
    fixture_path: str, *, url: str | None = None, timeout: float = 10.0
) -> ControlReply:
    """Ask a running mock server to load and activate a workflow.

    Returns:
        The server's acknowledgement.

    Raises:
        WorkflowNotFound: the server could not load `fixture_path`.
    """

    url = url or control_url()
    request = SetWorkflowRequest(type=SET_WORKFLOW_TYPE, fixture_path=fixture_path)

    async with websockets.connect(url, open_timeout=timeout) as ws:
        await ws.send(request.model_dump_json(by_alias=True))
        raw = await asyncio.wait_for(ws.recv(), timeout=timeout)

    reply = ControlReply.model_validate_json(raw)
    if not reply.ok:
        raise WorkflowNotFound(fixture_path, reply.error or "")

    logger.info(
        "Websocket workflow set", extra={"fixture_path": fixture_path, "steps": reply.steps}
    )
    return reply
