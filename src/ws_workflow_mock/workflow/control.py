"""Control channel: (re)load the active workflow by identifier.

Exactly one message type is accepted::

    {"type": "set_ws_workflow", "fixturePath": "websocket-workflow/retrain.json"}

A failed load never falls back to the previous script silently: the caller
gets a :class:`WorkflowNotFound` and the active workflow is left untouched.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .engine import WorkflowEngine
from .loader import ScriptLoader
from .steps import ScriptLoadFailure

logger = logging.getLogger(__name__)

SET_WORKFLOW_TYPE = "set_ws_workflow"


class WorkflowNotFound(ScriptLoadFailure):
    def __init__(self, identifier: str, reason: str = "") -> None:
        self.identifier = identifier
        self.reason = reason
        message = f"Websocket workflow not found: {identifier!r}"
        super().__init__(f"{message} ({reason})" if reason else message)


class SetWorkflowRequest(BaseModel):
    type: Literal["set_ws_workflow"]
    fixture_path: str = Field(alias="fixturePath", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class ControlReply(BaseModel):
    """Acknowledgement sent back over the control connection."""

    type: str = SET_WORKFLOW_TYPE
    ok: bool
    fixture_path: str | None = Field(default=None, alias="fixturePath")
    steps: int | None = None
    error: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ControlChannelHandler:
    def __init__(self, *, loader: ScriptLoader, engine: WorkflowEngine) -> None:
        self._loader = loader
        self._engine = engine

    async def load_workflow(self, identifier: str) -> int:
        """Load a script and install it, returning its step count.

        Raises:
            WorkflowNotFound: the script is missing or invalid.
        """

        try:
            steps = self._loader.load(identifier)
        except ScriptLoadFailure as e:
            logger.error(
                "Websocket workflow not found",
                extra={"fixture_path": identifier, "reason": str(e)},
            )
            raise WorkflowNotFound(identifier, str(e)) from e

        await self._engine.install(steps, workflow=identifier)
        logger.info(
            "A new websocket workflow was set",
            extra={"fixture_path": identifier, "steps": len(steps)},
        )
        return len(steps)

    async def handle(self, raw: str | bytes) -> ControlReply:
        """Handle one control frame.

        Anything other than a well-formed `set_ws_workflow` message is reported
        back and leaves the workflow alone.
        """

        try:
            request = SetWorkflowRequest.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Unexpected control message",
                extra={"received": raw if isinstance(raw, str) else repr(raw), "error": str(e)},
            )
            return ControlReply(type="error", ok=False, error="Unexpected control message")

        count = await self.load_workflow(request.fixture_path)
        return ControlReply(ok=True, fixture_path=request.fixture_path, steps=count)
