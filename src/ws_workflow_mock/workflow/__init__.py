"""Workflow domain: steps, the step queue, and the engine that replays them.

This package introduces first-class types for:
- Steps (expected client message, scheduled server message, reconnect marker)
- A cursor-driven step queue
- The engine that validates inbound traffic and emits outbound traffic
- The control channel that swaps the active workflow

Transport concerns (sockets, framing, HTTP) live in `ws_workflow_mock.server`.
"""

from ws_workflow_mock.workflow.control import ControlChannelHandler, WorkflowNotFound
from ws_workflow_mock.workflow.engine import MessageOutcome, WorkflowEngine
from ws_workflow_mock.workflow.loader import FixtureScriptLoader, ScriptLoader
from ws_workflow_mock.workflow.queue import OutOfRange, QueueExhausted, QueueState, StepQueue
from ws_workflow_mock.workflow.steps import ScriptLoadFailure, Step, StepDirection

__all__ = [
    "ControlChannelHandler",
    "FixtureScriptLoader",
    "MessageOutcome",
    "OutOfRange",
    "QueueExhausted",
    "QueueState",
    "ScriptLoadFailure",
    "ScriptLoader",
    "Step",
    "StepDirection",
    "StepQueue",
    "WorkflowEngine",
    "WorkflowNotFound",
]
