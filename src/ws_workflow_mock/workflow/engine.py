"""Workflow engine: replay and validate a script against a live peer.

The engine is the single owner of the step queue. Every queue operation,
including a whole drain of outbound steps, runs inside one `asyncio.Lock`, so
the control channel's `install` never interleaves with a drain or a match on a
data connection.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .queue import QueueExhausted, QueueState, StepQueue
from .steps import JsonValue, Step, StepDirection, dump_json, parse_json, payloads_equal

logger = logging.getLogger(__name__)

PING_PATTERN = re.compile(r"ping#(\d+)")

ERROR_REPLY: dict[str, JsonValue] = {"message": "error", "data": {"error": "Processing error"}}


class Connection(Protocol):
    """A duplex text channel to the peer under test."""

    name: str

    async def send_text(self, data: str) -> None: ...


class MessageOutcome(str, Enum):
    PONG = "pong"
    MALFORMED = "malformed"
    LATE = "late"
    MISMATCH = "mismatch"
    MATCHED = "matched"


@dataclass(frozen=True, slots=True)
class WorkflowSnapshot:
    workflow: str | None
    state: QueueState
    cursor: int
    length: int

    def to_json(self) -> dict[str, object]:
        return {
            "workflow": self.workflow,
            "state": self.state.value,
            "cursor": self.cursor,
            "length": self.length,
        }


class WorkflowEngine:
    def __init__(self, queue: StepQueue | None = None) -> None:
        self._queue = queue if queue is not None else StepQueue()
        self._workflow: str | None = None
        self._lock = asyncio.Lock()

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            workflow=self._workflow,
            state=self._queue.state,
            cursor=self._queue.cursor,
            length=self._queue.length,
        )

    async def install(self, steps: Sequence[Step], *, workflow: str | None = None) -> None:
        """Replace the active workflow and rewind to its first step."""

        async with self._lock:
            self._queue.install(steps)
            self._workflow = workflow

    async def run(self, connection: Connection, frames: AsyncIterable[str | bytes]) -> None:
        """Drive one peer connection until its transport stops yielding frames."""

        logger.info("App client connected", extra={"connection": connection.name})
        await self.on_connection_open(connection)

        async for raw in frames:
            try:
                await self.on_message(connection, raw)
            except Exception:
                # A broken frame or a failed send must not take the server down.
                logger.exception(
                    "Failed to handle client message", extra={"connection": connection.name}
                )

        logger.info("App client disconnected", extra={"connection": connection.name})

    async def on_connection_open(self, connection: Connection) -> None:
        async with self._lock:
            self._check_reconnect(connection)
            await self._drain(connection)

    async def on_message(self, connection: Connection, raw: str | bytes) -> MessageOutcome:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.error(
                    "Unable to decode binary client message",
                    extra={"connection": connection.name, "size": len(raw)},
                )
                return MessageOutcome.MALFORMED

        # Keepalive frames are answered regardless of the workflow.
        ping = PING_PATTERN.match(raw)
        if ping is not None:
            await connection.send_text(f"pong#{ping.group(1)}")
            return MessageOutcome.PONG

        async with self._lock:
            queue = self._queue
            logger.info(
                "Workflow step %s (client message)",
                queue.progress(),
                extra={"connection": connection.name},
            )

            try:
                message = parse_json(raw)
            except ValueError as e:
                logger.error(
                    "Malformed client message",
                    extra={"connection": connection.name, "received": raw, "error": str(e)},
                )
                return MessageOutcome.MALFORMED

            try:
                step = queue.peek()
            except QueueExhausted:
                logger.info(
                    "Message sent by client after workflow ended",
                    extra={"connection": connection.name, "received": raw},
                )
                return MessageOutcome.LATE

            if step.direction is not StepDirection.FROM_PEER or not payloads_equal(
                step.payload, message
            ):
                logger.error(
                    "Unexpected websocket message data",
                    extra={
                        "connection": connection.name,
                        "step": queue.cursor,
                        "expected": step.describe(),
                        "received": message,
                    },
                )
                await connection.send_text(dump_json(ERROR_REPLY))
                return MessageOutcome.MISMATCH

            queue.advance()
            await self._drain(connection)
            return MessageOutcome.MATCHED

    def _check_reconnect(self, connection: Connection) -> None:
        # Only a workflow in progress can be expecting a reconnection.
        queue = self._queue
        if queue.state is not QueueState.RUNNING:
            return

        step = queue.peek()
        if step.direction is StepDirection.RECONNECT_MARKER:
            logger.info(
                "App client reconnected",
                extra={"connection": connection.name, "step": queue.cursor},
            )
            queue.advance()
            return

        logger.warning(
            "App client reconnected, but expected step was different",
            extra={"connection": connection.name, "step": queue.cursor, "expected": step.describe()},
        )

    async def _drain(self, connection: Connection) -> int:
        """Send every consecutive outbound step at the cursor. Caller holds the lock."""

        queue = self._queue
        sent = 0
        while True:
            try:
                step = queue.peek()
            except QueueExhausted:
                break
            if step.direction is not StepDirection.TO_PEER:
                break

            await connection.send_text(dump_json(step.payload))
            logger.info(
                "Workflow step %s (server message)",
                queue.progress(),
                extra={"connection": connection.name},
            )
            queue.advance()
            sent += 1
        return sent
