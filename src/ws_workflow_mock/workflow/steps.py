"""Workflow steps and payload matching.

A workflow script is a JSON array of records such as::

    [
        {"type": "client", "payload": {"action": "retrain"}},
        {"type": "server", "payload": {"message": "retrain_started"}},
        {"type": "reconnect"},
        {"type": "server", "payload": {"message": "retrain_done"}}
    ]

The record's `type` is the discriminant and is resolved once, at load time,
into a :class:`StepDirection`.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

JsonValue = Any

SERVER_STEP_TYPE = "server"
RECONNECT_STEP_TYPE = "reconnect"


class ScriptLoadFailure(Exception):
    """A workflow script could not be read or is not a valid script."""


def _reject_constant(name: str) -> JsonValue:
    raise ValueError(f"{name} is not valid JSON")


def parse_json(text: str | bytes) -> JsonValue:
    """Strict JSON parsing: `NaN`, `Infinity` and `-Infinity` are rejected.

    Raises:
        ValueError: the text is not valid JSON (`json.JSONDecodeError` included).
    """

    return json.loads(text, parse_constant=_reject_constant)


def dump_json(value: JsonValue) -> str:
    """Compact JSON with raw Unicode, the way browsers serialise frames."""

    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class StepDirection(str, Enum):
    FROM_PEER = "from_peer"
    TO_PEER = "to_peer"
    RECONNECT_MARKER = "reconnect_marker"


@dataclass(frozen=True, slots=True)
class Step:
    """One scripted protocol event.

    `payload` is required for data steps and always `None` for reconnect markers.
    """

    direction: StepDirection
    payload: JsonValue = None

    def describe(self) -> dict[str, object]:
        out: dict[str, object] = {"direction": self.direction.value}
        if self.direction is not StepDirection.RECONNECT_MARKER:
            out["payload"] = self.payload
        return out


def step_from_record(record: object, index: int) -> Step:
    """Convert one script record into a :class:`Step`.

    Rules:
    - `"server"` is an outbound step, `"reconnect"` a reconnect marker.
    - Any other type (conventionally `"client"`) is an expected inbound step.
    - Data steps must carry a `payload` key; `null` is a valid payload.
    """

    if not isinstance(record, dict):
        raise ScriptLoadFailure(f"Step {index} is not an object: {record!r}")

    step_type = record.get("type")
    if step_type == RECONNECT_STEP_TYPE:
        return Step(direction=StepDirection.RECONNECT_MARKER)

    direction = StepDirection.TO_PEER if step_type == SERVER_STEP_TYPE else StepDirection.FROM_PEER
    if "payload" not in record:
        raise ScriptLoadFailure(f"Step {index} ({step_type!r}) has no payload")
    return Step(direction=direction, payload=record["payload"])


def payloads_equal(expected: JsonValue, received: JsonValue) -> bool:
    """Deep structural equality for JSON values.

    Objects compare by key set and values regardless of key order, arrays
    compare element-wise in order, scalars compare exactly. Booleans are never
    equal to numbers, while `1` and `1.0` are (JSON has a single number type).
    """

    if isinstance(expected, bool) or isinstance(received, bool):
        return type(expected) is type(received) and expected == received

    if isinstance(expected, int | float) and isinstance(received, int | float):
        if isinstance(expected, float) and isinstance(received, float):
            if math.isnan(expected) and math.isnan(received):
                return True
        return expected == received

    if isinstance(expected, dict):
        if not isinstance(received, dict) or expected.keys() != received.keys():
            return False
        return all(payloads_equal(expected[key], received[key]) for key in expected)

    if isinstance(expected, list):
        if not isinstance(received, list) or len(expected) != len(received):
            return False
        return all(payloads_equal(e, r) for e, r in zip(expected, received, strict=True))

    return type(expected) is type(received) and expected == received
