"""Unit tests for the JSON log formatter."""

from __future__ import annotations

import json
import logging

from ws_workflow_mock.logging import JsonFormatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ws_workflow_mock.workflow.engine",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg="Workflow step %s (client message)",
        args=("2/5",),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_formats_message_and_extra() -> None:
    line = JsonFormatter().format(
        _record(expected={"direction": "from_peer", "payload": {"a": 1}}, received={"a": 2})
    )
    payload = json.loads(line)

    assert payload["level"] == "ERROR"
    assert payload["logger"] == "ws_workflow_mock.workflow.engine"
    assert payload["message"] == "Workflow step 2/5 (client message)"
    assert payload["extra"] == {
        "expected": {"direction": "from_peer", "payload": {"a": 1}},
        "received": {"a": 2},
    }


def test_record_without_extra_has_no_extra_key() -> None:
    payload = json.loads(JsonFormatter().format(_record()))
    assert "extra" not in payload


def test_non_json_extra_values_are_rendered() -> None:
    payload = json.loads(JsonFormatter().format(_record(raw=b"\xff")))
    assert payload["extra"]["raw"] == repr(b"\xff")
