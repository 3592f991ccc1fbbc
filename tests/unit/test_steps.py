"""Unit tests for script records and payload matching."""

from __future__ import annotations

import pytest

from ws_workflow_mock.workflow.steps import (
    ScriptLoadFailure,
    Step,
    StepDirection,
    dump_json,
    parse_json,
    payloads_equal,
    step_from_record,
)


def test_server_record_is_outbound_step() -> None:
    step = step_from_record({"type": "server", "payload": {"b": 2}}, 0)
    assert step == Step(direction=StepDirection.TO_PEER, payload={"b": 2})


def test_reconnect_record_is_marker_without_payload() -> None:
    step = step_from_record({"type": "reconnect", "payload": {"ignored": True}}, 3)
    assert step.direction is StepDirection.RECONNECT_MARKER
    assert step.payload is None
    assert step.describe() == {"direction": "reconnect_marker"}


@pytest.mark.parametrize("step_type", ["client", "anything-else", None])
def test_other_records_are_expected_client_messages(step_type: str | None) -> None:
    step = step_from_record({"type": step_type, "payload": {"a": 1}}, 0)
    assert step.direction is StepDirection.FROM_PEER
    assert step.payload == {"a": 1}


def test_null_payload_is_kept() -> None:
    step = step_from_record({"type": "client", "payload": None}, 0)
    assert step.direction is StepDirection.FROM_PEER
    assert step.payload is None


def test_data_record_without_payload_is_rejected() -> None:
    with pytest.raises(ScriptLoadFailure, match="Step 1"):
        step_from_record({"type": "server"}, 1)


def test_non_object_record_is_rejected() -> None:
    with pytest.raises(ScriptLoadFailure):
        step_from_record(["server", {"b": 2}], 0)


def test_steps_are_immutable() -> None:
    step = Step(direction=StepDirection.TO_PEER, payload={"b": 2})
    with pytest.raises(AttributeError):
        step.direction = StepDirection.FROM_PEER  # type: ignore[misc]


def test_objects_match_regardless_of_key_order() -> None:
    assert payloads_equal({"a": 1, "b": {"c": [1, 2]}}, {"b": {"c": [1, 2]}, "a": 1})


def test_arrays_match_in_order_only() -> None:
    assert payloads_equal([1, 2, 3], [1, 2, 3])
    assert not payloads_equal([1, 2], [2, 1])
    assert not payloads_equal([1, 2], [1, 2, 3])


def test_missing_or_extra_keys_do_not_match() -> None:
    assert not payloads_equal({"a": 1}, {"a": 1, "b": 2})
    assert not payloads_equal({"a": 1, "b": 2}, {"a": 1})


def test_booleans_never_match_numbers() -> None:
    assert not payloads_equal(True, 1)
    assert not payloads_equal({"flag": 0}, {"flag": False})
    assert payloads_equal({"flag": True}, {"flag": True})


def test_int_and_float_with_same_value_match() -> None:
    assert payloads_equal({"n": 1}, {"n": 1.0})
    assert not payloads_equal({"n": 1}, {"n": 1.5})


def test_scalars_compare_exactly() -> None:
    assert payloads_equal("x", "x")
    assert payloads_equal(None, None)
    assert not payloads_equal("1", 1)
    assert not payloads_equal(None, {})
    assert not payloads_equal({}, [])


def test_nan_matches_nan_only() -> None:
    assert payloads_equal(float("nan"), float("nan"))
    assert payloads_equal({"v": [float("nan")]}, {"v": [float("nan")]})
    assert not payloads_equal(float("nan"), 0.0)


@pytest.mark.parametrize("text", ["NaN", "[Infinity]", '{"a": -Infinity}'])
def test_parse_json_rejects_non_finite_constants(text: str) -> None:
    with pytest.raises(ValueError):
        parse_json(text)


def test_parse_json_accepts_bytes() -> None:
    assert parse_json(b'{"a": [1, 2.5, null]}') == {"a": [1, 2.5, None]}


def test_dump_json_is_compact_and_keeps_unicode() -> None:
    frame = dump_json({"message": "été", "data": {"n": [1, 2]}})
    assert frame == '{"message":"été","data":{"n":[1,2]}}'
