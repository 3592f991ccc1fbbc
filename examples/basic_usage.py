#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates using the workflow components directly, without a server:

* load settings from `.env`
* load a workflow fixture
* replay it against an in-memory client that prints what the server sends

The fixture is passed as an argument (not read from `.env`).
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Sequence

from ws_workflow_mock.config import MockServerSettings
from ws_workflow_mock.logging import configure_logging
from ws_workflow_mock.workflow.control import ControlChannelHandler, WorkflowNotFound
from ws_workflow_mock.workflow.engine import WorkflowEngine
from ws_workflow_mock.workflow.loader import FixtureScriptLoader
from ws_workflow_mock.workflow.steps import StepDirection


class PrintingConnection:
    name = "example-client"

    async def send_text(self, data: str) -> None:
        print(f"server -> client: {data}")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a workflow fixture in-process.")
    parser.add_argument("fixture", help="Fixture identifier, relative to WS_MOCK_FIXTURES_FOLDER")
    return parser.parse_args(argv)


async def _replay(fixture: str, settings: MockServerSettings) -> int:
    loader = FixtureScriptLoader(settings.fixtures_path)
    engine = WorkflowEngine()
    control = ControlChannelHandler(loader=loader, engine=engine)

    try:
        await control.load_workflow(fixture)
    except WorkflowNotFound as e:
        print(str(e))
        return 3

    connection = PrintingConnection()
    await engine.on_connection_open(connection)

    # Play the client side perfectly: send every expected message in order.
    for step in loader.load(fixture):
        if step.direction is StepDirection.FROM_PEER:
            message = json.dumps(step.payload)
            print(f"client -> server: {message}")
            outcome = await engine.on_message(connection, message)
            print(f"  ({outcome.value})")
        elif step.direction is StepDirection.RECONNECT_MARKER:
            print("client reconnects")
            await engine.on_connection_open(connection)

    print(f"Final state: {engine.snapshot().to_json()}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = MockServerSettings()
    configure_logging(settings.log_level)

    return asyncio.run(_replay(args.fixture, settings))


if __name__ == "__main__":
    raise SystemExit(main())
