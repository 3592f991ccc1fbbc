"""CLI entrypoint for the mock WebSocket server.

Commands:
- serve: run the server
- set-workflow: load a workflow on a running server (control channel)
- check-script: validate a workflow fixture without a server
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import cast

import uvicorn
from pydantic import ValidationError

from ws_workflow_mock import __version__
from ws_workflow_mock.client import control_url, set_websocket_workflow
from ws_workflow_mock.config import ControlChannelSettings, MockServerSettings
from ws_workflow_mock.logging import configure_logging
from ws_workflow_mock.server.app import create_app
from ws_workflow_mock.workflow.control import WorkflowNotFound
from ws_workflow_mock.workflow.loader import FixtureScriptLoader
from ws_workflow_mock.workflow.steps import ScriptLoadFailure

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ws-workflow-mock",
        description="Scripted WebSocket counterpart for end-to-end tests",
    )
    parser.add_argument("--version", action="version", version=f"ws-workflow-mock {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the mock WebSocket server")
    serve.add_argument("--host", default=None, help="Bind address (default: WS_MOCK_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: WS_MOCK_PORT)")
    serve.add_argument(
        "--fixtures-folder",
        default=None,
        help="Directory holding workflow fixtures (default: WS_MOCK_FIXTURES_FOLDER)",
    )

    set_workflow = subparsers.add_parser(
        "set-workflow",
        help="Load a workflow fixture on a running server",
    )
    set_workflow.add_argument(
        "fixture_path", help="Fixture identifier, relative to the server's fixtures folder"
    )
    set_workflow.add_argument("--host", default=None, help="Server host (default: WS_MOCK_HOST)")
    set_workflow.add_argument(
        "--port", type=int, default=None, help="Server port (default: WS_MOCK_PORT)"
    )
    set_workflow.add_argument(
        "--token", default=None, help="Control token (default: WS_MOCK_CONTROL_TOKEN)"
    )
    set_workflow.add_argument(
        "--timeout", type=float, default=10.0, help="Seconds to wait for the server's reply"
    )

    check_script = subparsers.add_parser(
        "check-script",
        help="Load a workflow fixture and print its steps",
    )
    check_script.add_argument("fixture_path", help="Fixture identifier")
    check_script.add_argument(
        "--fixtures-folder",
        default=None,
        help="Directory holding workflow fixtures (default: WS_MOCK_FIXTURES_FOLDER)",
    )

    return parser


def _overrides(args: argparse.Namespace, *names: str) -> dict[str, object]:
    return {name: getattr(args, name) for name in names if getattr(args, name, None) is not None}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "set-workflow":
            settings: ControlChannelSettings = ControlChannelSettings(
                **_overrides(args, "host", "port")
            )
        else:
            settings = MockServerSettings(**_overrides(args, "host", "port", "fixtures_folder"))
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        if args.command == "serve":
            app = create_app(cast(MockServerSettings, settings))
            # log_config=None keeps uvicorn on the JSON handlers configured above.
            uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
            return 0

        if args.command == "set-workflow":
            url = control_url(settings.host, settings.port, args.token or settings.control_token)
            reply = asyncio.run(
                set_websocket_workflow(args.fixture_path, url=url, timeout=args.timeout)
            )
            print(f"Workflow '{args.fixture_path}' set ({reply.steps} steps)")
            return 0

        if args.command == "check-script":
            loader = FixtureScriptLoader(cast(MockServerSettings, settings).fixtures_path)
            steps = loader.load(args.fixture_path)
            print(f"{loader.resolve(args.fixture_path)}: {len(steps)} steps")
            for index, step in enumerate(steps, start=1):
                print(f"  {index}/{len(steps)} {step.direction.value}")
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except WorkflowNotFound as e:
        logger.warning(str(e), extra={"fixture_path": e.identifier})
        print(str(e), file=sys.stderr)
        return 3

    except ScriptLoadFailure as e:
        logger.warning(str(e), extra={"fixture_path": args.fixture_path})
        print(str(e), file=sys.stderr)
        return 3

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
