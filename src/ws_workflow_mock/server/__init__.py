"""FastAPI server adapter for ws-workflow-mock.

This module exposes the workflow engine over a single WebSocket endpoint.

Design intent:
- Keep workflow logic in `ws_workflow_mock.workflow.*`
- Keep server-specific concerns (routing, socket framing, status endpoints) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from ws_workflow_mock.server.app import create_app
