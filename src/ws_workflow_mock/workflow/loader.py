"""Load workflow scripts from the fixtures folder.

This module is intentionally *dumb*:
- it does not interpret payloads beyond converting records to steps
- it does not cache scripts; every load re-reads the file

A test suite edits fixtures between runs, so re-reading is the expected
behaviour.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from .steps import ScriptLoadFailure, Step, parse_json, step_from_record

logger = logging.getLogger(__name__)


class ScriptLoader(Protocol):
    """Turns a workflow identifier into an ordered list of steps."""

    def load(self, identifier: str) -> list[Step]: ...


class FixtureScriptLoader:
    """Read workflow scripts as JSON files under a fixtures folder."""

    def __init__(self, fixtures_folder: Path) -> None:
        self._root = fixtures_folder

    def resolve(self, identifier: str) -> Path:
        """Resolve an identifier to a file path.

        Rules:
        - The identifier is joined to the fixtures folder as-is.
        - If that path does not exist and the identifier has no suffix,
          `.json` is appended (`"retrain"` -> `retrain.json`).
        - Paths escaping the fixtures folder are rejected.
        """

        if not identifier.strip():
            raise ScriptLoadFailure("Workflow identifier is empty")

        root = self._root.resolve()
        path = (root / identifier).resolve()
        if not path.exists() and not path.suffix:
            path = path.with_suffix(".json")

        if not path.is_relative_to(root):
            raise ScriptLoadFailure(f"Workflow {identifier!r} is outside the fixtures folder")
        return path

    def load(self, identifier: str) -> list[Step]:
        path = self.resolve(identifier)

        try:
            raw = parse_json(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            logger.error("Workflow fixture not found", extra={"path": str(path)})
            raise ScriptLoadFailure(f"Workflow fixture not found: {path}") from e
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Unable to read workflow fixture", extra={"path": str(path)})
            raise ScriptLoadFailure(f"Unable to read workflow fixture {path}: {e}") from e
        except ValueError as e:
            logger.error("Workflow fixture is not valid JSON", extra={"path": str(path)})
            raise ScriptLoadFailure(f"Workflow fixture is not valid JSON: {path}: {e}") from e

        if not isinstance(raw, list):
            raise ScriptLoadFailure(f"Workflow fixture must be a JSON array of steps: {path}")

        steps = [step_from_record(record, index) for index, record in enumerate(raw)]
        logger.debug("Workflow fixture loaded", extra={"path": str(path), "steps": len(steps)})
        return steps
