"""Configuration for the mock WebSocket server and its control client.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Variables are prefixed with `WS_MOCK_` to avoid collisions with the
application under test, which often shares the same environment.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ControlChannelSettings(BaseSettings):
    """Where the mock server listens and how the control channel is recognised.

    This is all a control client (e.g. `ws-workflow-mock set-workflow`) needs;
    it does NOT require a fixtures folder.

    Environment variables:
    - WS_MOCK_HOST           (optional)
    - WS_MOCK_PORT           (optional)
    - WS_MOCK_CONTROL_TOKEN  (optional)
    - LOG_LEVEL              (optional)
    """

    host: str = Field(
        default="127.0.0.1",
        validation_alias="WS_MOCK_HOST",
        description="Interface the server binds to (and the client connects to)",
    )
    port: int = Field(
        default=1999,
        validation_alias="WS_MOCK_PORT",
        ge=1,
        le=65535,
        description="Single listening port for both control and data connections",
    )

    control_token: str = Field(
        default="cypress",
        validation_alias="WS_MOCK_CONTROL_TOKEN",
        description=(
            "Query-string token (`/?token=...`) that marks a connection as the control "
            "channel. Every other connection is treated as the peer under test."
        ),
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


class MockServerSettings(ControlChannelSettings):
    """Settings for running the mock server.

    Environment variables (in addition to :class:`ControlChannelSettings`):
    - WS_MOCK_FIXTURES_FOLDER

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `MockServerSettings(_env_file=path_to_env)`.
    """

    # Empty by default, but validation below enforces that a value is provided
    # (typically via `.env`), matching how the server refuses to start without it.
    fixtures_folder: str = Field(
        default="",
        validation_alias="WS_MOCK_FIXTURES_FOLDER",
        description="Directory that workflow fixture identifiers are resolved against",
    )

    @model_validator(mode="after")
    def _require_fixtures_folder(self) -> MockServerSettings:
        if not self.fixtures_folder.strip():
            raise ValueError("WS_MOCK_FIXTURES_FOLDER is required")
        return self

    @property
    def fixtures_path(self) -> Path:
        """Fixtures folder as a path."""

        return Path(self.fixtures_folder)
