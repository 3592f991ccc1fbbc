"""Unit tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from ws_workflow_mock.config import ControlChannelSettings, MockServerSettings

_ENV_VARS = (
    "WS_MOCK_FIXTURES_FOLDER",
    "WS_MOCK_HOST",
    "WS_MOCK_PORT",
    "WS_MOCK_CONTROL_TOKEN",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_settings_loads_from_dotenv(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "\n".join(
            [
                "WS_MOCK_FIXTURES_FOLDER=cypress/fixtures",
                "WS_MOCK_PORT=2001",
                "LOG_LEVEL=DEBUG",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = MockServerSettings()

    assert settings.fixtures_path == Path("cypress/fixtures")
    assert settings.port == 2001
    assert settings.log_level == "DEBUG"


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WS_MOCK_FIXTURES_FOLDER", "fixtures")

    settings = MockServerSettings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 1999
    assert settings.control_token == "cypress"
    assert settings.log_level == "INFO"


def test_fixtures_folder_is_required() -> None:
    with pytest.raises(ValidationError, match="WS_MOCK_FIXTURES_FOLDER is required"):
        MockServerSettings()


def test_control_settings_do_not_need_fixtures() -> None:
    settings = ControlChannelSettings()
    assert settings.port == 1999
    assert settings.control_token == "cypress"


def test_init_values_override_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WS_MOCK_FIXTURES_FOLDER", "from-env")
    monkeypatch.setenv("WS_MOCK_PORT", "3000")

    settings = MockServerSettings(fixtures_folder="from-cli", port=4000)

    assert settings.fixtures_folder == "from-cli"
    assert settings.port == 4000


def test_port_is_validated(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WS_MOCK_PORT", "70000")
    with pytest.raises(ValidationError):
        ControlChannelSettings()
