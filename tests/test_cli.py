from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from cli.app import app


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.update_calls = 0
        self.registered: List[tuple] = []
        self.analysis_payload: Dict[str, Any] = {
            "sensorData": [
                {"temperature": 30.0, "doorStatus": "closed", "timestamp": "2024-01-01T00:00:00Z"},
                {"temperature": 35.2, "doorStatus": "open", "timestamp": "2024-01-01T00:05:00Z"},
            ],
            "predicted_temp": 32.8,
        }
        self.closed = False

    def trigger_update(self) -> str:
        self.update_calls += 1
        return "Data updated from ThingSpeak"

    def get_analysis(self) -> Dict[str, Any]:
        return self.analysis_payload

    def register(
        self, email: str, password: str, full_name: Optional[str] = None, phone: Optional[str] = None
    ) -> str:
        self.registered.append((email, password, full_name, phone))
        return "Registration successful"

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return {
            "token": "token-abc",
            "user": {"id": "user-1", "email": email, "fullName": "Ada", "phone": None},
        }

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(config=None)

    def factory(config):
        client.config = config
        return client

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return client


def test_update_command(stub: StubClient, runner: CliRunner) -> None:
    result = runner.invoke(app, ["--base-url", "http://sensors.test/", "update"])

    assert result.exit_code == 0
    assert "Data updated from ThingSpeak" in result.stdout
    assert stub.update_calls == 1
    assert stub.config.base_url == "http://sensors.test"
    assert stub.closed is True


def test_analysis_command_renders_prediction(stub: StubClient, runner: CliRunner) -> None:
    result = runner.invoke(app, ["analysis", "--limit", "1"])

    assert result.exit_code == 0
    assert "predicted_temp: 32.8" in result.stdout
    assert "reading_count: 2" in result.stdout
    assert "35.2 deg, door open" in result.stdout
    assert "door closed" not in result.stdout


def test_analysis_command_without_data(stub: StubClient, runner: CliRunner) -> None:
    stub.analysis_payload = {"message": "No data"}

    result = runner.invoke(app, ["analysis"])

    assert result.exit_code == 0
    assert "No data" in result.stdout


def test_register_command(stub: StubClient, runner: CliRunner) -> None:
    result = runner.invoke(
        app,
        ["register", "--email", "ada@example.com", "--password", "s3cret", "--full-name", "Ada"],
    )

    assert result.exit_code == 0
    assert "Registration successful" in result.stdout
    assert stub.registered == [("ada@example.com", "s3cret", "Ada", None)]


def test_login_command_prints_token(stub: StubClient, runner: CliRunner) -> None:
    result = runner.invoke(app, ["login", "--email", "ada@example.com", "--password", "s3cret"])

    assert result.exit_code == 0
    assert "token-abc" in result.stdout
    assert "email: ada@example.com" in result.stdout
