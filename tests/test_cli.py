from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config

READING = {
    "temperature": 18.5,
    "humidity": 70.0,
    "pressure": 1009.4,
    "gas": 95.2,
    "dewPoint": 12.1,
    "cloudBase": 610.0,
    "Rain": 0.4,
    "timestamp": "2024-06-01T12:00:00Z",
    "isMockData": False,
}


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.refresh_payload: Dict[str, Any] = {
            "reading": READING,
            "is_mock": False,
            "notice": None,
            "persisted": True,
        }
        self.latest_payload: Optional[Dict[str, Any]] = READING
        self.history_calls: List[Optional[float]] = []
        self.average_calls: List[float] = []
        self.cleared = False
        self.closed = False

    def refresh(self) -> Dict[str, Any]:
        return self.refresh_payload

    def latest(self) -> Optional[Dict[str, Any]]:
        return self.latest_payload

    def history(self, hours: Optional[float] = None) -> Dict[str, Any]:
        self.history_calls.append(hours)
        payload: Dict[str, Any] = {"count": 1, "readings": [READING]}
        if hours is not None:
            payload["hours"] = hours
        return payload

    def average(self, hours: float) -> Dict[str, Any]:
        self.average_calls.append(hours)
        return {
            "hours": hours,
            "average": {**READING, "sample_count": 3, "window_hours": hours},
        }

    def clear(self) -> None:
        self.cleared = True

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


def test_refresh_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["refresh"])

    assert result.exit_code == 0
    assert "Current Conditions" in result.stdout
    assert "temperature: 18.50 °C" in result.stdout
    assert "dew_point: 12.10 °C" in result.stdout
    assert stub.closed is True


def test_refresh_command_shows_mock_notice(runner: CliRunner, stub: StubClient) -> None:
    stub.refresh_payload = {
        "reading": {**READING, "isMockData": True},
        "is_mock": True,
        "notice": "Weather station unavailable: HTTP error! status: 500. Showing generated demo data.",
        "persisted": False,
    }

    result = runner.invoke(app, ["refresh"])

    assert result.exit_code == 0
    assert "source: mock" in result.stdout
    assert "Weather station unavailable" in result.stdout
    assert "not saved to history" in result.stdout


def test_latest_command_without_readings(runner: CliRunner, stub: StubClient) -> None:
    stub.latest_payload = None

    result = runner.invoke(app, ["latest"])

    assert result.exit_code == 0
    assert "No readings recorded yet." in result.stdout


def test_history_command_with_window(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["history", "--hours", "6"])

    assert result.exit_code == 0
    assert stub.history_calls == [6.0]
    assert "Readings (last 6.0 h): 1" in result.stdout


def test_average_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["average", "--hours", "12"])

    assert result.exit_code == 0
    assert stub.average_calls == [12.0]
    assert "samples: 3" in result.stdout
    assert "rainfall: 0.40 mm" in result.stdout


def test_clear_requires_confirmation(runner: CliRunner, stub: StubClient) -> None:
    declined = runner.invoke(app, ["clear"], input="n\n")
    assert declined.exit_code != 0
    assert stub.cleared is False

    accepted = runner.invoke(app, ["clear", "--yes"])
    assert accepted.exit_code == 0
    assert stub.cleared is True
    assert "Historical data cleared." in accepted.stdout


def test_base_url_option_reaches_client(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://dashboard.local:9000/", "latest"])

    assert result.exit_code == 0
    assert stub.config.base_url == "http://dashboard.local:9000"


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env.local")
    monkeypatch.setenv("CLI_TIMEOUT", "not-a-number")

    config = load_config()

    assert config == CLIConfig(base_url="http://env.local", timeout=30.0)


def test_api_client_reports_http_errors(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "station offline"})

    client = ApiClient(CLIConfig(base_url="http://dashboard.test"), transport=httpx.MockTransport(handler))

    with pytest.raises(typer.Exit):
        client.refresh()

    assert "station offline" in capsys.readouterr().err
    client.close()


def test_api_client_latest_handles_missing() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/readings/latest"
        return httpx.Response(404, json={"detail": "No readings recorded yet."})

    client = ApiClient(CLIConfig(base_url="http://dashboard.test"), transport=httpx.MockTransport(handler))

    assert client.latest() is None
    client.close()
