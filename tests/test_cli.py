from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from cli.app import app
from cli.config import DEFAULT_BASE_URL, load_config


def _telemetry_payload(pulse_rate: float = 72.0) -> Dict[str, Any]:
    return {
        "reading": {
            "temperature": 36.5,
            "humidity": 55.0,
            "pulse_rate": pulse_rate,
            "oxygen_rate": 98.0,
            "spo2": 97.0,
        },
        "progress": {"temperature": 0.73, "humidity": 0.55, "pulse_rate": pulse_rate / 120, "spo2": 0.97},
        "rotation_target": {"temperature": 262.8, "humidity": 198.0, "pulse_rate": pulse_rate * 3, "spo2": 349.2},
        "pulse_rate_status": {"status": "Normal", "color_hint": "green"},
        "spo2_status": {"status": "Normal", "color_hint": "green"},
        "received_at": "2024-01-01T00:00:00Z",
    }


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.telemetry_calls = 0
        self.pushed: List[Dict[str, Any]] = []
        self.list_limits: List[Optional[int]] = []
        self.sent: List[str] = []
        self.messages: List[Dict[str, Any]] = [
            {"id": "k2", "text": "second", "timestamp": 1704067260000, "sender": "patient"},
            {"id": "k1", "text": "first", "timestamp": 1704067200000, "sender": "patient"},
        ]
        self.closed = False

    def get_telemetry(self) -> Dict[str, Any]:
        self.telemetry_calls += 1
        return _telemetry_payload()

    def put_sensor_data(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.pushed.append(payload)
        return _telemetry_payload(payload.get("heartRate", 0.0))

    def list_messages(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        self.list_limits.append(limit)
        return self.messages

    def send_message(self, text: str) -> Dict[str, Any]:
        self.sent.append(text)
        return {"id": "k3", "text": text, "timestamp": 1704067320000, "sender": "patient"}

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
    monkeypatch.setattr("cli.app.time.sleep", lambda _seconds: None)
    return client


def test_status_renders_telemetry(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "Telemetry" in result.stdout
    assert "temperature: 36.5 C" in result.stdout
    assert "pulse_rate: Normal" in result.stdout
    assert stub.closed is True


def test_watch_polls_count_times(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--poll-interval", "0.1", "watch", "--count", "3"])

    assert result.exit_code == 0
    assert stub.telemetry_calls == 3
    assert stub.config.poll_interval == 0.1


def test_push_reading_sends_feed_field_names(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["push-reading", "--heart-rate", "80", "--spo2", "96"])

    assert result.exit_code == 0
    assert stub.pushed == [{"heartRate": 80.0, "SpO2": 96.0}]
    assert "pulse_rate: 80 bpm" in result.stdout


def test_messages_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["messages", "--limit", "2"])

    assert result.exit_code == 0
    assert stub.list_limits == [2]
    assert result.stdout.index("second") < result.stdout.index("first")
    assert "patient: second" in result.stdout


def test_send_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["send", "need water"])

    assert result.exit_code == 0
    assert stub.sent == ["need water"]
    assert "Message sent successfully." in result.stdout


def test_send_blank_message_fails_locally(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["send", "   "])

    assert result.exit_code == 1
    assert stub.sent == []


def test_load_config_prefers_arguments(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://feed.local:9000/")
    monkeypatch.setenv("CLI_POLL_INTERVAL", "not-a-number")

    from_env = load_config()
    explicit = load_config(base_url="http://other/", poll_interval=2.0)

    assert from_env.base_url == "http://feed.local:9000"
    assert from_env.poll_interval == 1.0
    assert explicit.base_url == "http://other"
    assert explicit.poll_interval == 2.0


def test_load_config_defaults(monkeypatch) -> None:
    monkeypatch.delenv("API_BASE_URL", raising=False)

    assert load_config().base_url == DEFAULT_BASE_URL
