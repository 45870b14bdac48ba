from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from datastore.mock_realtime_db import MockRealtimeDatabase, build_default_feed
from services.dashboard import DashboardService, build_default_dashboard
from services.message_log import MessageLog
from services.subscription import SubscriptionState, TelemetrySubscription
from settings import get_settings


@pytest.fixture
def feed() -> MockRealtimeDatabase:
    return MockRealtimeDatabase(name="test")


@pytest.fixture
def api_client(feed, monkeypatch) -> Iterator[TestClient]:
    dashboards: List[DashboardService] = []

    def build_test_dashboard() -> DashboardService:
        if not dashboards:
            dashboards.append(
                DashboardService(
                    feed=feed,
                    subscription=TelemetrySubscription(feed),
                    message_log=MessageLog(feed, sender="patient"),
                    fetch_limit=5,
                )
            )
        return dashboards[0]

    def cache_clear() -> None:
        while dashboards:
            dashboards.pop().shutdown()

    build_test_dashboard.cache_clear = cache_clear  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_dashboard", build_test_dashboard)
    monkeypatch.setattr("app.api.build_default_dashboard", build_test_dashboard)

    app = create_app()
    with TestClient(app) as client:
        yield client

    cache_clear()


def test_lifespan_starts_and_stops_subscription(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("FEED_PERSISTENCE_PATH", str(tmp_path / "feed.json"))
    get_settings.cache_clear()
    build_default_feed.cache_clear()
    build_default_dashboard.cache_clear()
    app = create_app()

    try:
        with TestClient(app) as client:
            dashboard_during = build_default_dashboard()
            assert dashboard_during.subscription.state == SubscriptionState.subscribed
            assert client.get("/health").json() == {"status": "ok", "subscription": "subscribed"}

        assert dashboard_during.subscription.state == SubscriptionState.closed
        dashboard_after = build_default_dashboard()
        assert dashboard_after is not dashboard_during
        assert dashboard_after.subscription.state == SubscriptionState.unsubscribed
    finally:
        build_default_dashboard.cache_clear()
        build_default_feed.cache_clear()
        get_settings.cache_clear()


def test_telemetry_defaults_to_zero_reading(api_client: TestClient) -> None:
    response = api_client.get("/telemetry")

    assert response.status_code == 200
    body = response.json()
    assert body["reading"] == {
        "temperature": 0.0,
        "humidity": 0.0,
        "pulse_rate": 0.0,
        "oxygen_rate": 0.0,
        "spo2": 0.0,
    }
    assert body["pulse_rate_status"] == {"status": "Abnormal", "color_hint": "red"}
    assert body["spo2_status"] == {"status": "Low", "color_hint": "red"}


def test_sensor_data_flows_to_telemetry(api_client: TestClient) -> None:
    payload = {"temperature": 36.5, "humidity": 55, "heartRate": 72, "oxygenRate": 98, "SpO2": 97}

    response = api_client.put("/sensor-data", json=payload)

    assert response.status_code == 200
    body = api_client.get("/telemetry").json()
    assert body["reading"]["pulse_rate"] == 72.0
    assert body["reading"]["oxygen_rate"] == 98.0
    assert body["progress"]["pulse_rate"] == pytest.approx(0.6)
    assert body["rotation_target"]["pulse_rate"] == pytest.approx(216.0)
    assert body["pulse_rate_status"]["status"] == "Normal"
    assert body["spo2_status"]["status"] == "Normal"


def test_sensor_data_from_feed_writes_is_visible(api_client: TestClient, feed) -> None:
    feed.set("sensorData", {"heartRate": "bad", "SpO2": 99})

    body = api_client.get("/telemetry").json()

    assert body["reading"]["pulse_rate"] == 0.0
    assert body["reading"]["spo2"] == 99.0


def test_sensor_data_write_while_offline_is_bad_gateway(api_client: TestClient, feed) -> None:
    feed.go_offline()

    response = api_client.put("/sensor-data", json={"heartRate": 70})

    assert response.status_code == 502


def test_send_and_list_messages(api_client: TestClient) -> None:
    for text in ("first", "second"):
        response = api_client.post("/messages", json={"text": text})
        assert response.status_code == 201

    body = response.json()
    assert body["text"] == "second"
    assert body["sender"] == "patient"
    assert body["id"]

    listed = api_client.get("/messages").json()["messages"]
    assert {message["text"] for message in listed} == {"first", "second"}
    timestamps = [message["timestamp"] for message in listed]
    assert timestamps == sorted(timestamps, reverse=True)


def test_list_messages_respects_limit(api_client: TestClient) -> None:
    for index in range(7):
        api_client.post("/messages", json={"text": f"m{index}"})

    assert len(api_client.get("/messages").json()["messages"]) == 5
    assert len(api_client.get("/messages", params={"limit": 2}).json()["messages"]) == 2
    assert api_client.get("/messages", params={"limit": 0}).status_code == 422


def test_blank_message_returns_bad_request(api_client: TestClient, feed) -> None:
    response = api_client.post("/messages", json={"text": "   "})

    assert response.status_code == 400
    assert response.json()["detail"] == "Message cannot be empty."
    assert feed.get("messages") is None


def test_remote_failures_return_bad_gateway(api_client: TestClient, feed) -> None:
    feed.go_offline()

    send = api_client.post("/messages", json={"text": "hello"})
    listing = api_client.get("/messages")

    assert send.status_code == 502
    assert "Failed to send message" in send.json()["detail"]
    assert listing.status_code == 502
    assert "Could not read messages" in listing.json()["detail"]


def test_root_endpoint(api_client: TestClient) -> None:
    assert api_client.get("/").json()["status"] == "ok"
