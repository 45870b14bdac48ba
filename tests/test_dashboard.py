from __future__ import annotations

import pytest

from datastore.mock_realtime_db import MockRealtimeDatabase
from models.readings import SensorReading, VitalStatus
from services.dashboard import DashboardService
from services.message_log import MessageLog, SendStatus
from services.subscription import SubscriptionState, TelemetrySubscription


@pytest.fixture()
def dashboard() -> DashboardService:
    feed = MockRealtimeDatabase(name="test")
    service = DashboardService(
        feed=feed,
        subscription=TelemetrySubscription(feed),
        message_log=MessageLog(feed, sender="patient"),
        fetch_limit=3,
    )
    yield service
    service.shutdown()


def test_latest_before_start_is_zero_snapshot(dashboard: DashboardService) -> None:
    snapshot = dashboard.latest()

    assert snapshot.reading == SensorReading()
    assert snapshot.assessment.pulse_rate.status == VitalStatus.abnormal
    assert snapshot.assessment.spo2.status == VitalStatus.low


def test_ingested_reading_updates_snapshot(dashboard: DashboardService) -> None:
    dashboard.start()

    dashboard.ingest_reading({"temperature": 36.5, "heartRate": 72, "SpO2": 97})

    snapshot = dashboard.latest()
    assert snapshot.reading.pulse_rate == 72.0
    assert snapshot.derived.progress.temperature == pytest.approx(0.73)
    assert snapshot.assessment.pulse_rate.status == VitalStatus.normal
    assert snapshot.assessment.spo2.status == VitalStatus.normal


def test_readings_are_ignored_after_shutdown(dashboard: DashboardService) -> None:
    dashboard.start()
    dashboard.ingest_reading({"heartRate": 72})
    dashboard.shutdown()

    dashboard.ingest_reading({"heartRate": 140})

    assert dashboard.subscription.state == SubscriptionState.closed
    assert dashboard.latest().reading.pulse_rate == 72.0


def test_fetch_messages_uses_default_limit(dashboard: DashboardService) -> None:
    for text in ("a", "b", "c", "d"):
        assert dashboard.send_message(text).status == SendStatus.sent

    assert len(dashboard.fetch_messages()) == 3
    assert len(dashboard.fetch_messages(limit=10)) == 4
