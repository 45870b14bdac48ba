"""Wiring of the feed, the telemetry subscription and the message log."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from threading import Lock
from typing import Any, List, Optional

from datastore.feed import FeedClient
from datastore.mock_realtime_db import build_default_feed
from models.messages import Message
from models.readings import DerivedState, SensorReading, VitalsAssessment
from services.classification import classify_reading
from services.derived_state import derive_state
from services.message_log import MessageLog, SendOutcome
from services.subscription import TelemetrySubscription
from settings import get_settings


@dataclass(frozen=True)
class TelemetrySnapshot:
    reading: SensorReading
    derived: DerivedState
    assessment: VitalsAssessment
    received_at: datetime


def _empty_snapshot() -> TelemetrySnapshot:
    reading = SensorReading()
    return TelemetrySnapshot(
        reading=reading,
        derived=derive_state(reading),
        assessment=classify_reading(reading),
        received_at=datetime.now(timezone.utc),
    )


class DashboardService:
    """Keeps the latest telemetry snapshot and fronts the message channel."""

    def __init__(
        self,
        feed: FeedClient,
        subscription: TelemetrySubscription,
        message_log: MessageLog,
        fetch_limit: int = 20,
    ) -> None:
        self.feed = feed
        self.subscription = subscription
        self.message_log = message_log
        self.fetch_limit = fetch_limit
        self._latest: Optional[TelemetrySnapshot] = None
        self._latest_lock = Lock()

    def start(self) -> None:
        self.subscription.start(self._on_update)

    def shutdown(self) -> None:
        self.subscription.stop()

    def latest(self) -> TelemetrySnapshot:
        """Most recent snapshot, or an all-zero one before the first update."""
        with self._latest_lock:
            snapshot = self._latest
        return snapshot if snapshot is not None else _empty_snapshot()

    def ingest_reading(self, raw: Any) -> None:
        """Write a raw sensor payload to the feed as the ingestion backend would."""
        self.feed.set(self.subscription.path, raw)

    def fetch_messages(self, limit: Optional[int] = None) -> List[Message]:
        return self.message_log.fetch_recent(limit or self.fetch_limit)

    def send_message(self, text: str) -> SendOutcome:
        return self.message_log.send(text)

    def _on_update(self, reading: SensorReading, derived: DerivedState) -> None:
        snapshot = TelemetrySnapshot(
            reading=reading,
            derived=derived,
            assessment=classify_reading(reading),
            received_at=datetime.now(timezone.utc),
        )
        with self._latest_lock:
            self._latest = snapshot


@lru_cache
def build_default_dashboard() -> DashboardService:
    """Factory that wires the dashboard against the default mock feed."""
    settings = get_settings()
    feed = build_default_feed()
    subscription = TelemetrySubscription(feed, path=settings.sensor_data_path)
    message_log = MessageLog(
        feed,
        path=settings.messages_path,
        sender=settings.message_sender,
    )
    return DashboardService(
        feed=feed,
        subscription=subscription,
        message_log=message_log,
        fetch_limit=settings.message_fetch_limit,
    )
