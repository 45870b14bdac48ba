"""Live subscription to the sensor record on the feed."""

from __future__ import annotations

import logging
from enum import Enum
from threading import Lock
from typing import Any, Callable, Optional

from datastore.feed import FeedClient, Unsubscribe
from models.readings import DerivedState, SensorReading
from services.derived_state import DerivedStateCalculator
from services.errors import DoubleSubscriptionError, SubscriptionClosedError
from services.normalizer import normalize_reading

logger = logging.getLogger(__name__)

UpdateListener = Callable[[SensorReading, DerivedState], None]

DEFAULT_SENSOR_PATH = "sensorData"


class SubscriptionState(str, Enum):
    unsubscribed = "unsubscribed"
    subscribed = "subscribed"
    closed = "closed"


class TelemetrySubscription:
    """Owns one feed subscription and publishes ``(reading, derived)`` pairs.

    A subscription is single-use: ``start`` once, ``stop`` any number of
    times. Updates reach the listener in feed order, one call per feed
    notification.
    """

    def __init__(
        self,
        feed: FeedClient,
        path: str = DEFAULT_SENSOR_PATH,
        calculator: DerivedStateCalculator | None = None,
    ) -> None:
        self.feed = feed
        self.path = path
        self.calculator = calculator or DerivedStateCalculator()
        self._state = SubscriptionState.unsubscribed
        self._listener: Optional[UpdateListener] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._lock = Lock()

    @property
    def state(self) -> SubscriptionState:
        return self._state

    def start(self, on_update: UpdateListener) -> None:
        with self._lock:
            if self._state is SubscriptionState.subscribed:
                raise DoubleSubscriptionError(
                    f"Subscription to {self.path!r} is already active."
                )
            if self._state is SubscriptionState.closed:
                raise SubscriptionClosedError(
                    f"Subscription to {self.path!r} was stopped and cannot be restarted."
                )
            # The feed delivers the current value from inside subscribe().
            self._listener = on_update
            self._state = SubscriptionState.subscribed

        try:
            unsubscribe = self.feed.subscribe(self.path, self._handle_snapshot)
        except Exception:
            with self._lock:
                self._listener = None
                self._state = SubscriptionState.unsubscribed
            raise

        with self._lock:
            stopped_meanwhile = self._state is not SubscriptionState.subscribed
            if not stopped_meanwhile:
                self._unsubscribe = unsubscribe
        if stopped_meanwhile:
            unsubscribe()
            logger.info(
                "Telemetry subscription stopped during start",
                extra={"feed_path": self.path, "state": SubscriptionState.closed.value},
            )
            return
        logger.info(
            "Telemetry subscription started",
            extra={"feed_path": self.path, "state": SubscriptionState.subscribed.value},
        )

    def stop(self) -> None:
        with self._lock:
            if self._state is not SubscriptionState.subscribed:
                return
            self._state = SubscriptionState.closed
            self._listener = None
            unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()
        logger.info(
            "Telemetry subscription stopped",
            extra={"feed_path": self.path, "state": SubscriptionState.closed.value},
        )

    def _handle_snapshot(self, payload: Any) -> None:
        listener = self._listener
        if listener is None:
            return
        reading = normalize_reading(payload)
        derived = self.calculator.derive(reading)
        listener(reading, derived)
