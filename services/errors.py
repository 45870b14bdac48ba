"""Errors surfaced by the telemetry engine."""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for engine errors."""


class DoubleSubscriptionError(TelemetryError):
    """``start`` was called on a subscription that is already live."""


class SubscriptionClosedError(TelemetryError):
    """``start`` was called on a subscription that has been torn down."""


class RemoteReadFailure(TelemetryError):
    """A bounded read against the feed could not complete."""


class RemoteWriteFailure(TelemetryError):
    """An append to the feed could not complete."""
