"""Total conversion of raw feed snapshots into ``SensorReading`` values."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any, Dict

from models.readings import SensorReading

logger = logging.getLogger(__name__)

# Raw feed field name -> SensorReading attribute.
FEED_FIELDS: Dict[str, str] = {
    "temperature": "temperature",
    "humidity": "humidity",
    "heartRate": "pulse_rate",
    "oxygenRate": "oxygen_rate",
    "SpO2": "spo2",
}


def _coerce_metric(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            candidate = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            candidate = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return candidate if math.isfinite(candidate) else None


def normalize_reading(raw: Any) -> SensorReading:
    """Build a complete reading from an untrusted snapshot.

    Missing, non-numeric and non-finite fields become ``0.0``. Unknown keys are
    ignored. This never raises.
    """
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.debug("Snapshot is not an object", extra={"reason": type(raw).__name__})
        return SensorReading()

    values: Dict[str, float] = {}
    for feed_name, attribute in FEED_FIELDS.items():
        coerced = _coerce_metric(raw.get(feed_name))
        if coerced is None:
            if feed_name in raw:
                logger.debug(
                    "Defaulting malformed metric",
                    extra={"reason": f"invalid {feed_name}"},
                )
            coerced = 0.0
        values[attribute] = coerced

    return SensorReading(**values)
