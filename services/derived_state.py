"""Progress ratios and gauge rotation targets for the dashboard."""

from __future__ import annotations

from typing import Dict

from models.readings import DerivedState, MetricValues, SensorReading

METRIC_MAXIMUMS: Dict[str, float] = {
    "temperature": 50.0,
    "humidity": 100.0,
    "pulse_rate": 120.0,
    "spo2": 100.0,
}

FULL_TURN_DEGREES = 360.0


class DerivedStateCalculator:
    """Pure calculator; keeps no history between readings."""

    def derive(self, reading: SensorReading) -> DerivedState:
        progress = {
            metric: getattr(reading, metric) / maximum
            for metric, maximum in METRIC_MAXIMUMS.items()
        }
        rotation = {
            metric: ratio * FULL_TURN_DEGREES for metric, ratio in progress.items()
        }
        return DerivedState(
            progress=MetricValues(**progress),
            rotation_target=MetricValues(**rotation),
        )


_default_calculator = DerivedStateCalculator()


def derive_state(reading: SensorReading) -> DerivedState:
    return _default_calculator.derive(reading)
