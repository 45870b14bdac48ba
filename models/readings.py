"""Value objects for vital-sign telemetry and the quantities derived from it."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class SensorReading:
    """One fully populated snapshot of every tracked metric."""

    temperature: float = 0.0
    humidity: float = 0.0
    pulse_rate: float = 0.0
    oxygen_rate: float = 0.0
    spo2: float = 0.0


@dataclass(frozen=True, slots=True)
class MetricValues:
    """Per-metric values for the four animated dashboard gauges."""

    temperature: float
    humidity: float
    pulse_rate: float
    spo2: float


@dataclass(frozen=True, slots=True)
class DerivedState:
    """Progress ratios and rotation targets (degrees) computed from a reading.

    Neither is clamped: a value above its metric maximum yields a progress
    above 1 and a rotation above 360.
    """

    progress: MetricValues
    rotation_target: MetricValues


class VitalStatus(str, Enum):
    normal = "Normal"
    abnormal = "Abnormal"
    low = "Low"


class ColorHint(str, Enum):
    green = "green"
    red = "red"


@dataclass(frozen=True, slots=True)
class StatusClassification:
    status: VitalStatus
    color_hint: ColorHint


@dataclass(frozen=True, slots=True)
class VitalsAssessment:
    pulse_rate: StatusClassification
    spo2: StatusClassification
