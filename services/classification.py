"""Clinical status rules for pulse rate and SpO2.

Each rule looks at a single value with no smoothing, so a reading oscillating
around a boundary flips status on every update.
"""

from __future__ import annotations

from models.readings import (
    ColorHint,
    SensorReading,
    StatusClassification,
    VitalsAssessment,
    VitalStatus,
)

PULSE_RATE_NORMAL_RANGE = (60.0, 100.0)
SPO2_NORMAL_RANGE = (95.0, 100.0)

_NORMAL = StatusClassification(status=VitalStatus.normal, color_hint=ColorHint.green)
_ABNORMAL = StatusClassification(status=VitalStatus.abnormal, color_hint=ColorHint.red)
_LOW = StatusClassification(status=VitalStatus.low, color_hint=ColorHint.red)


def classify_pulse_rate(pulse_rate: float) -> StatusClassification:
    low, high = PULSE_RATE_NORMAL_RANGE
    return _NORMAL if low <= pulse_rate <= high else _ABNORMAL


def classify_spo2(spo2: float) -> StatusClassification:
    low, high = SPO2_NORMAL_RANGE
    return _NORMAL if low <= spo2 <= high else _LOW


def classify_reading(reading: SensorReading) -> VitalsAssessment:
    return VitalsAssessment(
        pulse_rate=classify_pulse_rate(reading.pulse_rate),
        spo2=classify_spo2(reading.spo2),
    )
