"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from models.messages import Message
from models.readings import ColorHint, MetricValues, StatusClassification, VitalStatus
from services.dashboard import TelemetrySnapshot


class ReadingPayload(BaseModel):
    """Normalized reading, using the engine's field names."""

    temperature: float
    humidity: float
    pulse_rate: float
    oxygen_rate: float
    spo2: float


class GaugeValues(BaseModel):
    temperature: float
    humidity: float
    pulse_rate: float
    spo2: float

    @classmethod
    def from_metrics(cls, values: MetricValues) -> "GaugeValues":
        return cls(
            temperature=values.temperature,
            humidity=values.humidity,
            pulse_rate=values.pulse_rate,
            spo2=values.spo2,
        )


class StatusPayload(BaseModel):
    status: VitalStatus
    color_hint: ColorHint

    @classmethod
    def from_classification(cls, classification: StatusClassification) -> "StatusPayload":
        return cls(status=classification.status, color_hint=classification.color_hint)


class TelemetryResponse(BaseModel):
    """Latest reading with its derived gauge values and vital statuses."""

    reading: ReadingPayload
    progress: GaugeValues = Field(..., description="Value divided by the metric maximum; not clamped.")
    rotation_target: GaugeValues = Field(..., description="Gauge rotation in degrees.")
    pulse_rate_status: StatusPayload
    spo2_status: StatusPayload
    received_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: TelemetrySnapshot) -> "TelemetryResponse":
        reading = snapshot.reading
        return cls(
            reading=ReadingPayload(
                temperature=reading.temperature,
                humidity=reading.humidity,
                pulse_rate=reading.pulse_rate,
                oxygen_rate=reading.oxygen_rate,
                spo2=reading.spo2,
            ),
            progress=GaugeValues.from_metrics(snapshot.derived.progress),
            rotation_target=GaugeValues.from_metrics(snapshot.derived.rotation_target),
            pulse_rate_status=StatusPayload.from_classification(snapshot.assessment.pulse_rate),
            spo2_status=StatusPayload.from_classification(snapshot.assessment.spo2),
            received_at=snapshot.received_at,
        )


class MessageCreate(BaseModel):
    text: str


class MessageResponse(BaseModel):
    id: str
    text: str
    timestamp: int = Field(..., description="Milliseconds since the epoch.")
    sender: str

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        return cls(
            id=message.id,
            text=message.text,
            timestamp=message.timestamp,
            sender=message.sender,
        )


class MessageListResponse(BaseModel):
    messages: List[MessageResponse] = Field(default_factory=list)
