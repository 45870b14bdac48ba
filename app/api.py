"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from app.schemas import (
    MessageCreate,
    MessageListResponse,
    MessageResponse,
    TelemetryResponse,
)
from datastore.feed import FeedError
from services.dashboard import DashboardService, build_default_dashboard
from services.errors import RemoteReadFailure
from services.message_log import SendStatus

router = APIRouter()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


@router.get(
    "/telemetry",
    response_model=TelemetryResponse,
    summary="Latest normalized reading with gauge targets and vital statuses.",
)
async def get_telemetry(
    dashboard: DashboardService = Depends(get_dashboard),
) -> TelemetryResponse:
    return TelemetryResponse.from_snapshot(dashboard.latest())


@router.put(
    "/sensor-data",
    response_model=TelemetryResponse,
    summary="Write a raw sensor payload to the feed.",
)
async def put_sensor_data(
    payload: Dict[str, Any] = Body(..., description="Raw sensor record as pushed by the device."),
    dashboard: DashboardService = Depends(get_dashboard),
) -> TelemetryResponse:
    try:
        dashboard.ingest_reading(payload)
    except FeedError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Could not write sensor data: {exc}",
        ) from exc
    return TelemetryResponse.from_snapshot(dashboard.latest())


@router.get(
    "/messages",
    response_model=MessageListResponse,
    summary="Most recent messages, newest first.",
)
async def list_messages(
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of messages."),
    dashboard: DashboardService = Depends(get_dashboard),
) -> MessageListResponse:
    try:
        messages = dashboard.fetch_messages(limit)
    except RemoteReadFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc
    return MessageListResponse(
        messages=[MessageResponse.from_message(message) for message in messages]
    )


@router.post(
    "/messages",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    summary="Send a message to the caregiver channel.",
)
async def send_message(
    body: MessageCreate,
    dashboard: DashboardService = Depends(get_dashboard),
) -> MessageResponse:
    outcome = dashboard.send_message(body.text)
    if outcome.status is SendStatus.empty:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message cannot be empty.",
        )
    if outcome.status is SendStatus.failed or outcome.message is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(outcome.error),
        )
    return MessageResponse.from_message(outcome.message)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(
    dashboard: DashboardService = Depends(get_dashboard),
) -> dict[str, str]:
    return {"status": "ok", "subscription": dashboard.subscription.state.value}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
