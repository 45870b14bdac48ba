from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_FEED_NAME_ENV = "FEED_NAME"
_FEED_PATH_ENV = "FEED_PERSISTENCE_PATH"
_SENSOR_PATH_ENV = "SENSOR_DATA_PATH"
_MESSAGES_PATH_ENV = "MESSAGES_PATH"
_SENDER_ENV = "MESSAGE_SENDER"
_FETCH_LIMIT_ENV = "MESSAGE_FETCH_LIMIT"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    feed_name: str
    feed_persistence_path: Optional[str]
    sensor_data_path: str
    messages_path: str
    message_sender: str
    message_fetch_limit: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        feed_name=_read_str_env(_FEED_NAME_ENV, "telemetry"),
        feed_persistence_path=_read_optional_env(_FEED_PATH_ENV, "./tmp/mock_feed.json"),
        sensor_data_path=_read_str_env(_SENSOR_PATH_ENV, "sensorData"),
        messages_path=_read_str_env(_MESSAGES_PATH_ENV, "messages"),
        message_sender=_read_str_env(_SENDER_ENV, "patient"),
        message_fetch_limit=_read_positive_int(_FETCH_LIMIT_ENV, 20),
        log_level=_read_log_level("INFO"),
    )
