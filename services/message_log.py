"""Bounded fetch and send for the caregiver message channel."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from datastore.feed import FeedClient
from models.messages import Message
from services.errors import RemoteReadFailure, RemoteWriteFailure

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES_PATH = "messages"
DEFAULT_SENDER = "patient"


def _now_ms() -> int:
    return int(time.time() * 1000)


class SendStatus(str, Enum):
    sent = "sent"
    empty = "empty"
    failed = "failed"


@dataclass(frozen=True)
class SendOutcome:
    """Result of ``MessageLog.send``; the caller decides how to present it."""

    status: SendStatus
    message: Optional[Message] = None
    error: Optional[RemoteWriteFailure] = None

    @property
    def ok(self) -> bool:
        return self.status is SendStatus.sent

    @property
    def clear_draft(self) -> bool:
        """Only a confirmed send consumes the caller's draft."""
        return self.status is SendStatus.sent


class MessageLog:
    """Messages stored under one feed path, ordered by ``timestamp``.

    ``fetch_recent`` is a one-shot read. Messages written afterwards, including
    ones sent through this log, only show up on the next fetch unless the
    caller splices them in itself.
    """

    def __init__(
        self,
        feed: FeedClient,
        path: str = DEFAULT_MESSAGES_PATH,
        sender: str = DEFAULT_SENDER,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.feed = feed
        self.path = path
        self.sender = sender
        self._clock = clock

    def fetch_recent(self, limit: int) -> List[Message]:
        """Return up to ``limit`` of the latest messages, newest first."""
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValueError("limit must be a positive integer.")

        try:
            children = self.feed.query(self.path, order_by="timestamp", limit_to_last=limit)
        except Exception as exc:
            logger.warning(
                "Message fetch failed",
                extra={"feed_path": self.path, "limit": limit, "reason": str(exc)},
            )
            raise RemoteReadFailure(f"Could not read messages: {exc}") from exc

        messages: List[Message] = []
        for key, record in children:
            message = self._parse_record(key, record)
            if message is not None:
                messages.append(message)

        messages.sort(key=lambda message: (message.timestamp, message.id), reverse=True)
        return messages

    def send(self, text: str) -> SendOutcome:
        if not text or not text.strip():
            return SendOutcome(status=SendStatus.empty)

        timestamp = self._clock()
        record = {"text": text, "timestamp": timestamp, "sender": self.sender}
        try:
            key = self.feed.push(self.path, record)
        except Exception as exc:
            logger.warning(
                "Message send failed",
                extra={"feed_path": self.path, "reason": str(exc)},
            )
            failure = RemoteWriteFailure(f"Failed to send message: {exc}")
            failure.__cause__ = exc
            return SendOutcome(status=SendStatus.failed, error=failure)

        message = Message(id=key, text=text, timestamp=timestamp, sender=self.sender)
        logger.info(
            "Message sent",
            extra={"feed_path": self.path, "message_id": message.id},
        )
        return SendOutcome(status=SendStatus.sent, message=message)

    def _parse_record(self, key: str, record: Any) -> Optional[Message]:
        if not isinstance(record, dict):
            reason = "record is not an object"
        else:
            text = record.get("text")
            timestamp = record.get("timestamp")
            sender = record.get("sender")
            if not isinstance(text, str) or not text.strip():
                reason = "missing text"
            elif (
                isinstance(timestamp, bool)
                or not isinstance(timestamp, (int, float))
                or (isinstance(timestamp, float) and not math.isfinite(timestamp))
            ):
                reason = "invalid timestamp"
            else:
                return Message(
                    id=key,
                    text=text,
                    timestamp=int(timestamp),
                    sender=sender if isinstance(sender, str) else "",
                )
        logger.warning(
            "Skipping unreadable message",
            extra={"record_key": key, "reason": reason},
        )
        return None
