"""Caregiver channel messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True, slots=True)
class Message:
    """A message confirmed by the feed.

    ``id`` is the key assigned by the feed on append. It only hints at
    ordering; ``timestamp`` (milliseconds since the epoch) is authoritative.
    """

    id: str
    text: str
    timestamp: int
    sender: str

    def to_record(self) -> Dict[str, Any]:
        """Wire form stored under the messages path (the key is not part of it)."""
        return {"text": self.text, "timestamp": self.timestamp, "sender": self.sender}
