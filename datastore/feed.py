"""Interface of the push-capable key-path store the engine talks to."""

from __future__ import annotations

from typing import Any, Callable, List, Protocol, Tuple

SnapshotCallback = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class FeedError(Exception):
    """Base class for errors raised by a feed client."""


class FeedUnavailableError(FeedError):
    """The feed is disconnected and cannot serve reads or writes."""


class FeedClient(Protocol):
    def subscribe(self, path: str, callback: SnapshotCallback) -> Unsubscribe:
        """Deliver the current value at ``path`` and every later change to ``callback``."""
        ...

    def query(
        self, path: str, order_by: str, limit_to_last: int
    ) -> List[Tuple[str, Any]]:
        """Return the last ``limit_to_last`` children of ``path`` ordered by a child field."""
        ...

    def push(self, path: str, value: Any) -> str:
        """Append ``value`` under a new server-assigned key and return the key."""
        ...

    def set(self, path: str, value: Any) -> None:
        ...
