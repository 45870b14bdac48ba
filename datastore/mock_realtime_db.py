from __future__ import annotations

import copy
import json
import logging
from functools import lru_cache
from itertools import count
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from datastore.feed import FeedUnavailableError, SnapshotCallback, Unsubscribe
from settings import get_settings

logger = logging.getLogger(__name__)


def _child_sort_key(value: Any) -> Tuple[int, Any]:
    # null < booleans < numbers < strings < objects
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4, 0)


class MockRealtimeDatabase:
    """In-process stand-in for a realtime key-path database.

    Top-level paths hold either a single record or a collection of pushed
    children. Values are deep-copied on the way in and out, so callers never
    share state with the store.
    """

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self.persistence_path = persistence_path
        self._tree: Dict[str, Any] = {}
        self._subscribers: Dict[str, Dict[int, SnapshotCallback]] = {}
        self._subscription_ids = count(1)
        self._online = True
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    @property
    def online(self) -> bool:
        return self._online

    def get(self, path: str) -> Any:
        key = self._normalize_path(path)
        with self._lock:
            self._ensure_online()
            return copy.deepcopy(self._tree.get(key))

    def set(self, path: str, value: Any) -> None:
        key = self._normalize_path(path)
        with self._lock:
            self._ensure_online()
            tree = dict(self._tree)
            if value is None:
                tree.pop(key, None)
            else:
                tree[key] = copy.deepcopy(value)
            self._commit(tree)
        self._notify(key)

    def push(self, path: str, value: Any) -> str:
        key = self._normalize_path(path)
        child_key = uuid4().hex
        with self._lock:
            self._ensure_online()
            existing = self._tree.get(key)
            collection = dict(existing) if isinstance(existing, dict) else {}
            collection[child_key] = copy.deepcopy(value)
            tree = dict(self._tree)
            tree[key] = collection
            self._commit(tree)
        self._notify(key)
        return child_key

    def query(
        self, path: str, order_by: str, limit_to_last: int
    ) -> List[Tuple[str, Any]]:
        if limit_to_last <= 0:
            raise ValueError("limit_to_last must be a positive integer.")
        key = self._normalize_path(path)
        with self._lock:
            self._ensure_online()
            collection = self._tree.get(key)
            if not isinstance(collection, dict):
                return []
            children = list(collection.items())

        def sort_key(item: Tuple[str, Any]) -> Tuple[Tuple[int, Any], str]:
            child_key, child = item
            field = child.get(order_by) if isinstance(child, dict) else None
            return (_child_sort_key(field), child_key)

        ordered = sorted(children, key=sort_key)[-limit_to_last:]
        return [(child_key, copy.deepcopy(child)) for child_key, child in ordered]

    def subscribe(self, path: str, callback: SnapshotCallback) -> Unsubscribe:
        """Register ``callback`` and deliver the current value to it right away.

        While offline the initial delivery is deferred until ``go_online``.
        """
        key = self._normalize_path(path)
        subscription_id = next(self._subscription_ids)
        with self._lock:
            self._subscribers.setdefault(key, {})[subscription_id] = callback
            online = self._online
            current = copy.deepcopy(self._tree.get(key))
        logger.debug(
            "Subscriber registered",
            extra={"feed_path": key, "subscriber_count": self.subscriber_count(key)},
        )
        if online:
            callback(current)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._subscribers.get(key)
                if listeners is not None:
                    listeners.pop(subscription_id, None)
                    if not listeners:
                        self._subscribers.pop(key, None)

        return unsubscribe

    def subscriber_count(self, path: str) -> int:
        key = self._normalize_path(path)
        with self._lock:
            return len(self._subscribers.get(key, {}))

    def go_offline(self) -> None:
        with self._lock:
            self._online = False
        logger.info("Feed disconnected", extra={"status": "offline"})

    def go_online(self) -> None:
        """Reconnect and re-deliver the current value of every watched path."""
        with self._lock:
            if self._online:
                return
            self._online = True
            paths = list(self._subscribers)
        logger.info("Feed reconnected", extra={"status": "online"})
        for key in paths:
            self._notify(key)

    def _notify(self, key: str) -> None:
        with self._lock:
            if not self._online:
                return
            listeners = list(self._subscribers.get(key, {}).values())
            value = self._tree.get(key)
            snapshots = [copy.deepcopy(value) for _ in listeners]
        for callback, snapshot in zip(listeners, snapshots):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Subscriber callback failed", extra={"feed_path": key})

    def _ensure_online(self) -> None:
        if not self._online:
            raise FeedUnavailableError(f"Feed {self.name!r} is offline.")

    @staticmethod
    def _normalize_path(path: str) -> str:
        key = path.strip().strip("/")
        if not key:
            raise ValueError("Feed path must not be empty.")
        return key

    def _commit(self, tree: Dict[str, Any]) -> None:
        # Only a successfully persisted tree becomes visible.
        self._persist(tree)
        self._tree = tree

    def _persist(self, tree: Dict[str, Any]) -> None:
        if not self.persistence_path:
            return
        self.persistence_path.write_text(json.dumps(tree, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        if isinstance(data, dict):
            self._tree = data


@lru_cache
def build_default_feed(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> MockRealtimeDatabase:
    settings = get_settings()
    feed_name = settings.feed_name if name is None else name
    feed_path = settings.feed_persistence_path if path is None else path
    persistence = Path(feed_path) if feed_path else None
    return MockRealtimeDatabase(name=feed_name, persistence_path=persistence)
