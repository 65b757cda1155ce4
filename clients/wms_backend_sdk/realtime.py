from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("wms_backend_sdk.realtime")


@dataclass(frozen=True)
class ChangeEvent:
    """A row-level change notification for one table."""

    table: str
    event: str
    record: dict[str, Any] = field(default_factory=dict)
    old_record: dict[str, Any] = field(default_factory=dict)
    schema: str = "public"


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    def __init__(self, unsubscribe: Callable[[], None]) -> None:
        self._unsubscribe = unsubscribe
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._unsubscribe()


class ChangeFeed:
    """Fan-out of table change notifications to local subscribers.

    The hosted realtime transport is not part of this package; whatever
    receives its messages hands them to :meth:`publish`. Writes issued through
    :class:`TableClient` publish here as well, so local subscribers hear about
    their own mutations even without a realtime connection.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[int, tuple[str | None, ChangeCallback]] = {}
        self._next_id = 0

    def subscribe(self, callback: ChangeCallback, table: str | None = None) -> Subscription:
        with self._lock:
            subscriber_id = self._next_id
            self._next_id += 1
            self._subscribers[subscriber_id] = (table, callback)

        def _remove() -> None:
            with self._lock:
                self._subscribers.pop(subscriber_id, None)

        return Subscription(_remove)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = [callback for table, callback in self._subscribers.values() if table in (None, event.table)]
        for callback in targets:
            try:
                callback(event)
            except Exception:
                logger.exception("change subscriber failed for table=%s event=%s", event.table, event.event)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
