"""In-process implementation of ChangeFeed.

Events are queued and drained in publish order.  A handler that publishes
while an event is being delivered does not recurse: its event joins the
queue and is delivered after the current one.  A failing handler is
logged and skipped; the remaining subscribers still get the event.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Any

import structlog

from storefront.domain.repository.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeHandler,
    Subscription,
)

logger = structlog.get_logger(__name__)


class _Subscription(Subscription):

    def __init__(
        self,
        feed: InProcessChangeFeed,
        table: str,
        handler: ChangeHandler,
        where: dict[str, Any] | None,
    ) -> None:
        self._feed = feed
        self.table = table
        self.handler = handler
        self.where = dict(where) if where else None
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._active = False
            self._feed._remove(self)

    def wants(self, event: ChangeEvent) -> bool:
        return self._active and event.table == self.table and event.matches(self.where)


class InProcessChangeFeed(ChangeFeed):

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []
        self._queue: deque[ChangeEvent] = deque()
        self._lock = threading.RLock()
        self._draining = False

    def subscribe(
        self,
        table: str,
        handler: ChangeHandler,
        where: dict[str, Any] | None = None,
    ) -> Subscription:
        subscription = _Subscription(self, table, handler, where)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug("Subscribed to changes", table=table, where=where)
        return subscription

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            self._queue.append(event)
            if self._draining:
                return
            self._draining = True
        try:
            self._drain()
        finally:
            with self._lock:
                self._draining = False

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._queue:
                    return
                event = self._queue.popleft()
                targets = [s for s in self._subscriptions if s.wants(event)]
            for subscription in targets:
                if not subscription.active:
                    continue
                try:
                    subscription.handler(event)
                except Exception:
                    logger.exception(
                        "Change handler failed",
                        table=event.table,
                        kind=event.kind.value,
                    )

    def _remove(self, subscription: _Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
