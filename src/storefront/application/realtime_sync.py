"""Application service: live order updates for a signed-in customer.

RealtimeOrderSync keeps a customer's visible order list in step with the
store and raises in-session notifications when an order appears or its
status changes.  Both the list and the notifications are plain state
containers passed in by the caller, so whatever renders them reads the
same objects the sync writes.

Events arrive from the change feed in the order the store emitted them;
no reordering is attempted here.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

import structlog

from storefront.domain.model.order import Order
from storefront.domain.repository.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeKind,
    Subscription,
)
from storefront.domain.repository.order_repository import ORDERS_TABLE

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationCategory(Enum):
    ORDER_CREATED = "order-created"
    STATUS_CHANGED = "status-changed"


@dataclass
class Notification:
    id: str
    message: str
    category: NotificationCategory
    created_at: datetime
    read: bool = False


@dataclass
class NotificationCenter:
    """Session-scoped notifications, newest first."""

    items: list[Notification] = field(default_factory=list)

    def push(self, notification: Notification) -> None:
        self.items.insert(0, notification)

    def mark_read(self, notification_id: str) -> None:
        for n in self.items:
            if n.id == notification_id:
                n.read = True

    def clear(self) -> None:
        self.items = []

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.items if not n.read)

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class OrderListState:
    """The customer's visible orders, newest first, keyed by order number."""

    orders: list[Order] = field(default_factory=list)

    def replace_all(self, orders: Iterable[Order]) -> None:
        self.orders = list(orders)

    def prepend(self, order: Order) -> None:
        self.orders.insert(0, order)

    def upsert(self, order: Order) -> Order | None:
        """Replace the order in place; prepend it if it is not listed.

        Returns the copy that was replaced, if any.
        """
        for i, existing in enumerate(self.orders):
            if existing.order_number == order.order_number:
                self.orders[i] = order
                return existing
        self.prepend(order)
        return None

    def remove(self, order_number: str) -> None:
        self.orders = [o for o in self.orders if o.order_number != order_number]

    def get(self, order_number: str) -> Order | None:
        for o in self.orders:
            if o.order_number == order_number:
                return o
        return None

    def __len__(self) -> int:
        return len(self.orders)


class RealtimeOrderSync:

    def __init__(
        self,
        feed: ChangeFeed,
        user_id: str,
        orders: OrderListState,
        notifications: NotificationCenter,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._feed = feed
        self._user_id = user_id
        self._orders = orders
        self._notifications = notifications
        self._clock = clock
        self._subscription: Subscription | None = None
        self._ids = itertools.count(1)

    @property
    def active(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def start(self, initial: Iterable[Order] | None = None) -> None:
        """Load the starting list (if given) and begin listening."""
        if self.active:
            return
        if initial is not None:
            self._orders.replace_all(initial)
        self._subscription = self._feed.subscribe(
            ORDERS_TABLE, self._on_change, where={"user_id": self._user_id}
        )
        logger.debug("Order sync started", user_id=self._user_id)

    def stop(self) -> None:
        """Stop listening.  Safe to call more than once."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
            logger.debug("Order sync stopped", user_id=self._user_id)

    def __enter__(self) -> RealtimeOrderSync:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    # --- Event handling -------------------------------------------------------

    def _on_change(self, event: ChangeEvent) -> None:
        if event.kind is ChangeKind.INSERT:
            order: Order = event.new
            self._orders.upsert(order)
            self._notify(
                NotificationCategory.ORDER_CREATED,
                f"New order created: {order.order_number}",
            )
        elif event.kind is ChangeKind.UPDATE:
            order = event.new
            replaced = self._orders.upsert(order)
            before = replaced if replaced is not None else event.old
            if before is None or before.status is not order.status:
                self._notify(
                    NotificationCategory.STATUS_CHANGED,
                    f"Order {order.order_number} status updated to: {order.status.label}",
                )
        elif event.kind is ChangeKind.DELETE:
            self._orders.remove(event.old.order_number)

    def _notify(self, category: NotificationCategory, message: str) -> None:
        notification = Notification(
            id=f"{category.value}-{next(self._ids)}",
            message=message,
            category=category,
            created_at=self._clock(),
        )
        self._notifications.push(notification)
        logger.info("Order notification", user_id=self._user_id, category=category.value)
