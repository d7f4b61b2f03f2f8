"""Order lifecycle states and the legal moves between them.

    awaiting_payment ─┐
                      ├─> confirmed ─> processing ─> shipped ─> delivered
    pending ──────────┘        └────────────┴───────────┴──> completed

    any non-terminal state ─> cancelled

Forward moves may skip steps on the happy path.  Nothing moves backwards
and the terminal states accept nothing.
"""

from __future__ import annotations

from enum import Enum

from storefront.domain.exceptions import IllegalTransitionError


class OrderStatus(Enum):
    PENDING = "pending"
    AWAITING_PAYMENT = "awaiting_payment"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.COMPLETED, OrderStatus.CANCELLED}
)

# Position on the happy path; both entry states share rank 0.
_RANK = {
    OrderStatus.PENDING: 0,
    OrderStatus.AWAITING_PAYMENT: 0,
    OrderStatus.CONFIRMED: 1,
    OrderStatus.PROCESSING: 2,
    OrderStatus.SHIPPED: 3,
    OrderStatus.DELIVERED: 4,
}

_COMPLETABLE_FROM = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED}
)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current.is_terminal or current is target:
        return False
    if target is OrderStatus.CANCELLED:
        return True
    if target is OrderStatus.COMPLETED:
        return current in _COMPLETABLE_FROM
    return _RANK[target] > _RANK[current]


def allowed_targets(current: OrderStatus) -> list[OrderStatus]:
    return [s for s in OrderStatus if can_transition(current, s)]


def assert_transition(current: OrderStatus, target: OrderStatus) -> None:
    if not can_transition(current, target):
        raise IllegalTransitionError(
            f"Cannot move order from {current.value} to {target.value}"
        )
