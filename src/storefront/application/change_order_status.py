"""Application service: Change Order Status use case (back office).

An administrator moves an order along its lifecycle.  The status machine
refuses moves that are not legal from the current status; on success the
order is saved (which notifies any watching customer session) and the
status-update e-mail for the customer is returned for delivery.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import structlog

from storefront.application.messages import EmailMessage, build_status_update_email
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus(raw.strip().lower())
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Unknown status '{raw}'. Expected one of: {valid}") from None


class ChangeOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        store_name: str = "Storefront",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._order_repo = order_repo
        self._store_name = store_name
        self._clock = clock

    def handle(
        self,
        order_number: str,
        new_status: OrderStatus,
        note: str | None = None,
    ) -> EmailMessage:
        order = self._order_repo.get_by_number(order_number.strip().upper())
        if order is None:
            raise EntityNotFoundError(f"Order {order_number} not found")

        previous = order.transition_to(new_status, at=self._clock())
        if note:
            order.append_note(note)
        self._order_repo.save(order)

        logger.info(
            "Order status changed",
            order_number=order.order_number,
            previous=previous.value,
            status=new_status.value,
        )
        return build_status_update_email(order, previous, self._store_name)
