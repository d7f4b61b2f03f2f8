"""Application service: Track Order use case (query).

Anyone holding an order number can look the order up; the e-mail, when
given, is a light check that it is their order.
"""

from __future__ import annotations

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.repository.order_repository import OrderRepository


class TrackOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_number: str, email: str | None = None) -> OrderDTO:
        number = (order_number or "").strip().upper()
        if not number:
            raise ValidationError("Please enter order number")

        order = self._order_repo.get_by_number(number)
        if order is None:
            raise EntityNotFoundError("Order not found")

        if email and email.strip():
            if order.customer_email.lower() != email.strip().lower():
                raise EntityNotFoundError("Order not found")

        return OrderDTO.from_order(order)
