"""Application service: Show Order use case (thank-you page / invoice)."""

from __future__ import annotations

from storefront.application.dto import OrderDTO
from storefront.application.messages import render_invoice
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository, store_name: str = "Storefront") -> None:
        self._order_repo = order_repo
        self._store_name = store_name

    def handle(self, order_number: str) -> OrderDTO:
        return OrderDTO.from_order(self._load(order_number))

    def invoice(self, order_number: str) -> str:
        return render_invoice(self._load(order_number), self._store_name)

    def _load(self, order_number: str) -> Order:
        order = self._order_repo.get_by_number(order_number.strip().upper())
        if order is None:
            raise EntityNotFoundError(f"Order {order_number} not found")
        return order


class ListCustomerOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, user_id: str) -> list[OrderDTO]:
        """Orders placed from an account, newest first."""
        return [OrderDTO.from_order(o) for o in self._order_repo.list_for_user(user_id)]
