"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import Order

# Change-feed table name for order events.
ORDERS_TABLE = "orders"


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order.

        Raises PersistenceError if the order number is already taken.
        """

    @abstractmethod
    def get_by_number(self, order_number: str) -> Order | None:
        """Return an order by its order number, or None if not found."""

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Order]:
        """Return every order placed by an account, newest first."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist changes to an existing order."""
