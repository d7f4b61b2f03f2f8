"""Abstract repository for shopper carts."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def get(self, session_id: str) -> Cart:
        """Return the session's cart, empty if none was saved yet."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist the cart's current lines."""
