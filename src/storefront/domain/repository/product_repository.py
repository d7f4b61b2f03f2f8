"""Abstract repository for the product catalog.

Carts look products up by id to price a chosen variant; the admin CLI
lists and adds products.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """The product with this id, or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """All catalog products in insertion order."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Insert the product, or replace the one with the same id."""
