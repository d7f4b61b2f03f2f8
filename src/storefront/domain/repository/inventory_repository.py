"""Abstract repository for InventoryRecord aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.inventory import InventoryRecord


class InventoryRepository(ABC):

    @abstractmethod
    def get(self, sku: str) -> InventoryRecord | None:
        """Return the stock record for a product or variant, or None."""

    @abstractmethod
    def list_all(self) -> list[InventoryRecord]:
        """Return every stock record."""

    @abstractmethod
    def save(self, record: InventoryRecord) -> None:
        """Persist a new or updated stock record."""

    @abstractmethod
    def decrement(self, sku: str, quantity: int) -> int | None:
        """Atomically remove up to ``quantity`` units, floor-clamped at zero.

        Returns the units actually removed, or None if no record exists.
        """

    @abstractmethod
    def restore(self, sku: str, quantity: int) -> None:
        """Atomically add ``quantity`` units back to a record."""
