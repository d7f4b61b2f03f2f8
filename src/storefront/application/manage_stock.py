"""Application services: Set Stock / Show Stock use cases."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.inventory import InventoryRecord
from storefront.domain.repository.inventory_repository import InventoryRepository


@dataclass(frozen=True)
class StockLineDTO:
    sku: str
    stock: int


class SetStockHandler:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def handle(self, sku: str, stock: int) -> None:
        """Set the stock count for a product or variant."""
        if not sku or not sku.strip():
            raise ValidationError("SKU is required")

        existing = self._inventory_repo.get(sku)
        if existing is not None:
            if stock < 0:
                raise ValidationError(f"Stock for '{sku}' cannot be negative")
            existing.stock = stock
            self._inventory_repo.save(existing)
        else:
            self._inventory_repo.save(InventoryRecord(sku=sku.strip(), stock=stock))


class ShowStockHandler:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def handle(self) -> list[StockLineDTO]:
        return [
            StockLineDTO(sku=record.sku, stock=record.stock)
            for record in self._inventory_repo.list_all()
        ]
