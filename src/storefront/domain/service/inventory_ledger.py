"""Domain service: stock adjustment for submitted orders.

A line is charged against its variant record when one exists, otherwise
against its product record.  Lines with neither are sold untracked.
Decrements are floor-clamped at zero; the ledger does not refuse an
order for lack of stock unless asked to check first.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from storefront.domain.exceptions import InsufficientStock
from storefront.domain.model.cart import CartLine
from storefront.domain.model.inventory import InventoryRecord
from storefront.domain.repository.inventory_repository import InventoryRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockAdjustment:
    """Units actually removed from one record, kept for compensation."""

    sku: str
    removed: int


class InventoryLedger:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def decrement(self, sku: str, quantity: int) -> int | None:
        """Remove up to ``quantity`` units from ``sku``; never below zero."""
        return self._inventory_repo.decrement(sku, quantity)

    def decrement_lines(
        self,
        lines: Sequence[CartLine],
        adjustments: list[StockAdjustment] | None = None,
    ) -> list[StockAdjustment]:
        """Take stock for every line.

        Adjustments are appended to ``adjustments`` as they happen, so a
        caller still knows what was taken if a later line fails.
        """
        if adjustments is None:
            adjustments = []
        for line in lines:
            record = self._record_for(line)
            if record is None:
                logger.warning(
                    "No stock record for line, skipping",
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                )
                continue
            removed = self.decrement(record.sku, line.quantity.value) or 0
            if removed < line.quantity.value:
                logger.warning(
                    "Line oversold",
                    sku=record.sku,
                    requested=line.quantity.value,
                    removed=removed,
                )
            adjustments.append(StockAdjustment(sku=record.sku, removed=removed))
        return adjustments

    def check_available(self, lines: Sequence[CartLine]) -> None:
        """Raise InsufficientStock for the first line stock cannot cover.

        Quantities for lines sharing a record are summed.
        """
        wanted: dict[str, int] = {}
        records: dict[str, InventoryRecord] = {}
        names: dict[str, str] = {}
        for line in lines:
            record = self._record_for(line)
            if record is None:
                continue
            records[record.sku] = record
            names.setdefault(record.sku, line.product_name)
            wanted[record.sku] = wanted.get(record.sku, 0) + line.quantity.value

        for sku, qty in wanted.items():
            record = records[sku]
            if not record.covers(qty):
                raise InsufficientStock(
                    f"Insufficient stock for {names[sku]} "
                    f"(need {qty}, have {record.stock})"
                )

    def restore(self, adjustments: Sequence[StockAdjustment]) -> None:
        for adj in adjustments:
            if adj.removed > 0:
                self._inventory_repo.restore(adj.sku, adj.removed)

    def _record_for(self, line: CartLine) -> InventoryRecord | None:
        record = self._inventory_repo.get(line.variant_id)
        if record is None and line.product_id != line.variant_id:
            record = self._inventory_repo.get(line.product_id)
        return record
