"""InventoryRecord aggregate — remaining purchasable units per product or variant.

Each record is keyed by a SKU, which is either a variant id or, for
products without variants, the product id.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import ValidationError


@dataclass
class InventoryRecord:
    """Aggregate root for stock tracking.

    Invariants:
    - ``stock`` is always >= 0
    """

    sku: str
    stock: int

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError(f"Stock for '{self.sku}' cannot be negative")

    def decrement(self, quantity: int) -> int:
        """Remove up to ``quantity`` units, stopping at zero.

        Returns how many units were actually removed.
        """
        if quantity <= 0:
            raise ValidationError("Decrement quantity must be positive")
        removed = min(quantity, self.stock)
        self.stock -= removed
        return removed

    def restore(self, quantity: int) -> None:
        """Put units back, e.g. when a submission is rolled back."""
        if quantity < 0:
            raise ValidationError("Restore quantity cannot be negative")
        self.stock += quantity

    def covers(self, quantity: int) -> bool:
        return quantity <= self.stock
