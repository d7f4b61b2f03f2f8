"""Cart — the shopper's session-scoped basket.

The cart is an explicit state container: every change goes through its
mutation API so components that hold a reference always see the same
state.  It is destroyed (cleared) when checkout completes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.coupon import normalize_code
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money, Quantity


@dataclass(frozen=True)
class SelectedOption:
    name: str
    value: str


@dataclass(frozen=True)
class CartLine:
    """One product/variant in the cart at the price it was added at."""

    product_id: str
    variant_id: str
    product_name: str
    unit_price: Money
    quantity: Quantity
    options: tuple[SelectedOption, ...] = ()
    image: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def options_display(self) -> str:
        """Chosen option values joined for display, e.g. ``"Red, XL"``."""
        return ", ".join(opt.value for opt in self.options)

    @property
    def options_labelled(self) -> str:
        return ", ".join(f"{opt.name}: {opt.value}" for opt in self.options)

    def with_quantity(self, quantity: int) -> CartLine:
        return replace(self, quantity=Quantity(quantity))


@dataclass
class Cart:
    session_id: str = "default"
    lines: list[CartLine] = field(default_factory=list)
    coupon_code: str | None = None

    # --- Mutation API ---------------------------------------------------------

    def add(self, line: CartLine) -> None:
        """Add a line, merging quantities when the variant is already present."""
        if self.lines and line.unit_price.currency != self.currency:
            raise ValidationError(
                f"Cart is priced in {self.currency}, cannot add "
                f"{line.product_name} priced in {line.unit_price.currency}"
            )
        for i, existing in enumerate(self.lines):
            if existing.variant_id == line.variant_id:
                self.lines[i] = existing.with_quantity(
                    existing.quantity.value + line.quantity.value
                )
                return
        self.lines.append(line)

    def update_quantity(self, variant_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            self.remove(variant_id)
            return
        i = self._index_of(variant_id)
        self.lines[i] = self.lines[i].with_quantity(quantity)

    def remove(self, variant_id: str) -> None:
        self.lines = [line for line in self.lines if line.variant_id != variant_id]

    def clear(self) -> None:
        self.lines = []
        self.coupon_code = None

    def apply_coupon(self, code: str) -> None:
        self.coupon_code = normalize_code(code)

    def remove_coupon(self) -> None:
        self.coupon_code = None

    # --- Queries --------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total_items(self) -> int:
        return sum(line.quantity.value for line in self.lines)

    @property
    def currency(self) -> str:
        return self.lines[0].unit_price.currency if self.lines else DEFAULT_CURRENCY

    def _index_of(self, variant_id: str) -> int:
        for i, line in enumerate(self.lines):
            if line.variant_id == variant_id:
                return i
        raise ValidationError(f"Variant '{variant_id}' is not in the cart")
