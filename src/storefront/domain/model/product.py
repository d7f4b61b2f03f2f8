"""Product aggregate (catalog read side).

Products live independently of orders.  Carts copy the name, options and
price out of the product when a line is added, and orders copy them again
from the cart, so catalog edits never reach a placed order.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import SelectedOption
from storefront.domain.model.value_objects import Money


@dataclass(frozen=True)
class Variant:
    id: str
    options: tuple[SelectedOption, ...] = ()
    price: Money | None = None  # falls back to the product price


@dataclass
class Product:
    """A product in the catalog.

    A product without variants is sold as a single implicit variant whose
    id is the product id.
    """

    id: str
    name: str
    price: Money
    image: str | None = None
    variants: list[Variant] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Product name is required")
        if self.price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")

    def variant(self, variant_id: str | None) -> Variant:
        if variant_id is None or variant_id == self.id:
            if self.variants:
                raise ValidationError(
                    f"Product '{self.name}' has variants; choose one of "
                    + ", ".join(v.id for v in self.variants)
                )
            return Variant(id=self.id)
        for v in self.variants:
            if v.id == variant_id:
                return v
        raise ValidationError(f"Product '{self.name}' has no variant '{variant_id}'")

    def price_of(self, variant: Variant) -> Money:
        return variant.price or self.price
