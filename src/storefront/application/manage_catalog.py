"""Application services: catalog and coupon administration."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from uuid import uuid4

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import SelectedOption
from storefront.domain.model.coupon import Coupon, DiscountKind
from storefront.domain.model.product import Product, Variant
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money
from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository, currency: str = DEFAULT_CURRENCY) -> None:
        self._product_repo = product_repo
        self._currency = currency

    def handle(
        self,
        name: str,
        price: str,
        image: str | None = None,
        variants: dict[str, list[tuple[str, str]]] | None = None,
    ) -> Product:
        """Add a new product to the catalog.

        ``variants`` maps a variant id to its ``(option name, value)`` pairs.
        """
        # Auto-assign ID based on existing products
        numeric_ids = [int(p.id) for p in self._product_repo.list_all() if p.id.isdigit()]
        next_id = str(max(numeric_ids, default=0) + 1)

        product = Product(
            id=next_id,
            name=name.strip(),
            price=Money.of(price, currency=self._currency),
            image=image,
            variants=[
                Variant(
                    id=variant_id,
                    options=tuple(SelectedOption(n, v) for n, v in options),
                )
                for variant_id, options in (variants or {}).items()
            ],
        )
        self._product_repo.save(product)
        return product


class AddCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(
        self,
        code: str,
        kind: str,
        value: str,
        min_order_amount: str | None = None,
        expires_at: datetime | None = None,
        max_uses: int | None = None,
    ) -> Coupon:
        if self._coupon_repo.get_by_code(code) is not None:
            raise ValidationError(f"Coupon '{code.upper()}' already exists")
        try:
            discount_kind = DiscountKind(kind.lower())
        except ValueError:
            raise ValidationError("Discount type must be 'percentage' or 'fixed'") from None

        coupon = Coupon(
            id=str(uuid4()),
            code=code,
            kind=discount_kind,
            value=_decimal(value, "discount value"),
            min_order_amount=_decimal(min_order_amount, "minimum order")
            if min_order_amount
            else None,
            expires_at=expires_at,
            max_uses=max_uses,
        )
        self._coupon_repo.save(coupon)
        return coupon


def _decimal(raw: str, what: str) -> Decimal:
    try:
        return Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid {what}: {raw!r}") from exc
