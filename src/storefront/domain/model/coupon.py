"""Coupon aggregate — a promotional code with activation rules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from storefront.domain.exceptions import UsageExhausted, ValidationError
from storefront.domain.model.value_objects import Money


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code: str) -> str:
    return code.strip().upper()


@dataclass(frozen=True)
class DiscountDescriptor:
    """What an accepted coupon hands to pricing and submission."""

    coupon_id: str
    code: str
    kind: DiscountKind
    value: Decimal

    def amount_for(self, subtotal: Money) -> Money:
        """Discount against ``subtotal``, never more than the subtotal itself."""
        if self.kind is DiscountKind.PERCENTAGE:
            discount = subtotal.percent(self.value)
        else:
            discount = Money(self.value, subtotal.currency).quantize()
        return discount.min(subtotal)

    def describe(self) -> str:
        if self.kind is DiscountKind.PERCENTAGE:
            return f"{self.value.normalize():f}%"
        return f"{self.value:.2f}"


@dataclass
class Coupon:
    """Aggregate root for discount coupons.

    Invariants:
    - ``used_count`` never exceeds ``max_uses`` when a cap is set
    - ``code`` is stored upper-cased
    """

    id: str
    code: str
    kind: DiscountKind
    value: Decimal
    min_order_amount: Decimal | None = None
    expires_at: datetime | None = None
    max_uses: int | None = None
    used_count: int = 0
    is_active: bool = True

    def __post_init__(self) -> None:
        self.code = normalize_code(self.code)
        if not self.code:
            raise ValidationError("Coupon code is required")
        if not self.value.is_finite():
            raise ValidationError(f"Discount value must be a finite number, got {self.value}")
        if self.value <= 0:
            raise ValidationError("Discount value must be greater than zero")
        if self.kind is DiscountKind.PERCENTAGE and self.value > 100:
            raise ValidationError("Percentage discount cannot exceed 100")
        if self.used_count < 0:
            raise ValidationError("Used count cannot be negative")
        if self.max_uses is not None and self.max_uses < 0:
            raise ValidationError("Max uses cannot be negative")
        if self.min_order_amount is not None and (
            not self.min_order_amount.is_finite() or self.min_order_amount < 0
        ):
            raise ValidationError(
                f"Minimum order amount must be zero or more, got {self.min_order_amount}"
            )
        if self.expires_at is not None and self.expires_at.tzinfo is None:
            # Stored timestamps without an offset are UTC.
            self.expires_at = self.expires_at.replace(tzinfo=timezone.utc)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.used_count >= self.max_uses

    def record_use(self) -> None:
        """Increment the usage counter, refusing to pass the cap.

        Repositories call this inside their own lock or transaction so the
        check and the increment happen atomically.
        """
        if self.is_exhausted:
            raise UsageExhausted("Coupon usage limit reached")
        self.used_count += 1

    def descriptor(self) -> DiscountDescriptor:
        return DiscountDescriptor(
            coupon_id=self.id, code=self.code, kind=self.kind, value=self.value
        )
