"""Domain service: coupon validation and redemption."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import structlog

from storefront.domain.exceptions import (
    Expired,
    InvalidCode,
    MinimumNotMet,
    UsageExhausted,
)
from storefront.domain.model.coupon import Coupon, DiscountDescriptor, normalize_code
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.coupon_repository import CouponRepository

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CouponEngine:

    def __init__(
        self,
        coupon_repo: CouponRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._coupon_repo = coupon_repo
        self._clock = clock

    def validate(self, code: str, subtotal: Money) -> DiscountDescriptor:
        """Check a code against the cart subtotal.

        Checks run in a fixed order (existence, expiry, minimum order,
        usage cap) so the shopper always sees the first reason that
        applies.
        """
        coupon = self._find(code)

        if coupon.is_expired(self._clock()):
            raise Expired("Coupon has expired")

        if coupon.min_order_amount is not None and subtotal.amount < coupon.min_order_amount:
            minimum = Money(coupon.min_order_amount, subtotal.currency).quantize()
            raise MinimumNotMet(f"Minimum order amount is {minimum}", minimum)

        if coupon.is_exhausted:
            raise UsageExhausted("Coupon usage limit reached")

        return coupon.descriptor()

    def lookup(self, code: str) -> DiscountDescriptor:
        """The descriptor for an existing, active code, with no other checks.

        Checkout uses this to hand a previously applied code to submission,
        which runs the full ``validate`` against the fresh subtotal.
        """
        return self._find(code).descriptor()

    def _find(self, code: str) -> Coupon:
        normalized = normalize_code(code or "")
        if not normalized:
            raise InvalidCode("Please enter a coupon code")

        coupon = self._coupon_repo.get_by_code(normalized)
        if coupon is None or not coupon.is_active:
            raise InvalidCode("Invalid coupon code")
        return coupon

    def redeem(self, coupon_id: str) -> Coupon:
        """Count one use of the coupon, atomically and never past its cap."""
        coupon = self._coupon_repo.redeem(coupon_id)
        logger.info(
            "Coupon redeemed",
            coupon_id=coupon_id,
            code=coupon.code,
            used_count=coupon.used_count,
            max_uses=coupon.max_uses,
        )
        return coupon
