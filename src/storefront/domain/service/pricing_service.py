"""Domain service: cart pricing.

Pure computation.  The same inputs always produce the same summary, which
is what lets the checkout view re-render freely and lets submission price
the cart again instead of trusting what the shopper last saw.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from storefront.domain.model.cart import CartLine
from storefront.domain.model.coupon import DiscountDescriptor
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money


@dataclass(frozen=True)
class ShippingPolicy:
    enabled: bool = True
    free_threshold: Decimal = Decimal("200")
    flat_fee: Decimal = Decimal("25")

    def shipping_for(self, amount: Money) -> Money:
        """Free iff the policy is on and ``amount`` reaches the threshold."""
        if self.enabled and amount.amount >= self.free_threshold:
            return Money.zero(amount.currency)
        return Money(self.flat_fee, amount.currency).quantize()


@dataclass(frozen=True)
class PriceSummary:
    subtotal: Money
    discount: Money
    subtotal_after_discount: Money
    shipping: Money
    tax: Money
    total: Money

    @property
    def currency(self) -> str:
        return self.subtotal.currency


class PricingEngine:

    def __init__(self, policy: ShippingPolicy, tax_rate: Decimal = Decimal("0")) -> None:
        self._policy = policy
        self._tax_rate = tax_rate

    @property
    def policy(self) -> ShippingPolicy:
        return self._policy

    def price(
        self,
        lines: Sequence[CartLine],
        discount: DiscountDescriptor | None = None,
    ) -> PriceSummary:
        """Price a cart snapshot.

        ``total = subtotal - discount + shipping + tax``.  The discount is
        taken from the subtotal before shipping; free shipping is decided
        on the discounted subtotal.
        """
        currency = lines[0].unit_price.currency if lines else DEFAULT_CURRENCY
        subtotal = Money.total((line.line_total for line in lines), currency).quantize()

        off = discount.amount_for(subtotal) if discount else Money.zero(currency)
        after_discount = subtotal - off
        shipping = self._policy.shipping_for(after_discount)
        tax = after_discount.percent(self._tax_rate) if self._tax_rate else Money.zero(currency)

        return PriceSummary(
            subtotal=subtotal,
            discount=off,
            subtotal_after_discount=after_discount,
            shipping=shipping,
            tax=tax,
            total=(after_discount + shipping + tax).quantize(),
        )
