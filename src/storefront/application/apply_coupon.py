"""Application service: Apply Coupon / Show Cart use cases.

Both answer the same question the checkout view asks on every render:
what does this cart cost right now, with whatever coupon is applied?
"""

from __future__ import annotations

import structlog

from storefront.application.dto import CartDTO
from storefront.domain.exceptions import CouponRejected
from storefront.domain.model.cart import Cart
from storefront.domain.model.coupon import DiscountDescriptor
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.service.coupon_service import CouponEngine
from storefront.domain.service.pricing_service import PricingEngine

logger = structlog.get_logger(__name__)


class ApplyCouponHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        coupons: CouponEngine,
        pricing: PricingEngine,
    ) -> None:
        self._cart_repo = cart_repo
        self._coupons = coupons
        self._pricing = pricing

    def apply(self, session_id: str, code: str) -> tuple[DiscountDescriptor, CartDTO]:
        """Validate ``code`` against the cart and remember it on success.

        Rejections propagate as the specific CouponRejected subclass so the
        shopper sees why the code was refused.
        """
        cart = self._cart_repo.get(session_id)
        subtotal = self._pricing.price(cart.lines).subtotal
        try:
            descriptor = self._coupons.validate(code, subtotal)
        except CouponRejected as exc:
            logger.info("Coupon rejected", code=code, reason=type(exc).__name__)
            raise

        cart.apply_coupon(descriptor.code)
        self._cart_repo.save(cart)
        return descriptor, CartDTO.build(cart, self._pricing.price(cart.lines, descriptor))

    def remove(self, session_id: str) -> CartDTO:
        cart = self._cart_repo.get(session_id)
        cart.remove_coupon()
        self._cart_repo.save(cart)
        return CartDTO.build(cart, self._pricing.price(cart.lines))


class ShowCartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        coupons: CouponEngine,
        pricing: PricingEngine,
    ) -> None:
        self._cart_repo = cart_repo
        self._coupons = coupons
        self._pricing = pricing

    def handle(self, session_id: str) -> CartDTO:
        cart = self._cart_repo.get(session_id)
        return CartDTO.build(cart, self._pricing.price(cart.lines, self.current_discount(cart)))

    def current_discount(self, cart: Cart) -> DiscountDescriptor | None:
        """The applied coupon if it still holds for this cart, else None.

        A coupon that stopped applying (cart shrank below the minimum,
        coupon expired or ran out) is dropped from the cart.
        """
        if not cart.coupon_code:
            return None
        subtotal = self._pricing.price(cart.lines).subtotal
        try:
            return self._coupons.validate(cart.coupon_code, subtotal)
        except CouponRejected as exc:
            logger.info(
                "Applied coupon no longer valid, removing",
                code=cart.coupon_code,
                reason=type(exc).__name__,
            )
            cart.remove_coupon()
            self._cart_repo.save(cart)
            return None
