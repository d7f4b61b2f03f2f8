"""Application service: Submit Order use case (checkout).

Turns a priced cart into an order through one of the fulfillment
channels:

* home delivery / bank transfer — persist the order, take the stock,
  count the coupon use, clear the cart;
* WhatsApp / online — build a message for the merchant to confirm by hand
  and hand back the messaging URL.  Nothing is persisted.

The persisting steps run one after another because each one needs the
order the first one wrote.  There is no distributed transaction behind
them: if a later step fails after the order is stored, the failure is
logged as a partial submission and, unless disabled, compensated (stock
put back, order cancelled with a note).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TypeVar

import structlog

from storefront.application.dto import SubmissionResult
from storefront.application.messages import (
    build_confirmation_email,
    build_handoff_message,
    handoff_url,
)
from storefront.domain.exceptions import (
    CouponRejected,
    DomainException,
    OrderCreationFailed,
    ValidationError,
)
from storefront.domain.model.cart import Cart
from storefront.domain.model.coupon import DiscountDescriptor
from storefront.domain.model.customer import CustomerInfo, PaymentMethod
from storefront.domain.model.order import Order, OrderLineItem
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.coupon_service import CouponEngine
from storefront.domain.service.inventory_ledger import InventoryLedger, StockAdjustment
from storefront.domain.service.order_number import OrderNumberGenerator
from storefront.domain.service.pricing_service import PricingEngine

logger = structlog.get_logger(__name__)

T = TypeVar("T")

GENERIC_FAILURE = "Error creating order, please try again"
BANK_TRANSFER_NOTE = "Bank Transfer - Pending payment confirmation"
WHATSAPP_URL_TEMPLATE = "https://wa.me/{phone}?text={text}"

STEP_PERSIST = "persist_order"
STEP_INVENTORY = "adjust_inventory"
STEP_COUPON = "redeem_coupon"


@dataclass(frozen=True)
class CheckoutPolicy:
    store_name: str = "Storefront"
    enabled_methods: frozenset[PaymentMethod] = frozenset(
        {PaymentMethod.HOME_DELIVERY, PaymentMethod.WHATSAPP, PaymentMethod.BANK_TRANSFER}
    )
    whatsapp_phone: str = "+971547751901"
    whatsapp_url_template: str = WHATSAPP_URL_TEMPLATE
    strict_stock: bool = False
    reconcile_partial_failures: bool = True


@dataclass
class _Progress:
    """Side effects completed so far, for logging and compensation."""

    order: Order | None = None
    adjustments: list[StockAdjustment] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmitOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository | None,
        pricing: PricingEngine,
        coupons: CouponEngine,
        ledger: InventoryLedger,
        policy: CheckoutPolicy | None = None,
        numbers: OrderNumberGenerator | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._order_repo = order_repo
        self._cart_repo = cart_repo
        self._pricing = pricing
        self._coupons = coupons
        self._ledger = ledger
        self._policy = policy or CheckoutPolicy()
        self._numbers = numbers or OrderNumberGenerator()
        self._clock = clock

    def handle(
        self,
        cart: Cart,
        customer: CustomerInfo,
        payment_method: PaymentMethod,
        discount: DiscountDescriptor | None = None,
        user_id: str | None = None,
        account_email: str | None = None,
    ) -> SubmissionResult:
        """Submit the cart.

        Validation and coupon problems are raised as-is before anything is
        written.  Once writing starts, every failure becomes
        OrderCreationFailed, chained to the underlying cause.
        """
        if cart.is_empty:
            raise ValidationError("Cart is empty")
        if payment_method not in self._policy.enabled_methods:
            raise ValidationError(f"{payment_method.label} is not available")
        customer.validate_for(payment_method)

        lines = list(cart.lines)

        # Price again rather than trusting what the checkout view showed,
        # and re-check the coupon against that fresh subtotal.
        if discount is not None:
            subtotal = self._pricing.price(lines).subtotal
            discount = self._coupons.validate(discount.code, subtotal)
        summary = self._pricing.price(lines, discount)

        log = logger.bind(payment_method=payment_method.value, total=str(summary.total))

        if not payment_method.persists_order:
            message = build_handoff_message(
                self._policy.store_name,
                payment_method,
                customer,
                lines,
                summary,
                coupon_code=discount.code if discount else None,
            )
            url = handoff_url(
                self._policy.whatsapp_url_template, self._policy.whatsapp_phone, message
            )
            log.info("Order handed off to messaging channel", items=len(lines))
            return SubmissionResult(
                payment_method=payment_method.value,
                total=str(summary.total),
                handoff_url=url,
                message=message,
            )

        if self._policy.strict_stock:
            self._ledger.check_available(lines)

        deferred = payment_method is PaymentMethod.BANK_TRANSFER
        notes = customer.notes.strip()
        if deferred:
            notes = f"{notes}\n\n{BANK_TRANSFER_NOTE}" if notes else BANK_TRANSFER_NOTE

        order = Order.create(
            order_number=self._numbers.next(),
            customer_name=customer.name,
            customer_email=customer.email or account_email or "",
            customer_phone=customer.phone,
            customer_address=customer.full_address,
            items=[
                OrderLineItem(
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    product_name=line.product_name,
                    options=line.options_display,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    image=line.image,
                )
                for line in lines
            ],
            subtotal=summary.subtotal,
            discount=summary.discount,
            shipping=summary.shipping,
            tax=summary.tax,
            total=summary.total,
            payment_method=payment_method,
            status=OrderStatus.AWAITING_PAYMENT if deferred else OrderStatus.PENDING,
            notes=notes,
            coupon_id=discount.coupon_id if discount else None,
            user_id=user_id,
            created_at=self._clock(),
        )

        log = log.bind(order_number=order.order_number)
        log.info("Submitting order", items=len(lines), coupon=discount.code if discount else None)
        progress = _Progress()

        self._run(STEP_PERSIST, progress, log, lambda: self._order_repo.add(order))
        progress.order = order

        self._run(
            STEP_INVENTORY,
            progress,
            log,
            lambda: self._ledger.decrement_lines(lines, progress.adjustments),
        )

        if discount is not None:
            self._run(
                STEP_COUPON, progress, log, lambda: self._coupons.redeem(discount.coupon_id)
            )

        cart.clear()
        if self._cart_repo is not None:
            try:
                self._cart_repo.save(cart)
            except DomainException:
                # The order stands; a stale cart only costs the shopper a click.
                log.warning("Could not clear saved cart", session_id=cart.session_id)

        log.info("Order submitted", status=order.status.value)
        redirect = f"/thank-you?order={order.order_number}"
        if deferred:
            redirect += "&payment=bank"
        return SubmissionResult(
            payment_method=payment_method.value,
            total=str(summary.total),
            order_number=order.order_number,
            redirect_to=redirect,
            confirmation=(
                build_confirmation_email(order, self._policy.store_name)
                if order.customer_email
                else None
            ),
        )

    # --- Step execution -------------------------------------------------------

    def _run(self, step: str, progress: _Progress, log, action: Callable[[], T]) -> T:
        try:
            result = action()
        except Exception as exc:
            log.error(
                "Order submission step failed",
                step=step,
                completed_steps=list(progress.completed),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            if progress.order is not None:
                self._handle_partial(step, progress, log, exc)
            message = str(exc) if isinstance(exc, CouponRejected) else GENERIC_FAILURE
            raise OrderCreationFailed(message, step) from exc
        progress.completed.append(step)
        log.debug("Order submission step completed", step=step)
        return result

    def _handle_partial(self, step: str, progress: _Progress, log, exc: Exception) -> None:
        order = progress.order
        log.warning(
            "partial_submission_inconsistency",
            failed_step=step,
            completed_steps=list(progress.completed),
            stock_adjustments=[(a.sku, a.removed) for a in progress.adjustments],
            reconcile=self._policy.reconcile_partial_failures,
        )
        if not self._policy.reconcile_partial_failures:
            return

        try:
            self._ledger.restore(progress.adjustments)
            order.transition_to(OrderStatus.CANCELLED, at=self._clock())
            order.append_note(f"Submission failed at {step}: {exc}. Order cancelled automatically.")
            self._order_repo.save(order)
        except Exception as comp_exc:
            log.exception(
                "Partial submission could not be reconciled",
                failed_step=step,
                compensation_error=str(comp_exc),
            )
            return
        log.info("Partial submission reconciled", failed_step=step)
