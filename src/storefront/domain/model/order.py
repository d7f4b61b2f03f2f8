"""Order aggregate — the durable record of a checkout.

The Order snapshots everything it needs (customer contact, product names,
prices) at submission time so later catalog or account edits never change
a placed order.  After creation it only changes through status transitions
and appended notes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.customer import PaymentMethod
from storefront.domain.model.order_status import OrderStatus, assert_transition
from storefront.domain.model.value_objects import Money, Quantity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the product and price as they were when the order was placed."""

    product_id: str
    variant_id: str
    product_name: str
    options: str
    quantity: Quantity
    unit_price: Money  # locked at submission time
    image: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50


@dataclass
class Order:
    """Aggregate root for placed orders.

    Checkout builds orders through ``Order.create()``, which checks the
    customer, the lines and that the totals add up.  Repositories call the
    plain constructor when loading, since stored orders were checked once.
    """

    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: str | None
    customer_address: str | None
    items: list[OrderLineItem]
    subtotal: Money
    discount: Money
    shipping: Money
    tax: Money
    total: Money
    payment_method: PaymentMethod
    status: OrderStatus = OrderStatus.PENDING
    notes: str | None = None
    coupon_id: str | None = None
    user_id: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Creation at checkout -------------------------------------------------

    @staticmethod
    def create(
        *,
        order_number: str,
        customer_name: str,
        customer_email: str,
        customer_phone: str | None,
        customer_address: str | None,
        items: list[OrderLineItem],
        subtotal: Money,
        discount: Money,
        shipping: Money,
        tax: Money,
        total: Money,
        payment_method: PaymentMethod,
        status: OrderStatus = OrderStatus.PENDING,
        notes: str | None = None,
        coupon_id: str | None = None,
        user_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Order:
        """Build a freshly submitted order, rejecting inconsistent input."""
        if not order_number:
            raise ValidationError("Order number is required")

        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")

        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        if status not in (OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT):
            raise ValidationError(
                f"New orders start as pending or awaiting_payment, not {status.value}"
            )

        expected = subtotal - discount + shipping + tax
        if expected != total:
            raise ValidationError(
                f"Order total {total} does not reconcile: "
                f"{subtotal} - {discount} + {shipping} + {tax} = {expected}"
            )

        line_sum = Money.total((item.line_total for item in items), subtotal.currency)
        if line_sum.quantize() != subtotal:
            raise ValidationError(
                f"Subtotal {subtotal} does not match line items {line_sum.quantize()}"
            )

        created = created_at or _utcnow()
        return Order(
            order_number=order_number,
            customer_name=customer_name.strip(),
            customer_email=customer_email.strip().lower(),
            customer_phone=customer_phone,
            customer_address=customer_address,
            items=list(items),
            subtotal=subtotal,
            discount=discount,
            shipping=shipping,
            tax=tax,
            total=total,
            payment_method=payment_method,
            status=status,
            notes=notes or None,
            coupon_id=coupon_id,
            user_id=user_id,
            created_at=created,
            updated_at=created,
        )

    # --- Mutations ------------------------------------------------------------

    def transition_to(self, target: OrderStatus, at: datetime | None = None) -> OrderStatus:
        """Move to ``target`` if the status machine allows it.

        Returns the previous status.
        """
        assert_transition(self.status, target)
        previous = self.status
        self.status = target
        self.updated_at = at or _utcnow()
        return previous

    def append_note(self, text: str) -> None:
        text = text.strip()
        if not text:
            return
        self.notes = f"{self.notes}\n\n{text}" if self.notes else text

    # --- Derived values -------------------------------------------------------

    @property
    def total_items(self) -> int:
        return sum(item.quantity.value for item in self.items)
