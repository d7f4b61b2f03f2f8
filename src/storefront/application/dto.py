"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.application.messages import EmailMessage
from storefront.domain.model.cart import Cart
from storefront.domain.model.order import Order
from storefront.domain.service.pricing_service import PriceSummary


@dataclass(frozen=True)
class CartLineDTO:
    variant_id: str
    product_name: str
    options: str
    quantity: int
    unit_price: str  # formatted, e.g. "AED 15.00"
    line_total: str


@dataclass(frozen=True)
class PriceSummaryDTO:
    subtotal: str
    discount: str
    subtotal_after_discount: str
    shipping: str  # "FREE" when zero
    tax: str
    total: str

    @staticmethod
    def from_summary(summary: PriceSummary) -> PriceSummaryDTO:
        return PriceSummaryDTO(
            subtotal=str(summary.subtotal),
            discount=str(summary.discount),
            subtotal_after_discount=str(summary.subtotal_after_discount),
            shipping="FREE" if summary.shipping.is_zero else str(summary.shipping),
            tax=str(summary.tax),
            total=str(summary.total),
        )


@dataclass(frozen=True)
class CartDTO:
    session_id: str
    lines: list[CartLineDTO]
    total_items: int
    coupon_code: str | None
    summary: PriceSummaryDTO

    @staticmethod
    def build(cart: Cart, summary: PriceSummary) -> CartDTO:
        return CartDTO(
            session_id=cart.session_id,
            lines=[
                CartLineDTO(
                    variant_id=line.variant_id,
                    product_name=line.product_name,
                    options=line.options_labelled,
                    quantity=line.quantity.value,
                    unit_price=str(line.unit_price),
                    line_total=str(line.line_total),
                )
                for line in cart.lines
            ],
            total_items=cart.total_items,
            coupon_code=cart.coupon_code,
            summary=PriceSummaryDTO.from_summary(summary),
        )


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_name: str
    options: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    order_number: str
    status: str
    status_label: str
    customer_name: str
    customer_email: str
    customer_phone: str | None
    customer_address: str | None
    payment_method: str
    items: list[OrderLineItemDTO]
    subtotal: str
    discount: str
    shipping: str
    tax: str
    total: str
    notes: str | None
    created_at: str

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            order_number=order.order_number,
            status=order.status.value,
            status_label=order.status.label,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            customer_address=order.customer_address,
            payment_method=order.payment_method.value,
            items=[
                OrderLineItemDTO(
                    product_name=item.product_name,
                    options=item.options,
                    quantity=item.quantity.value,
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                )
                for item in order.items
            ],
            subtotal=str(order.subtotal),
            discount=str(order.discount),
            shipping="FREE" if order.shipping.is_zero else str(order.shipping),
            tax=str(order.tax),
            total=str(order.total),
            notes=order.notes,
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


@dataclass(frozen=True)
class SubmissionResult:
    """What the checkout view needs after a successful submission.

    Persisting channels fill ``order_number`` and ``redirect_to``, plus the
    ``confirmation`` e-mail when the customer gave an address; message
    handoff channels fill ``handoff_url`` and ``message`` instead.
    """

    payment_method: str
    total: str
    order_number: str | None = None
    redirect_to: str | None = None
    handoff_url: str | None = None
    message: str | None = None
    confirmation: EmailMessage | None = None
