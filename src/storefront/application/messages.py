"""Customer-facing message construction.

Builds the text of the WhatsApp order handoff, the order e-mails and the
printable invoice.  Nothing here sends anything; delivery belongs to
whichever gateway the caller hands the message to.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import quote

from storefront.domain.model.cart import CartLine
from storefront.domain.model.customer import CustomerInfo, PaymentMethod
from storefront.domain.model.order import Order
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.model.value_objects import Money
from storefront.domain.service.pricing_service import PriceSummary

NOT_PROVIDED = "Not provided"

_STATUS_BLURBS = {
    OrderStatus.CONFIRMED: "Your order has been confirmed and will be prepared shortly.",
    OrderStatus.PROCESSING: "Great news! Your order is being processed and will be shipped soon.",
    OrderStatus.SHIPPED: "Your order has been shipped! It's on its way to you.",
    OrderStatus.DELIVERED: "Your order has been delivered! We hope you love your purchase.",
    OrderStatus.COMPLETED: "Your order is complete. Thank you for shopping with us!",
    OrderStatus.CANCELLED: (
        "Your order has been cancelled. If you have any questions, please contact us."
    ),
}


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str


def _shipping_text(shipping: Money) -> str:
    return "FREE" if shipping.is_zero else str(shipping)


# --- WhatsApp handoff ---------------------------------------------------------


def build_handoff_message(
    store_name: str,
    method: PaymentMethod,
    customer: CustomerInfo,
    lines: Sequence[CartLine],
    summary: PriceSummary,
    coupon_code: str | None = None,
) -> str:
    """Plain-text order summary for a merchant to confirm by hand."""
    items = []
    for index, line in enumerate(lines, start=1):
        entry = [f"{index}. {line.product_name}"]
        if line.options:
            entry.append(f"   {line.options_labelled}")
        entry.append(
            f"   Qty: {line.quantity.value} x {line.unit_price} = {line.line_total}"
        )
        items.append("\n".join(entry))

    summary_lines = [f"Subtotal: {summary.subtotal}"]
    if not summary.discount.is_zero:
        label = f"Discount ({coupon_code})" if coupon_code else "Discount"
        summary_lines.append(f"{label}: -{summary.discount}")
    summary_lines.append(f"Shipping: {_shipping_text(summary.shipping)}")
    if not summary.tax.is_zero:
        summary_lines.append(f"Tax: {summary.tax}")
    summary_lines.append(f"*Total: {summary.total}*")

    sections = [
        f"*New Order - {store_name}*",
        f"*Payment Method:* {method.label}",
        "\n".join(
            [
                "*Customer Details:*",
                f"Name: {customer.name}",
                f"Phone: {customer.phone}",
                f"Email: {customer.email or NOT_PROVIDED}",
                f"Address: {customer.address or NOT_PROVIDED}",
                f"City: {customer.city or NOT_PROVIDED}",
            ]
        ),
        "*Order Items:*\n" + "\n\n".join(items),
        "*Order Summary:*\n" + "\n".join(summary_lines),
        f"*Notes:* {customer.notes or 'None'}",
        "---\nPlease confirm my order. Thank you!",
    ]
    return "\n\n".join(sections)


def handoff_url(template: str, phone: str, message: str) -> str:
    """Fill the messaging endpoint template with the merchant number and text."""
    digits = "".join(ch for ch in phone if ch.isdigit())
    return template.format(phone=digits, text=quote(message, safe=""))


# --- E-mail -------------------------------------------------------------------


def build_confirmation_email(order: Order, store_name: str) -> EmailMessage:
    body = "\n\n".join(
        [
            f"Hi {order.customer_name},",
            f"Thank you for your order! We have received order {order.order_number}.",
            render_invoice(order, store_name),
        ]
    )
    return EmailMessage(
        to=order.customer_email,
        subject=f"Order Confirmed - {order.order_number} | {store_name}",
        body=body,
    )


def build_status_update_email(
    order: Order,
    previous: OrderStatus | None,
    store_name: str,
) -> EmailMessage:
    paragraphs = [
        f"Hi {order.customer_name},",
        _STATUS_BLURBS.get(order.status, "Your order status has been updated."),
    ]
    if previous is not None:
        paragraphs.append(f"Status: {previous.label} -> {order.status.label}")
    else:
        paragraphs.append(f"Status: {order.status.label}")
    paragraphs.append(f"Order number: {order.order_number}")
    return EmailMessage(
        to=order.customer_email,
        subject=f"Order {order.status.label} - {order.order_number} | {store_name}",
        body="\n\n".join(paragraphs),
    )


# --- Invoice ------------------------------------------------------------------


def render_invoice(order: Order, store_name: str) -> str:
    """Printable plain-text invoice for the thank-you page and e-mails."""
    width = 64
    rule = "-" * width
    out = [
        store_name,
        f"Invoice for order {order.order_number}",
        f"Date: {order.created_at.strftime('%Y-%m-%d %H:%M UTC')}",
        f"Status: {order.status.label}",
        f"Payment: {order.payment_method.label}",
        "",
        "Bill to:",
        f"  {order.customer_name}",
        f"  {order.customer_email or NOT_PROVIDED}",
        f"  {order.customer_phone or ''}".rstrip(),
        f"  {order.customer_address or 'Address not provided'}",
        "",
        f"{'Item':<30} {'Qty':>5} {'Price':>12} {'Total':>14}",
        rule,
    ]
    for item in order.items:
        name = item.product_name if not item.options else f"{item.product_name} ({item.options})"
        out.append(
            f"{name[:30]:<30} {item.quantity.value:>5} "
            f"{str(item.unit_price):>12} {str(item.line_total):>14}"
        )
    out.append(rule)
    out.append(f"{'Subtotal':<50}{str(order.subtotal):>14}")
    if not order.discount.is_zero:
        out.append(f"{'Discount':<50}{'-' + str(order.discount):>14}")
    out.append(f"{'Shipping':<50}{_shipping_text(order.shipping):>14}")
    if not order.tax.is_zero:
        out.append(f"{'Tax':<50}{str(order.tax):>14}")
    out.append(f"{'Total':<50}{str(order.total):>14}")
    if order.notes:
        out.extend(["", f"Notes: {order.notes}"])
    return "\n".join(out)
