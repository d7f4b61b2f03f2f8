"""Unit tests for handoff messages, e-mails and the invoice."""

from datetime import datetime, timezone
from decimal import Decimal

from storefront.application.messages import (
    build_confirmation_email,
    build_handoff_message,
    build_status_update_email,
    handoff_url,
    render_invoice,
)
from storefront.domain.model.cart import CartLine, SelectedOption
from storefront.domain.model.customer import CustomerInfo, PaymentMethod
from storefront.domain.model.order import Order, OrderLineItem
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.service.pricing_service import PricingEngine, ShippingPolicy


def _order(number: str) -> Order:
    return Order.create(
        order_number=number,
        customer_name="Huda",
        customer_email="huda@example.com",
        customer_phone="+971501234567",
        customer_address="Marina Walk, Dubai",
        items=[
            OrderLineItem(
                product_id="4",
                variant_id="4-s",
                product_name="Jalabiya",
                options="Green, S",
                quantity=Quantity(1),
                unit_price=Money.of("89.50"),
            )
        ],
        subtotal=Money.of("89.50"),
        discount=Money.zero(),
        shipping=Money.of("25"),
        tax=Money.zero(),
        total=Money.of("114.50"),
        payment_method=PaymentMethod.HOME_DELIVERY,
        created_at=datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc),
    )


LINES = [
    CartLine(
        product_id="2",
        variant_id="2-black",
        product_name="Hijab",
        unit_price=Money.of("35"),
        quantity=Quantity(2),
        options=(SelectedOption("Color", "Black"),),
    )
]


class TestHandoffMessage:

    def test_sections(self):
        summary = PricingEngine(ShippingPolicy(), tax_rate=Decimal("5")).price(LINES)
        text = build_handoff_message(
            "Dar Al Abaya",
            PaymentMethod.WHATSAPP,
            CustomerInfo(name="Noura", phone="+971501234567"),
            LINES,
            summary,
        )
        assert text.startswith("*New Order - Dar Al Abaya*\n\n*Payment Method:* WhatsApp Order")
        assert "Email: Not provided" in text
        assert "1. Hijab\n   Color: Black\n   Qty: 2 x AED 35.00 = AED 70.00" in text
        assert "Shipping: AED 25.00" in text
        assert "Tax: AED 3.50" in text
        assert "Discount" not in text
        assert "*Total: AED 98.50*" in text
        assert "*Notes:* None" in text

    def test_url_keeps_only_phone_digits_and_escapes_text(self):
        url = handoff_url("https://wa.me/{phone}?text={text}", "+971 54 775 1901", "a&b /c")
        assert url == "https://wa.me/971547751901?text=a%26b%20%2Fc"


class TestEmails:

    def test_confirmation(self):
        email = build_confirmation_email(_order("ORD-K1"), "Dar Al Abaya")
        assert email.to == "huda@example.com"
        assert email.subject == "Order Confirmed - ORD-K1 | Dar Al Abaya"
        assert "Invoice for order ORD-K1" in email.body

    def test_status_update_without_previous(self):
        order = _order("ORD-K1")
        order.transition_to(OrderStatus.DELIVERED)
        email = build_status_update_email(order, None, "Dar Al Abaya")
        assert email.subject == "Order Delivered - ORD-K1 | Dar Al Abaya"
        assert "We hope you love your purchase" in email.body
        assert "Status: Delivered" in email.body


class TestInvoice:

    def test_totals_block(self):
        text = render_invoice(_order("ORD-K1"), "Dar Al Abaya")
        lines = text.splitlines()
        assert lines[2] == "Date: 2025-03-01 09:30 UTC"
        assert any(l.startswith("Subtotal") and l.endswith("AED 89.50") for l in lines)
        assert any(l.startswith("Total") and l.endswith("AED 114.50") for l in lines)
        assert not any(l.startswith("Discount") for l in lines)
