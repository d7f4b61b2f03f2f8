"""Integration tests for the SubmitOrder use case.

Uses in-memory fake repositories — no file I/O.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from urllib.parse import unquote

import pytest
from structlog.testing import capture_logs

from storefront.application.submit_order import (
    BANK_TRANSFER_NOTE,
    GENERIC_FAILURE,
    STEP_COUPON,
    STEP_INVENTORY,
    STEP_PERSIST,
    CheckoutPolicy,
    SubmitOrderHandler,
)
from storefront.domain.exceptions import (
    Expired,
    InsufficientStock,
    OrderCreationFailed,
    UsageExhausted,
    ValidationError,
)
from storefront.domain.model.cart import Cart, CartLine, SelectedOption
from storefront.domain.model.coupon import Coupon, DiscountKind
from storefront.domain.model.customer import CustomerInfo, PaymentMethod
from storefront.domain.model.inventory import InventoryRecord
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.service.coupon_service import CouponEngine
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.order_number import OrderNumberGenerator
from storefront.domain.service.pricing_service import PricingEngine, ShippingPolicy
from tests.fakes import (
    FakeCartRepository,
    FakeCouponRepository,
    FakeInventoryRepository,
    FakeOrderRepository,
    FlakyInventoryRepository,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
CUSTOMER = CustomerInfo(
    name="Mariam Al Nuaimi",
    phone="+971501234567",
    email="Mariam@Example.com",
    address="Villa 12, Street 4",
    city="Dubai",
    notes="Call before delivery",
)


def _save10(**overrides) -> Coupon:
    fields = dict(
        id="c1",
        code="SAVE10",
        kind=DiscountKind.PERCENTAGE,
        value=Decimal("10"),
        min_order_amount=Decimal("100"),
        max_uses=5,
    )
    fields.update(overrides)
    return Coupon(**fields)


def _cart(*qtys: int, session_id="s1") -> Cart:
    """Product 1 at 50.00 and product 2 at 100.00, one line per quantity given."""
    prices = ["50.00", "100.00"]
    cart = Cart(session_id=session_id)
    for i, qty in enumerate(qtys):
        cart.add(
            CartLine(
                product_id=str(i + 1),
                variant_id=str(i + 1),
                product_name=f"Product {i + 1}",
                unit_price=Money.of(prices[i]),
                quantity=Quantity(qty),
                options=(SelectedOption("Size", "M"),),
            )
        )
    return cart


def _setup(
    coupons=None,
    stock=None,
    inventory_repo=None,
    coupon_repo=None,
    **policy,
):
    order_repo = FakeOrderRepository()
    cart_repo = FakeCartRepository()
    coupon_repo = coupon_repo or FakeCouponRepository(coupons if coupons is not None else [_save10()])
    inventory_repo = inventory_repo or FakeInventoryRepository(
        stock
        if stock is not None
        else [InventoryRecord(sku="1", stock=5), InventoryRecord(sku="2", stock=2)]
    )
    coupons_engine = CouponEngine(coupon_repo, clock=lambda: NOW)
    handler = SubmitOrderHandler(
        order_repo=order_repo,
        cart_repo=cart_repo,
        pricing=PricingEngine(ShippingPolicy()),
        coupons=coupons_engine,
        ledger=InventoryLedger(inventory_repo),
        policy=CheckoutPolicy(store_name="Dar Al Abaya", **policy),
        numbers=OrderNumberGenerator(clock_ms=lambda: 1_700_000_000_000),
        clock=lambda: NOW,
    )
    return handler, order_repo, cart_repo, coupon_repo, inventory_repo, coupons_engine


class TestHomeDelivery:

    def test_persists_order_with_priced_totals(self):
        handler, order_repo, *_ , engine = _setup()
        cart = _cart(3, 1)  # 150 + 100 = 250
        discount = engine.validate("SAVE10", Money.of("250"))

        result = handler.handle(cart, CUSTOMER, PaymentMethod.HOME_DELIVERY, discount, user_id="u1")

        assert result.order_number == "ORD-LOYW3V28"
        assert result.redirect_to == "/thank-you?order=ORD-LOYW3V28"
        order = order_repo.get_by_number(result.order_number)
        assert order.status is OrderStatus.PENDING
        assert order.subtotal == Money.of("250")
        assert order.discount == Money.of("25")
        assert order.shipping.is_zero
        assert order.total == Money.of("225")
        assert order.coupon_id == "c1"
        assert order.user_id == "u1"
        assert order.customer_email == "mariam@example.com"
        assert order.customer_address == "Villa 12, Street 4, Dubai"
        assert order.notes == "Call before delivery"
        assert [i.options for i in order.items] == ["M", "M"]

    def test_stock_taken_and_floored_at_zero(self):
        handler, _, _, _, inventory, _ = _setup()
        handler.handle(_cart(3, 3), CUSTOMER, PaymentMethod.HOME_DELIVERY)
        assert inventory.stock_of("1") == 2
        assert inventory.stock_of("2") == 0

    def test_coupon_use_counted(self):
        handler, _, _, coupons, _, engine = _setup()
        discount = engine.validate("SAVE10", Money.of("250"))
        handler.handle(_cart(3, 1), CUSTOMER, PaymentMethod.HOME_DELIVERY, discount)
        assert coupons.get_by_id("c1").used_count == 1

    def test_cart_cleared_and_saved(self):
        handler, _, cart_repo, *_ = _setup()
        cart = _cart(1)
        cart.apply_coupon("SAVE10")
        handler.handle(cart, CUSTOMER, PaymentMethod.HOME_DELIVERY)
        assert cart.is_empty
        assert cart.coupon_code is None
        assert cart_repo.get("s1").is_empty

    def test_account_email_used_when_form_email_blank(self):
        handler, order_repo, *_ = _setup()
        customer = CustomerInfo(name="Ali", phone="+971501234567", address="Tower 2")
        result = handler.handle(
            _cart(1), customer, PaymentMethod.HOME_DELIVERY, account_email="ali@example.com"
        )
        assert order_repo.get_by_number(result.order_number).customer_email == "ali@example.com"

    def test_flat_shipping_below_threshold(self):
        handler, order_repo, *_ = _setup()
        result = handler.handle(_cart(1), CUSTOMER, PaymentMethod.HOME_DELIVERY)
        order = order_repo.get_by_number(result.order_number)
        assert order.shipping == Money.of("25")
        assert order.total == Money.of("75")
        assert result.total == "AED 75.00"

    def test_confirmation_email_returned(self):
        handler, *_ = _setup()
        result = handler.handle(_cart(1), CUSTOMER, PaymentMethod.HOME_DELIVERY)
        assert result.confirmation.to == "mariam@example.com"
        assert result.confirmation.subject == "Order Confirmed - ORD-LOYW3V28 | Dar Al Abaya"
        assert "Invoice for order ORD-LOYW3V28" in result.confirmation.body

    def test_no_confirmation_without_email(self):
        handler, *_ = _setup()
        customer = CustomerInfo(name="Ali", phone="+971501234567", address="Tower 2")
        result = handler.handle(_cart(1), customer, PaymentMethod.HOME_DELIVERY)
        assert result.confirmation is None


class TestBankTransfer:

    def test_awaits_payment_with_note(self):
        handler, order_repo, *_ = _setup()
        result = handler.handle(_cart(1), CUSTOMER, PaymentMethod.BANK_TRANSFER)
        order = order_repo.get_by_number(result.order_number)
        assert order.status is OrderStatus.AWAITING_PAYMENT
        assert order.notes == f"Call before delivery\n\n{BANK_TRANSFER_NOTE}"
        assert result.redirect_to.endswith("&payment=bank")

    def test_address_not_required(self):
        handler, *_ = _setup()
        customer = CustomerInfo(name="Ali", phone="+971501234567")
        result = handler.handle(_cart(1), customer, PaymentMethod.BANK_TRANSFER)
        assert result.order_number is not None


class TestMessageHandoff:

    def test_whatsapp_builds_link_and_writes_nothing(self):
        handler, order_repo, cart_repo, _, inventory, engine = _setup()
        cart = _cart(3, 1)
        discount = engine.validate("SAVE10", Money.of("250"))

        result = handler.handle(cart, CUSTOMER, PaymentMethod.WHATSAPP, discount)

        assert result.order_number is None
        assert result.handoff_url.startswith("https://wa.me/971547751901?text=")
        assert unquote(result.handoff_url.split("text=", 1)[1]) == result.message
        assert "*New Order - Dar Al Abaya*" in result.message
        assert "Discount (SAVE10): -AED 25.00" in result.message
        assert "Shipping: FREE" in result.message
        assert "*Total: AED 225.00*" in result.message
        assert order_repo.all() == []
        assert inventory.stock_of("1") == 5
        assert not cart.is_empty

    def test_online_disabled_by_default(self):
        handler, *_ = _setup()
        with pytest.raises(ValidationError, match="Online Payment is not available"):
            handler.handle(_cart(1), CUSTOMER, PaymentMethod.ONLINE)

    def test_online_falls_back_to_handoff_when_enabled(self):
        handler, *_ = _setup(enabled_methods=frozenset(PaymentMethod))
        result = handler.handle(_cart(1), CUSTOMER, PaymentMethod.ONLINE)
        assert result.handoff_url is not None
        assert "*Payment Method:* Online Payment" in result.message


class TestRejectedBeforeWriting:

    def test_empty_cart(self):
        handler, *_ = _setup()
        with pytest.raises(ValidationError, match="Cart is empty"):
            handler.handle(Cart(), CUSTOMER, PaymentMethod.HOME_DELIVERY)

    def test_invalid_phone(self):
        handler, order_repo, *_ = _setup()
        customer = CustomerInfo(name="Ali", phone="12345", address="Tower 2")
        with pytest.raises(ValidationError, match="not valid"):
            handler.handle(_cart(1), customer, PaymentMethod.HOME_DELIVERY)
        assert order_repo.all() == []

    def test_coupon_expired_since_it_was_applied(self):
        handler, order_repo, _, coupons, _, engine = _setup()
        discount = engine.validate("SAVE10", Money.of("250"))
        coupons.save(_save10(expires_at=NOW - timedelta(minutes=1)))
        with pytest.raises(Expired):
            handler.handle(_cart(3, 1), CUSTOMER, PaymentMethod.HOME_DELIVERY, discount)
        assert order_repo.all() == []

    def test_looked_up_coupon_that_ran_out_is_reported(self):
        handler, order_repo, _, coupons, _, engine = _setup()
        coupons.save(_save10(max_uses=1, used_count=1))
        discount = engine.lookup("save10")
        with pytest.raises(UsageExhausted, match="Coupon usage limit reached"):
            handler.handle(_cart(3, 1), CUSTOMER, PaymentMethod.HOME_DELIVERY, discount)
        assert order_repo.all() == []

    def test_strict_stock(self):
        handler, order_repo, _, _, inventory, _ = _setup(strict_stock=True)
        with pytest.raises(InsufficientStock, match="Product 2"):
            handler.handle(_cart(1, 3), CUSTOMER, PaymentMethod.HOME_DELIVERY)
        assert order_repo.all() == []
        assert inventory.stock_of("1") == 5


class _RacedCouponRepository(FakeCouponRepository):
    """Another shopper takes the last use between validation and redemption."""

    def redeem(self, coupon_id):
        raise UsageExhausted("Coupon usage limit reached")


class TestPartialFailure:

    def test_persist_failure_has_nothing_to_undo(self):
        handler, order_repo, _, _, inventory, _ = _setup()
        handler.handle(_cart(1), CUSTOMER, PaymentMethod.HOME_DELIVERY)
        # A fresh generator on the same clock re-issues the stored number.
        handler._numbers = OrderNumberGenerator(clock_ms=lambda: 1_700_000_000_000)

        with pytest.raises(OrderCreationFailed, match=GENERIC_FAILURE) as info:
            handler.handle(_cart(1), CUSTOMER, PaymentMethod.HOME_DELIVERY)

        assert info.value.step == STEP_PERSIST
        assert len(order_repo.all()) == 1
        assert inventory.stock_of("1") == 4

    def test_inventory_failure_cancels_order_and_restores_stock(self):
        inventory = FlakyInventoryRepository(
            [InventoryRecord(sku="1", stock=5), InventoryRecord(sku="2", stock=2)], fail_on="2"
        )
        handler, order_repo, cart_repo, *_ = _setup(inventory_repo=inventory)
        cart = _cart(3, 1)

        with capture_logs() as logs:
            with pytest.raises(OrderCreationFailed, match=GENERIC_FAILURE) as info:
                handler.handle(cart, CUSTOMER, PaymentMethod.HOME_DELIVERY)

        assert info.value.step == STEP_INVENTORY
        (order,) = order_repo.all()
        assert order.status is OrderStatus.CANCELLED
        assert "Submission failed at adjust_inventory" in order.notes
        assert inventory.stock_of("1") == 5
        assert not cart.is_empty

        inconsistency = [e for e in logs if e["event"] == "partial_submission_inconsistency"]
        assert len(inconsistency) == 1
        assert inconsistency[0]["failed_step"] == STEP_INVENTORY
        assert inconsistency[0]["completed_steps"] == [STEP_PERSIST]
        assert inconsistency[0]["stock_adjustments"] == [("1", 3)]

    def test_coupon_race_keeps_coupon_message(self):
        handler, order_repo, _, _, inventory, engine = _setup(
            coupon_repo=_RacedCouponRepository([_save10(max_uses=1)])
        )
        discount = engine.validate("SAVE10", Money.of("250"))

        with pytest.raises(OrderCreationFailed, match="Coupon usage limit reached") as info:
            handler.handle(_cart(3, 1), CUSTOMER, PaymentMethod.HOME_DELIVERY, discount)

        assert info.value.step == STEP_COUPON
        assert isinstance(info.value.__cause__, UsageExhausted)
        (order,) = order_repo.all()
        assert order.status is OrderStatus.CANCELLED
        assert inventory.stock_of("1") == 5
        assert inventory.stock_of("2") == 2

    def test_reconciliation_can_be_switched_off(self):
        inventory = FlakyInventoryRepository(
            [InventoryRecord(sku="1", stock=5), InventoryRecord(sku="2", stock=2)], fail_on="2"
        )
        handler, order_repo, *_ = _setup(
            inventory_repo=inventory, reconcile_partial_failures=False
        )

        with capture_logs() as logs:
            with pytest.raises(OrderCreationFailed):
                handler.handle(_cart(3, 1), CUSTOMER, PaymentMethod.HOME_DELIVERY)

        (order,) = order_repo.all()
        assert order.status is OrderStatus.PENDING
        assert inventory.stock_of("1") == 2
        assert any(e["event"] == "partial_submission_inconsistency" for e in logs)
