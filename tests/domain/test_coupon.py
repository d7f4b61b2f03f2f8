"""Unit tests for coupons and the CouponEngine."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.domain.exceptions import (
    EntityNotFoundError,
    Expired,
    InvalidCode,
    MinimumNotMet,
    UsageExhausted,
    ValidationError,
)
from storefront.domain.model.coupon import Coupon, DiscountKind
from storefront.domain.model.value_objects import Money
from storefront.domain.service.coupon_service import CouponEngine
from tests.fakes import FakeCouponRepository

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _engine(*coupons: Coupon) -> tuple[CouponEngine, FakeCouponRepository]:
    repo = FakeCouponRepository(list(coupons))
    return CouponEngine(repo, clock=lambda: NOW), repo


def _save10(**overrides) -> Coupon:
    fields = dict(
        id="c1",
        code="SAVE10",
        kind=DiscountKind.PERCENTAGE,
        value=Decimal("10"),
        min_order_amount=Decimal("100"),
    )
    fields.update(overrides)
    return Coupon(**fields)


class TestCouponModel:

    def test_code_upper_cased(self):
        assert _save10(code=" welcome ").code == "WELCOME"

    def test_percentage_over_100_rejected(self):
        with pytest.raises(ValidationError, match="cannot exceed 100"):
            _save10(value=Decimal("150"))

    def test_record_use_stops_at_cap(self):
        c = _save10(max_uses=2, used_count=1)
        c.record_use()
        assert c.used_count == 2
        with pytest.raises(UsageExhausted):
            c.record_use()
        assert c.used_count == 2

    def test_fixed_discount_capped_at_subtotal(self):
        d = _save10(kind=DiscountKind.FIXED, value=Decimal("80")).descriptor()
        assert d.amount_for(Money.of("50")) == Money.of("50")
        assert d.amount_for(Money.of("120")) == Money.of("80")

    def test_nan_value_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            _save10(value=Decimal("NaN"))

    def test_negative_minimum_rejected(self):
        with pytest.raises(ValidationError, match="Minimum order amount"):
            _save10(min_order_amount=Decimal("-5"))

    def test_expiry_without_offset_read_as_utc(self):
        c = _save10(expires_at=datetime(2024, 12, 31, 23, 59, 59))
        assert c.expires_at == datetime(2024, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
        assert c.is_expired(NOW)


class TestCouponValidation:

    def test_valid_coupon_returns_descriptor(self):
        engine, _ = _engine(_save10())
        d = engine.validate("save10", Money.of("250"))
        assert d.code == "SAVE10"
        assert d.amount_for(Money.of("250")) == Money.of("25.00")

    def test_empty_code(self):
        engine, _ = _engine()
        with pytest.raises(InvalidCode, match="Please enter a coupon code"):
            engine.validate("   ", Money.of("250"))

    def test_unknown_code(self):
        engine, _ = _engine(_save10())
        with pytest.raises(InvalidCode, match="Invalid coupon code"):
            engine.validate("NOPE", Money.of("250"))

    def test_inactive_code_looks_unknown(self):
        engine, _ = _engine(_save10(is_active=False))
        with pytest.raises(InvalidCode, match="Invalid coupon code"):
            engine.validate("SAVE10", Money.of("250"))

    def test_expired(self):
        engine, _ = _engine(
            _save10(code="EXPIRED2024", expires_at=datetime(2024, 12, 31, tzinfo=timezone.utc))
        )
        with pytest.raises(Expired, match="Coupon has expired"):
            engine.validate("EXPIRED2024", Money.of("250"))

    def test_not_yet_expired(self):
        engine, _ = _engine(_save10(expires_at=NOW + timedelta(days=1)))
        assert engine.validate("SAVE10", Money.of("250")).code == "SAVE10"

    def test_minimum_not_met_carries_minimum(self):
        engine, _ = _engine(_save10())
        with pytest.raises(MinimumNotMet, match="Minimum order amount is AED 100.00") as info:
            engine.validate("SAVE10", Money.of("99.99"))
        assert info.value.minimum == Money.of("100")

    def test_usage_exhausted(self):
        engine, _ = _engine(_save10(max_uses=1, used_count=1))
        with pytest.raises(UsageExhausted, match="usage limit reached"):
            engine.validate("SAVE10", Money.of("250"))

    def test_expiry_reported_before_minimum(self):
        engine, _ = _engine(
            _save10(expires_at=NOW - timedelta(seconds=1), max_uses=1, used_count=1)
        )
        with pytest.raises(Expired):
            engine.validate("SAVE10", Money.of("10"))

    def test_lookup_skips_rule_checks(self):
        engine, _ = _engine(_save10(max_uses=1, used_count=1))
        assert engine.lookup("save10").coupon_id == "c1"

    def test_lookup_unknown_code(self):
        engine, _ = _engine(_save10(is_active=False))
        with pytest.raises(InvalidCode, match="Invalid coupon code"):
            engine.lookup("SAVE10")


class TestCouponRedeem:

    def test_redeem_increments(self):
        engine, repo = _engine(_save10(max_uses=3))
        engine.redeem("c1")
        assert repo.get_by_id("c1").used_count == 1

    def test_redeem_at_cap_rejected(self):
        engine, repo = _engine(_save10(max_uses=1, used_count=1))
        with pytest.raises(UsageExhausted):
            engine.redeem("c1")
        assert repo.get_by_id("c1").used_count == 1

    def test_redeem_unknown_coupon(self):
        engine, _ = _engine()
        with pytest.raises(EntityNotFoundError):
            engine.redeem("missing")
