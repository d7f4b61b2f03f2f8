"""Unit tests for the Cart state container and catalog variants."""

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import Cart, CartLine, SelectedOption
from storefront.domain.model.product import Product, Variant
from storefront.domain.model.value_objects import Money, Quantity


def _line(variant_id="1", qty=1, price="10.00", currency="AED", options=()) -> CartLine:
    return CartLine(
        product_id="1",
        variant_id=variant_id,
        product_name="Abaya",
        unit_price=Money.of(price, currency=currency),
        quantity=Quantity(qty),
        options=options,
    )


class TestCartMutations:

    def test_add_appends_new_variant(self):
        cart = Cart()
        cart.add(_line("a"))
        cart.add(_line("b"))
        assert [l.variant_id for l in cart.lines] == ["a", "b"]

    def test_add_merges_same_variant(self):
        cart = Cart()
        cart.add(_line("a", qty=2))
        cart.add(_line("a", qty=3))
        assert len(cart.lines) == 1
        assert cart.lines[0].quantity.value == 5
        assert cart.total_items == 5

    def test_add_other_currency_rejected(self):
        cart = Cart()
        cart.add(_line("a"))
        with pytest.raises(ValidationError, match="priced in AED"):
            cart.add(_line("b", currency="USD"))

    def test_update_quantity(self):
        cart = Cart(lines=[_line("a", qty=2)])
        cart.update_quantity("a", 7)
        assert cart.lines[0].quantity.value == 7

    def test_update_to_zero_removes(self):
        cart = Cart(lines=[_line("a"), _line("b")])
        cart.update_quantity("a", 0)
        assert [l.variant_id for l in cart.lines] == ["b"]

    def test_update_unknown_variant_rejected(self):
        cart = Cart(lines=[_line("a")])
        with pytest.raises(ValidationError, match="not in the cart"):
            cart.update_quantity("zzz", 2)

    def test_clear_drops_lines_and_coupon(self):
        cart = Cart(lines=[_line("a")])
        cart.apply_coupon(" save10 ")
        assert cart.coupon_code == "SAVE10"
        cart.clear()
        assert cart.is_empty
        assert cart.coupon_code is None


class TestCartLine:

    def test_line_total(self):
        assert _line(qty=3, price="12.50").line_total == Money.of("37.50")

    def test_option_rendering(self):
        line = _line(options=(SelectedOption("Color", "Red"), SelectedOption("Size", "XL")))
        assert line.options_display == "Red, XL"
        assert line.options_labelled == "Color: Red, Size: XL"


class TestProductVariants:

    def test_product_without_variants_sells_itself(self):
        p = Product(id="7", name="Scarf", price=Money.of("30"))
        v = p.variant(None)
        assert v.id == "7"
        assert p.price_of(v) == Money.of("30")

    def test_variant_price_overrides_product_price(self):
        p = Product(
            id="7",
            name="Scarf",
            price=Money.of("30"),
            variants=[Variant(id="7-silk", price=Money.of("45"))],
        )
        assert p.price_of(p.variant("7-silk")) == Money.of("45")

    def test_variant_required_when_product_has_variants(self):
        p = Product(id="7", name="Scarf", price=Money.of("30"), variants=[Variant(id="7-red")])
        with pytest.raises(ValidationError, match="has variants"):
            p.variant(None)

    def test_unknown_variant_rejected(self):
        p = Product(id="7", name="Scarf", price=Money.of("30"), variants=[Variant(id="7-red")])
        with pytest.raises(ValidationError, match="no variant"):
            p.variant("7-blue")
