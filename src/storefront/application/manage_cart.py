"""Application services: cart use cases.

The cart is loaded from its repository, changed through its own mutation
API and saved back.  Lines always come from the catalog so they carry a
real product and variant id plus the price at the moment of adding.
"""

from __future__ import annotations

from storefront.application.dto import CartDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.cart import Cart, CartLine
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.pricing_service import PricingEngine


class AddToCartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        pricing: PricingEngine,
    ) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo
        self._pricing = pricing

    def handle(
        self,
        session_id: str,
        product_id: str,
        quantity: int = 1,
        variant_id: str | None = None,
    ) -> CartDTO:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        variant = product.variant(variant_id)
        line = CartLine(
            product_id=product.id,
            variant_id=variant.id,
            product_name=product.name,
            unit_price=product.price_of(variant),  # <-- price snapshot
            quantity=Quantity(quantity),
            options=variant.options,
            image=product.image,
        )

        cart = self._cart_repo.get(session_id)
        cart.add(line)
        self._cart_repo.save(cart)
        return CartDTO.build(cart, self._pricing.price(cart.lines))


class UpdateCartHandler:

    def __init__(self, cart_repo: CartRepository, pricing: PricingEngine) -> None:
        self._cart_repo = cart_repo
        self._pricing = pricing

    def set_quantity(self, session_id: str, variant_id: str, quantity: int) -> CartDTO:
        """Change a line's quantity; zero or less removes it."""
        return self._apply(session_id, lambda cart: cart.update_quantity(variant_id, quantity))

    def remove(self, session_id: str, variant_id: str) -> CartDTO:
        return self._apply(session_id, lambda cart: cart.remove(variant_id))

    def clear(self, session_id: str) -> CartDTO:
        return self._apply(session_id, Cart.clear)

    def _apply(self, session_id: str, change) -> CartDTO:
        cart = self._cart_repo.get(session_id)
        change(cart)
        self._cart_repo.save(cart)
        return CartDTO.build(cart, self._pricing.price(cart.lines))
