"""JSON-file-backed implementation of CartRepository.

Stands in for the browser's local storage: one record per session id.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import DomainException, PersistenceError
from storefront.domain.model.cart import Cart, CartLine, SelectedOption
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money, Quantity
from storefront.domain.repository.cart_repository import CartRepository
from storefront.infrastructure.persistence.json_file import DEFAULT_TIMEOUT, JsonFile


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._file = JsonFile(file_path, timeout)

    def get(self, session_id: str) -> Cart:
        for raw in self._file.load():
            if raw["session_id"] == session_id:
                return self._to_domain(raw)
        return Cart(session_id=session_id)

    def save(self, cart: Cart) -> None:
        with self._file.locked():
            records = [r for r in self._file.load() if r["session_id"] != cart.session_id]
            if not cart.is_empty or cart.coupon_code:
                records.append(self._to_raw(cart))
            self._file.persist(records)

    @staticmethod
    def _to_raw(cart: Cart) -> dict:
        return {
            "session_id": cart.session_id,
            "coupon_code": cart.coupon_code,
            "items": [
                {
                    "productId": line.product_id,
                    "variantId": line.variant_id,
                    "name": line.product_name,
                    "price": str(line.unit_price.amount),
                    "currency": line.unit_price.currency,
                    "quantity": line.quantity.value,
                    "options": [{"name": o.name, "value": o.value} for o in line.options],
                    "image": line.image,
                }
                for line in cart.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Cart:
        try:
            return Cart(
                session_id=raw["session_id"],
                coupon_code=raw.get("coupon_code"),
                lines=[
                    CartLine(
                        product_id=i["productId"],
                        variant_id=i["variantId"],
                        product_name=i["name"],
                        unit_price=Money(
                            Decimal(str(i["price"])), i.get("currency", DEFAULT_CURRENCY)
                        ),
                        quantity=Quantity(i["quantity"]),
                        options=tuple(
                            SelectedOption(o["name"], o["value"]) for o in i.get("options", [])
                        ),
                        image=i.get("image"),
                    )
                    for i in raw.get("items", [])
                ],
            )
        except (KeyError, TypeError, ValueError, ArithmeticError, DomainException) as exc:
            raise PersistenceError(
                f"Malformed cart record {raw.get('session_id', '?')!r}: {exc}"
            ) from exc
