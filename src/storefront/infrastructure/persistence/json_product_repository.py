"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import DomainException, PersistenceError
from storefront.domain.model.cart import SelectedOption
from storefront.domain.model.product import Product, Variant
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.persistence.json_file import DEFAULT_TIMEOUT, JsonFile


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._file = JsonFile(file_path, timeout)

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._file.load():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, product: Product) -> None:
        with self._file.locked():
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["id"] == product.id:
                    records[i] = self._to_raw(product)
                    break
            else:
                records.append(self._to_raw(product))
            self._file.persist(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "image": product.image,
            "variants": [
                {
                    "id": v.id,
                    "options": [{"name": o.name, "value": o.value} for o in v.options],
                    "price": str(v.price.amount) if v.price is not None else None,
                }
                for v in product.variants
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        try:
            currency = raw.get("currency", DEFAULT_CURRENCY)
            return Product(
                id=raw["id"],
                name=raw["name"],
                price=Money(Decimal(str(raw["price"])), currency),
                image=raw.get("image"),
                variants=[
                    Variant(
                        id=v["id"],
                        options=tuple(
                            SelectedOption(o["name"], o["value"]) for o in v.get("options", [])
                        ),
                        price=(
                            Money(Decimal(str(v["price"])), currency)
                            if v.get("price") is not None
                            else None
                        ),
                    )
                    for v in raw.get("variants", [])
                ],
            )
        except (KeyError, TypeError, ValueError, ArithmeticError, DomainException) as exc:
            raise PersistenceError(f"Malformed product record {raw.get('id', '?')!r}: {exc}") from exc
