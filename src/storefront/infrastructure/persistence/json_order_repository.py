"""JSON-file-backed implementation of OrderRepository.

Every write publishes a change event on the feed (when one is given) so
live customer sessions can follow their orders.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    PersistenceError,
)
from storefront.domain.model.customer import PaymentMethod
from storefront.domain.model.order import Order, OrderLineItem
from storefront.domain.model.order_status import OrderStatus
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.change_feed import ChangeEvent, ChangeFeed, ChangeKind
from storefront.domain.repository.order_repository import ORDERS_TABLE, OrderRepository
from storefront.infrastructure.persistence.json_file import DEFAULT_TIMEOUT, JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(
        self,
        file_path: Path,
        feed: ChangeFeed | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._file = JsonFile(file_path, timeout)
        self._feed = feed

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> None:
        with self._file.locked():
            orders = self._file.load()
            if any(raw["order_number"] == order.order_number for raw in orders):
                raise PersistenceError(f"Order number {order.order_number} already exists")
            raw = self._to_raw(order)
            orders.append(raw)
            self._file.persist(orders)
        self._publish(ChangeKind.INSERT, new=raw)

    def get_by_number(self, order_number: str) -> Order | None:
        for raw in self._file.load():
            if raw["order_number"] == order_number:
                return self._to_domain(raw)
        return None

    def list_for_user(self, user_id: str) -> list[Order]:
        orders = [
            self._to_domain(raw)
            for raw in self._file.load()
            if raw.get("user_id") == user_id
        ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def save(self, order: Order) -> None:
        with self._file.locked():
            orders = self._file.load()
            for i, raw in enumerate(orders):
                if raw["order_number"] == order.order_number:
                    old = self._to_domain(raw)
                    orders[i] = new = self._to_raw(order)
                    break
            else:
                raise EntityNotFoundError(f"Order {order.order_number} not found")
            self._file.persist(orders)
        self._publish(ChangeKind.UPDATE, new=new, old=old)

    def delete(self, order_number: str) -> None:
        """Remove an order.  Not part of the normal order flow."""
        with self._file.locked():
            orders = self._file.load()
            kept = [raw for raw in orders if raw["order_number"] != order_number]
            if len(kept) == len(orders):
                raise EntityNotFoundError(f"Order {order_number} not found")
            old = next(self._to_domain(r) for r in orders if r["order_number"] == order_number)
            self._file.persist(kept)
        self._publish(ChangeKind.DELETE, old=old)

    # --- Change events --------------------------------------------------------

    def _publish(self, kind: ChangeKind, new: dict | None = None, old: Order | None = None) -> None:
        if self._feed is None:
            return
        # Built from the written record so subscribers get their own copy.
        stored = self._to_domain(new) if new is not None else None
        self._feed.publish(ChangeEvent(table=ORDERS_TABLE, kind=kind, new=stored, old=old))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "order_number": order.order_number,
            "customer_name": order.customer_name,
            "customer_email": order.customer_email,
            "customer_phone": order.customer_phone,
            "customer_address": order.customer_address,
            "items": [
                {
                    "name": item.product_name,
                    "productId": item.product_id,
                    "variantId": item.variant_id,
                    "options": item.options,
                    "quantity": item.quantity.value,
                    "price": str(item.unit_price.amount),
                    "total": str(item.line_total.amount),
                    "image": item.image,
                }
                for item in order.items
            ],
            "currency": order.total.currency,
            "subtotal": str(order.subtotal.amount),
            "discount": str(order.discount.amount),
            "shipping": str(order.shipping.amount),
            "tax": str(order.tax.amount),
            "total": str(order.total.amount),
            "payment_method": order.payment_method.value,
            "status": order.status.value,
            "notes": order.notes,
            "coupon_id": order.coupon_id,
            "user_id": order.user_id,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        try:
            currency = raw.get("currency", "AED")

            def money(value) -> Money:
                return Money(Decimal(str(value)), currency)

            items = [
                OrderLineItem(
                    product_id=i["productId"],
                    variant_id=i.get("variantId", i["productId"]),
                    product_name=i["name"],
                    options=i.get("options", ""),
                    quantity=Quantity(i["quantity"]),
                    unit_price=money(i["price"]),
                    image=i.get("image"),
                )
                for i in raw["items"]
            ]
            return Order(
                order_number=raw["order_number"],
                customer_name=raw["customer_name"],
                customer_email=raw.get("customer_email", ""),
                customer_phone=raw.get("customer_phone"),
                customer_address=raw.get("customer_address"),
                items=items,
                subtotal=money(raw["subtotal"]),
                discount=money(raw.get("discount", "0")),
                shipping=money(raw["shipping"]),
                tax=money(raw.get("tax", "0")),
                total=money(raw["total"]),
                payment_method=PaymentMethod(raw["payment_method"]),
                status=OrderStatus(raw["status"]),
                notes=raw.get("notes"),
                coupon_id=raw.get("coupon_id"),
                user_id=raw.get("user_id"),
                created_at=datetime.fromisoformat(raw["created_at"]),
                updated_at=datetime.fromisoformat(raw.get("updated_at", raw["created_at"])),
            )
        except (KeyError, TypeError, ValueError, ArithmeticError, DomainException) as exc:
            raise PersistenceError(
                f"Malformed order record {raw.get('order_number', '?')!r}: {exc}"
            ) from exc
