"""JSON-file-backed implementation of CouponRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    PersistenceError,
)
from storefront.domain.model.coupon import Coupon, DiscountKind, normalize_code
from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.infrastructure.persistence.json_file import DEFAULT_TIMEOUT, JsonFile


class JsonCouponRepository(CouponRepository):

    def __init__(self, file_path: Path, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._file = JsonFile(file_path, timeout)

    # --- CouponRepository interface -------------------------------------------

    def get_by_code(self, code: str) -> Coupon | None:
        wanted = normalize_code(code)
        for raw in self._file.load():
            if normalize_code(raw["code"]) == wanted:
                return self._to_domain(raw)
        return None

    def get_by_id(self, coupon_id: str) -> Coupon | None:
        for raw in self._file.load():
            if raw["id"] == coupon_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Coupon]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, coupon: Coupon) -> None:
        with self._file.locked():
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["id"] == coupon.id:
                    records[i] = self._to_raw(coupon)
                    break
            else:
                records.append(self._to_raw(coupon))
            self._file.persist(records)

    def redeem(self, coupon_id: str) -> Coupon:
        with self._file.locked():
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["id"] == coupon_id:
                    coupon = self._to_domain(raw)
                    coupon.record_use()
                    records[i] = self._to_raw(coupon)
                    self._file.persist(records)
                    return coupon
        raise EntityNotFoundError(f"Coupon {coupon_id} not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(coupon: Coupon) -> dict:
        return {
            "id": coupon.id,
            "code": coupon.code,
            "discount_type": coupon.kind.value,
            "discount_value": str(coupon.value),
            "min_order_amount": (
                str(coupon.min_order_amount) if coupon.min_order_amount is not None else None
            ),
            "expires_at": coupon.expires_at.isoformat() if coupon.expires_at else None,
            "max_uses": coupon.max_uses,
            "used_count": coupon.used_count,
            "is_active": coupon.is_active,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Coupon:
        try:
            minimum = raw.get("min_order_amount")
            expires = raw.get("expires_at")
            return Coupon(
                id=raw["id"],
                code=raw["code"],
                kind=DiscountKind(raw["discount_type"]),
                value=Decimal(str(raw["discount_value"])),
                min_order_amount=Decimal(str(minimum)) if minimum is not None else None,
                expires_at=datetime.fromisoformat(expires) if expires else None,
                max_uses=raw.get("max_uses"),
                used_count=raw.get("used_count", 0),
                is_active=raw.get("is_active", True),
            )
        except (KeyError, TypeError, ValueError, ArithmeticError, DomainException) as exc:
            raise PersistenceError(f"Malformed coupon record {raw.get('code', '?')!r}: {exc}") from exc
