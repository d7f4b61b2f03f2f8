"""Abstract repository for Coupon aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.coupon import Coupon


class CouponRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> Coupon | None:
        """Return the coupon for a case-insensitive code, or None."""

    @abstractmethod
    def get_by_id(self, coupon_id: str) -> Coupon | None:
        """Return a coupon by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Coupon]:
        """Return every coupon."""

    @abstractmethod
    def save(self, coupon: Coupon) -> None:
        """Persist a new or updated coupon."""

    @abstractmethod
    def redeem(self, coupon_id: str) -> Coupon:
        """Atomically add one use to a coupon and return it.

        The cap check and the increment must happen as one step so two
        concurrent redemptions can never both pass a coupon sitting at
        ``max_uses - 1``.  Raises UsageExhausted when the cap is reached
        and EntityNotFoundError for an unknown coupon.
        """
