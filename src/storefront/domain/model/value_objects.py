"""Value Objects shared across the domain.

Money and Quantity are immutable and compare by value.  Both refuse to be
constructed in an invalid state, so code holding one never re-checks it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from storefront.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "AED"
_CENTS = Decimal("0.01")
_HUNDRED = Decimal("100")


@total_ordering
@dataclass(frozen=True, eq=True)
class Money:
    """A non-negative amount in one ISO 4217 currency.

    Amounts keep whatever precision arithmetic gives them; call
    ``quantize()`` at the points where a price is shown or stored.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")
        if len(self.currency) != 3 or not self.currency.isalpha() or not self.currency.isupper():
            raise ValidationError(f"Currency must be a 3-letter ISO code, got {self.currency!r}")

    # --- Arithmetic -----------------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._amount_of(other), self.currency)

    def __sub__(self, other: Money) -> Money:
        remaining = self.amount - self._amount_of(other)
        if remaining < 0:
            raise ValidationError(
                f"Money subtraction would result in a negative amount ({self} - {other})"
            )
        return Money(remaining, self.currency)

    def __mul__(self, factor: int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._amount_of(other)

    def quantize(self) -> Money:
        """Round half-up to whole cents."""
        return Money(self.amount.quantize(_CENTS, rounding=ROUND_HALF_UP), self.currency)

    def percent(self, rate: Decimal) -> Money:
        """``rate`` percent of this amount, rounded to cents."""
        return Money(self.amount * rate / _HUNDRED, self.currency).quantize()

    def min(self, other: Money) -> Money:
        return other if other < self else self

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:.2f}"

    def _amount_of(self, other: Money) -> Decimal:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")
        return other.amount

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build from user or file input; anything non-numeric is a ValidationError."""
        try:
            value = Decimal(str(amount).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc
        return Money(value, currency)

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0.00"), currency)

    @staticmethod
    def total(amounts: Iterable[Money], currency: str = DEFAULT_CURRENCY) -> Money:
        """Sum ``amounts``; an empty iterable sums to zero in ``currency``."""
        result = Money.zero(currency)
        for m in amounts:
            result = result + m
        return result


@dataclass(frozen=True)
class Quantity:
    """A positive whole number of units."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __add__(self, other: Quantity) -> Quantity:
        return Quantity(self.value + other.value)

    def __str__(self) -> str:
        return str(self.value)
