"""Customer contact snapshot and the payment channels a checkout can use."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from storefront.domain.exceptions import ValidationError


class PaymentMethod(Enum):
    HOME_DELIVERY = "home_delivery"
    WHATSAPP = "whatsapp"
    BANK_TRANSFER = "bank_transfer"
    ONLINE = "online"

    @property
    def persists_order(self) -> bool:
        return self in (PaymentMethod.HOME_DELIVERY, PaymentMethod.BANK_TRANSFER)

    @property
    def label(self) -> str:
        return _PAYMENT_LABELS[self]


_PAYMENT_LABELS = {
    PaymentMethod.HOME_DELIVERY: "Cash on Delivery",
    PaymentMethod.WHATSAPP: "WhatsApp Order",
    PaymentMethod.BANK_TRANSFER: "Bank Transfer",
    PaymentMethod.ONLINE: "Online Payment",
}


# Dialling code -> (min, max) subscriber digits.  Longer codes are listed
# before their prefixes so "+971" wins over "+97".
DIALLING_CODES: dict[str, tuple[int, int]] = {
    "+971": (9, 9),
    "+966": (9, 9),
    "+965": (8, 8),
    "+974": (8, 8),
    "+973": (8, 8),
    "+968": (8, 8),
    "+962": (9, 9),
    "+961": (7, 8),
    "+212": (9, 9),
    "+880": (10, 10),
    "+20": (10, 10),
    "+91": (10, 10),
    "+92": (10, 10),
    "+63": (10, 10),
    "+44": (10, 10),
    "+86": (11, 11),
    "+81": (10, 10),
    "+82": (9, 10),
    "+49": (10, 11),
    "+33": (9, 9),
    "+39": (9, 10),
    "+34": (9, 9),
    "+90": (10, 10),
    "+1": (10, 10),
    "+7": (10, 10),
}


def is_valid_phone(phone: str) -> bool:
    """True if ``phone`` starts with a known dialling code and has the
    right number of subscriber digits for that country."""
    if not phone:
        return False
    compact = "".join(phone.split())
    for code in sorted(DIALLING_CODES, key=len, reverse=True):
        if compact.startswith(code):
            number = compact[len(code):]
            low, high = DIALLING_CODES[code]
            return number.isdigit() and low <= len(number) <= high
    return False


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    phone: str
    email: str = ""
    address: str = ""
    city: str = ""
    notes: str = ""

    def validate_for(self, method: PaymentMethod) -> None:
        """Raise ValidationError naming the first missing or invalid field."""
        if not self.name or not self.name.strip():
            raise ValidationError("Customer name is required")
        if not self.phone or not self.phone.strip():
            raise ValidationError("Phone number is required")
        if not is_valid_phone(self.phone):
            raise ValidationError(f"Phone number '{self.phone}' is not valid")
        if method is PaymentMethod.HOME_DELIVERY and not self.address.strip():
            raise ValidationError("Address is required for home delivery")

    @property
    def full_address(self) -> str | None:
        parts = [p.strip() for p in (self.address, self.city) if p and p.strip()]
        return ", ".join(parts) or None
