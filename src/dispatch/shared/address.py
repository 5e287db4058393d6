"""DeliveryAddress value object and Indian postal-code / phone helpers."""

import re

from protean.exceptions import ValidationError
from protean.fields import String

from dispatch.domain import dispatch

PINCODE_PATTERN = re.compile(r"^\d{6}$")

# Fields a courier needs before goods can leave the warehouse
_REQUIRED_FOR_DISPATCH = ("address_line_1", "city", "state", "pincode")


def is_valid_pincode(value) -> bool:
    return bool(value) and bool(PINCODE_PATTERN.match(str(value).strip()))


def validate_pincode(value, field: str = "pincode") -> str:
    """Return the stripped pincode or raise a ``ValidationError`` naming ``field``."""
    if not is_valid_pincode(value):
        raise ValidationError({field: ["Pincode must be exactly 6 digits"]})
    return str(value).strip()


def normalize_phone(raw: str | None) -> str | None:
    """Reduce a phone number to its 10-digit national form, or ``None`` if impossible.

    Non-digits are dropped, a ``91`` country prefix is removed from 12+ digit
    numbers and a single trunk ``0`` is removed.
    """
    if not raw:
        return None
    digits = re.sub(r"\D", "", raw)
    if len(digits) >= 12 and digits.startswith("91"):
        digits = digits[2:]
    if digits.startswith("0"):
        digits = digits[1:]
    return digits if len(digits) == 10 else None


@dispatch.value_object
class DeliveryAddress:
    """Postal address goods are delivered to or dispatched from.

    Stored addresses may be partial; completeness is only demanded at the
    point a shipment is created (see ``missing_fields``).
    """

    address_line_1 = String(max_length=255)
    address_line_2 = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    pincode = String(max_length=6)
    country = String(max_length=100, default="India")

    def missing_fields(self) -> dict[str, list[str]]:
        """Field-by-field problems that block dispatch; empty when complete."""
        errors = {}
        for field_name in _REQUIRED_FOR_DISPATCH:
            value = getattr(self, field_name)
            if not value or not str(value).strip():
                errors[f"destination.{field_name}"] = [f"{field_name} is required"]
        if "destination.pincode" not in errors and not is_valid_pincode(self.pincode):
            errors["destination.pincode"] = ["Pincode must be exactly 6 digits"]
        return errors

