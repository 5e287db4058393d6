"""Package templates and the volumetric-weight convention.

Couriers bill the greater of the dead (scale) weight and the volumetric
weight, where volumetric weight is ``length × breadth × height / divisor``
with dimensions in centimetres.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, String

from dispatch.domain import dispatch
from dispatch.requisition.repository import QUERY_LIMIT

DEFAULT_VOLUMETRIC_DIVISOR = 5000


def volumetric_weight(length: float, breadth: float, height: float, divisor: float = DEFAULT_VOLUMETRIC_DIVISOR) -> float:
    return round((length * breadth * height) / divisor, 4)


def chargeable_weight(volumetric: float, dead_weight: float | None) -> float:
    return max(volumetric, dead_weight or 0.0)


def check_dimensions(length, breadth, height, divisor=DEFAULT_VOLUMETRIC_DIVISOR, prefix: str = "") -> None:
    """Raise a ``ValidationError`` naming every missing or non-positive dimension."""
    errors = {}
    for name, value in (("length", length), ("breadth", breadth), ("height", height), ("divisor", divisor)):
        if value is None:
            errors[f"{prefix}{name}"] = [f"{name} is required"]
        elif value <= 0:
            errors[f"{prefix}{name}"] = [f"{name} must be positive"]
    if errors:
        raise ValidationError(errors)


@dispatch.aggregate
class PackageTemplate:
    vendor_id = Identifier()
    name = String(required=True, max_length=100)
    length_cm = Float(required=True)
    breadth_cm = Float(required=True)
    height_cm = Float(required=True)
    volumetric_divisor = Float(default=DEFAULT_VOLUMETRIC_DIVISOR)
    dead_weight_kg = Float(min_value=0.0)
    is_active = Boolean(default=True)
    created_at = DateTime()

    @classmethod
    def create(
        cls,
        name: str,
        length_cm: float,
        breadth_cm: float,
        height_cm: float,
        volumetric_divisor: float | None = None,
        dead_weight_kg: float | None = None,
        vendor_id: str | None = None,
    ):
        divisor = volumetric_divisor or DEFAULT_VOLUMETRIC_DIVISOR
        check_dimensions(length_cm, breadth_cm, height_cm, divisor)
        return cls(
            vendor_id=vendor_id,
            name=name,
            length_cm=length_cm,
            breadth_cm=breadth_cm,
            height_cm=height_cm,
            volumetric_divisor=divisor,
            dead_weight_kg=dead_weight_kg,
            is_active=True,
            created_at=datetime.now(UTC),
        )

    @property
    def volumetric_weight(self) -> float:
        return volumetric_weight(self.length_cm, self.breadth_cm, self.height_cm, self.volumetric_divisor)

    @property
    def chargeable_weight(self) -> float:
        return chargeable_weight(self.volumetric_weight, self.dead_weight_kg)

    def deactivate(self) -> None:
        self.is_active = False


@dispatch.repository(part_of=PackageTemplate)
class PackageTemplateRepository:
    def available_to(self, vendor_id: str) -> list[PackageTemplate]:
        """Active templates owned by the vendor plus shared ones."""
        templates = self._dao.query.filter(is_active=True).limit(QUERY_LIMIT).all().items
        return [t for t in templates if not t.vendor_id or str(t.vendor_id) == str(vendor_id)]
