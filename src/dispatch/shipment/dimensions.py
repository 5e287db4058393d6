"""Package dimension resolution for a shipment.

A package template wins when one is given; otherwise custom dimensions
must be complete and positive. Volumetric and chargeable weight are
always derived, never taken from the caller.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from dispatch.errors import AccessDeniedError
from dispatch.logistics.packaging import (
    DEFAULT_VOLUMETRIC_DIVISOR,
    PackageTemplate,
    chargeable_weight,
    check_dimensions,
    volumetric_weight,
)
from dispatch.shipment.shipment import PackageDimensions


def _from_template(template_id: str, vendor_id: str, dead_weight_kg: float | None) -> PackageDimensions:
    try:
        template = current_domain.repository_for(PackageTemplate).get(template_id)
    except ObjectNotFoundError:
        raise ValidationError({"package_template_id": ["Package template not found"]}) from None
    if not template.is_active:
        raise ValidationError({"package_template_id": ["Package template is inactive"]})
    if template.vendor_id and str(template.vendor_id) != str(vendor_id):
        raise AccessDeniedError("Package template does not belong to the vendor")

    dead = dead_weight_kg if dead_weight_kg is not None else template.dead_weight_kg
    volumetric = template.volumetric_weight
    return PackageDimensions(
        package_template_id=str(template.id),
        length_cm=template.length_cm,
        breadth_cm=template.breadth_cm,
        height_cm=template.height_cm,
        volumetric_divisor=template.volumetric_divisor,
        volumetric_weight_kg=volumetric,
        dead_weight_kg=dead,
        chargeable_weight_kg=chargeable_weight(volumetric, dead),
    )


def resolve_dimensions(
    vendor_id: str,
    package_template_id: str | None = None,
    length_cm: float | None = None,
    breadth_cm: float | None = None,
    height_cm: float | None = None,
    dead_weight_kg: float | None = None,
    volumetric_divisor: float | None = None,
    required: bool = True,
) -> PackageDimensions | None:
    """Resolve the package for a shipment, or ``None`` when optional and absent."""
    if dead_weight_kg is not None and dead_weight_kg < 0:
        raise ValidationError({"dead_weight_kg": ["dead_weight_kg cannot be negative"]})

    if package_template_id:
        return _from_template(package_template_id, vendor_id, dead_weight_kg)

    if length_cm is None and breadth_cm is None and height_cm is None:
        if required:
            raise ValidationError({"package": ["A package template or custom dimensions are required"]})
        return None

    divisor = volumetric_divisor or DEFAULT_VOLUMETRIC_DIVISOR
    check_dimensions(length_cm, breadth_cm, height_cm, divisor, prefix="package.")
    volumetric = volumetric_weight(length_cm, breadth_cm, height_cm, divisor)
    return PackageDimensions(
        length_cm=length_cm,
        breadth_cm=breadth_cm,
        height_cm=height_cm,
        volumetric_divisor=divisor,
        volumetric_weight_kg=volumetric,
        dead_weight_kg=dead_weight_kg,
        chargeable_weight_kg=chargeable_weight(volumetric, dead_weight_kg),
    )
