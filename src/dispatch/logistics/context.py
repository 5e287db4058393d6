"""Shipping context resolution — how, and from where, a vendor ships to a destination."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from dispatch.errors import AccessDeniedError, ConfigurationError
from dispatch.logistics.routing import VendorCourierRouting
from dispatch.logistics.settings import ShipmentRequestMode, company_mode, effective_mode, is_integration_enabled
from dispatch.logistics.warehouse import VendorWarehouse
from dispatch.shared.address import validate_pincode


@dataclass(frozen=True)
class ShippingContext:
    shipping_mode: str
    has_routing: bool
    destination_pincode: str
    integration_enabled: bool = False
    company_mode: str = ShipmentRequestMode.MANUAL.value
    provider_code: str | None = None
    primary_courier: str | None = None
    secondary_courier: str | None = None
    warehouse_id: str | None = None
    source_pincode: str | None = None

    @property
    def is_automatic(self) -> bool:
        return self.shipping_mode == ShipmentRequestMode.AUTOMATIC.value

    @property
    def can_auto_ship(self) -> bool:
        return self.is_automatic and self.has_routing and self.source_pincode is not None


def _select_warehouse(vendor_id: str, warehouse_id: str | None) -> VendorWarehouse | None:
    repo = current_domain.repository_for(VendorWarehouse)
    if warehouse_id:
        try:
            warehouse = repo.get(warehouse_id)
        except ObjectNotFoundError:
            raise ValidationError({"warehouse_id": ["Warehouse not found"]}) from None
        if str(warehouse.vendor_id) != str(vendor_id):
            raise AccessDeniedError("Warehouse does not belong to the vendor")
        if not warehouse.is_active:
            raise ValidationError({"warehouse_id": ["Warehouse is inactive"]})
        return warehouse

    active = repo.active_for_vendor(vendor_id)
    primary = next((w for w in active if w.is_primary), None)
    return primary or (active[0] if active else None)


def resolve_context(
    company_id: str,
    vendor_id: str,
    destination_pincode: str,
    warehouse_id: str | None = None,
) -> ShippingContext:
    """Work out the effective shipping mode, routing and source pincode.

    The system integration flag dominates the company's own mode. Routing
    fields are only populated for an automatic-mode pair with an active
    routing record. In automatic mode the vendor must have an active
    warehouse.
    """
    destination_pincode = validate_pincode(destination_pincode, "destination_pincode")
    integration_enabled = is_integration_enabled()
    configured_mode = company_mode(company_id)
    mode = effective_mode(company_id)

    routing = None
    if mode == ShipmentRequestMode.AUTOMATIC:
        routing = current_domain.repository_for(VendorCourierRouting).active_for_pair(vendor_id, company_id)

    warehouse = _select_warehouse(vendor_id, warehouse_id)
    if mode == ShipmentRequestMode.AUTOMATIC and warehouse is None:
        raise ConfigurationError(
            "Vendor has no active warehouse to dispatch from",
            missing="warehouse",
        )

    return ShippingContext(
        shipping_mode=mode.value,
        has_routing=routing is not None,
        destination_pincode=destination_pincode,
        integration_enabled=integration_enabled,
        company_mode=configured_mode.value,
        provider_code=routing.provider_code if routing else None,
        primary_courier=routing.primary_courier_code if routing else None,
        secondary_courier=routing.secondary_courier_code if routing else None,
        warehouse_id=str(warehouse.id) if warehouse else None,
        source_pincode=warehouse.pincode if warehouse else None,
    )
