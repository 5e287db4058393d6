"""Logistics administration — commands and handlers.

Super admins flip the system integration flag; company admins choose their
shipment mode and maintain vendor courier routings; vendors maintain their
warehouses and package templates.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from dispatch.domain import dispatch
from dispatch.errors import AccessDeniedError
from dispatch.logistics.packaging import PackageTemplate
from dispatch.logistics.routing import VendorCourierRouting
from dispatch.logistics.settings import (
    SYSTEM_CONFIG_KEY,
    CompanyShippingPolicy,
    ShipmentRequestMode,
    SystemShippingConfig,
)
from dispatch.logistics.warehouse import VendorWarehouse
from dispatch.shared.address import DeliveryAddress
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Shipping switches
# ---------------------------------------------------------------------------
@dispatch.command(part_of="SystemShippingConfig")
class ConfigureShippingIntegration:
    enabled = Boolean(required=True)


@dispatch.command(part_of="CompanyShippingPolicy")
class SetCompanyShipmentMode:
    company_id = Identifier(required=True)
    shipment_mode = String(required=True, choices=ShipmentRequestMode)


@dispatch.command_handler(part_of=SystemShippingConfig)
class ShippingIntegrationHandler:
    @handle(ConfigureShippingIntegration)
    def configure(self, command):
        repo = current_domain.repository_for(SystemShippingConfig)
        try:
            config = repo.get(SYSTEM_CONFIG_KEY)
        except ObjectNotFoundError:
            config = SystemShippingConfig(config_key=SYSTEM_CONFIG_KEY)
        config.set_integration(command.enabled)
        repo.add(config)
        logger.info("Shipping integration switched", enabled=command.enabled)


@dispatch.command_handler(part_of=CompanyShippingPolicy)
class CompanyShippingPolicyHandler:
    @handle(SetCompanyShipmentMode)
    def set_mode(self, command):
        repo = current_domain.repository_for(CompanyShippingPolicy)
        try:
            policy = repo.get(str(command.company_id))
        except ObjectNotFoundError:
            policy = CompanyShippingPolicy(company_id=str(command.company_id))
        policy.set_mode(ShipmentRequestMode(command.shipment_mode))
        repo.add(policy)
        logger.info("Company shipment mode set", company_id=command.company_id, mode=command.shipment_mode)


# ---------------------------------------------------------------------------
# Courier routing
# ---------------------------------------------------------------------------
@dispatch.command(part_of="VendorCourierRouting")
class ConfigureCourierRouting:
    """Create or replace the routing for a (vendor, company) pair."""

    vendor_id = Identifier(required=True)
    company_id = Identifier(required=True)
    provider_code = String(required=True, max_length=50)
    primary_courier_code = String(required=True, max_length=50)
    secondary_courier_code = String(max_length=50)
    is_active = Boolean(default=True)


@dispatch.command_handler(part_of=VendorCourierRouting)
class CourierRoutingHandler:
    @handle(ConfigureCourierRouting)
    def configure_routing(self, command):
        repo = current_domain.repository_for(VendorCourierRouting)
        routing = repo.for_pair(command.vendor_id, command.company_id)
        if routing is None:
            routing = VendorCourierRouting.create(
                vendor_id=command.vendor_id,
                company_id=command.company_id,
                provider_code=command.provider_code,
                primary_courier_code=command.primary_courier_code,
                secondary_courier_code=command.secondary_courier_code,
            )
            if not command.is_active:
                routing.is_active = False
        else:
            routing.reconfigure(
                provider_code=command.provider_code,
                primary_courier_code=command.primary_courier_code,
                secondary_courier_code=command.secondary_courier_code,
                is_active=command.is_active,
            )
        repo.add(routing)
        return str(routing.id)


# ---------------------------------------------------------------------------
# Warehouses
# ---------------------------------------------------------------------------
@dispatch.command(part_of="VendorWarehouse")
class RegisterWarehouse:
    vendor_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    pincode = String(required=True, max_length=10)
    address = Text()  # JSON address dict
    contact_name = String(max_length=255)
    contact_phone = String(max_length=20)
    is_primary = Boolean(default=False)


@dispatch.command(part_of="VendorWarehouse")
class DeactivateWarehouse:
    warehouse_id = Identifier(required=True)
    vendor_id = Identifier(required=True)


@dispatch.command_handler(part_of=VendorWarehouse)
class WarehouseHandler:
    @handle(RegisterWarehouse)
    def register_warehouse(self, command):
        repo = current_domain.repository_for(VendorWarehouse)
        address = None
        if command.address:
            data = json.loads(command.address) if isinstance(command.address, str) else command.address
            address = DeliveryAddress(**data)

        existing = repo.for_vendor(command.vendor_id)
        # A vendor's first warehouse is its primary one
        is_primary = command.is_primary or not any(w.is_active for w in existing)
        warehouse = VendorWarehouse.register(
            vendor_id=command.vendor_id,
            name=command.name,
            pincode=command.pincode,
            address=address,
            contact_name=command.contact_name,
            contact_phone=command.contact_phone,
            is_primary=is_primary,
        )
        if is_primary:
            for other in existing:
                if other.is_primary:
                    other.clear_primary()
                    repo.add(other)
        repo.add(warehouse)
        return str(warehouse.id)

    @handle(DeactivateWarehouse)
    def deactivate_warehouse(self, command):
        repo = current_domain.repository_for(VendorWarehouse)
        warehouse = repo.get(command.warehouse_id)
        if str(warehouse.vendor_id) != str(command.vendor_id):
            raise AccessDeniedError("Warehouse does not belong to the vendor")
        warehouse.deactivate()
        repo.add(warehouse)


# ---------------------------------------------------------------------------
# Package templates
# ---------------------------------------------------------------------------
@dispatch.command(part_of="PackageTemplate")
class RegisterPackageTemplate:
    name = String(required=True, max_length=100)
    length_cm = Float(required=True)
    breadth_cm = Float(required=True)
    height_cm = Float(required=True)
    volumetric_divisor = Float()
    dead_weight_kg = Float()
    vendor_id = Identifier()


@dispatch.command(part_of="PackageTemplate")
class DeactivatePackageTemplate:
    package_id = Identifier(required=True)
    vendor_id = Identifier()


@dispatch.command_handler(part_of=PackageTemplate)
class PackageTemplateHandler:
    @handle(RegisterPackageTemplate)
    def register_package(self, command):
        template = PackageTemplate.create(
            name=command.name,
            length_cm=command.length_cm,
            breadth_cm=command.breadth_cm,
            height_cm=command.height_cm,
            volumetric_divisor=command.volumetric_divisor,
            dead_weight_kg=command.dead_weight_kg,
            vendor_id=command.vendor_id,
        )
        current_domain.repository_for(PackageTemplate).add(template)
        return str(template.id)

    @handle(DeactivatePackageTemplate)
    def deactivate_package(self, command):
        repo = current_domain.repository_for(PackageTemplate)
        template = repo.get(command.package_id)
        # Vendors may only retire their own templates; shared ones need an admin
        if command.vendor_id and str(template.vendor_id) != str(command.vendor_id):
            raise AccessDeniedError("Package template does not belong to the vendor")
        template.deactivate()
        repo.add(template)
