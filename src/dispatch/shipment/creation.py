"""Shipment creation — command and handler.

Every precondition is checked before the aggregator is contacted, in this
order: the requisition belongs to the calling vendor, it has no open
shipment, it is ready to ship, its package resolves, then the
mode-specific requirements hold. The shipment and the requisition's move
to IN_SHIPMENT are committed together or not at all.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Date, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from dispatch.aggregator import get_aggregator, timeout_seconds
from dispatch.aggregator.port import ShipmentRequest
from dispatch.domain import dispatch
from dispatch.errors import AccessDeniedError, ConfigurationError, ConflictError, DependencyError
from dispatch.logistics.context import resolve_context
from dispatch.logistics.serviceability import ServiceabilityChecker
from dispatch.logistics.settings import ShipmentRequestMode
from dispatch.logistics.warehouse import VendorWarehouse
from dispatch.requisition.requisition import Requisition
from dispatch.shared.address import DeliveryAddress
from dispatch.shipment.dimensions import resolve_dimensions
from dispatch.shipment.shipment import CourierAssignment, Shipment, TransportMode
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Shipment")
class CreateShipment:
    """Create the shipment for a requisition, manually or through the aggregator."""

    requisition_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    mode = String(required=True, choices=ShipmentRequestMode)
    destination = Text()  # JSON address dict; defaults to the requisition's
    package_template_id = Identifier()
    length_cm = Float()
    breadth_cm = Float()
    height_cm = Float()
    dead_weight_kg = Float()
    warehouse_id = Identifier()
    transport_mode = String(choices=TransportMode)
    courier_name = String(max_length=255)
    awb_number = String(max_length=100)
    dispatched_date = Date()


def _destination_for(command, requisition) -> DeliveryAddress | None:
    if command.destination:
        data = json.loads(command.destination) if isinstance(command.destination, str) else command.destination
        return DeliveryAddress(**data)
    return requisition.destination


def _check_address(destination: DeliveryAddress | None) -> dict:
    if destination is None:
        return DeliveryAddress().missing_fields()
    return destination.missing_fields()


def _check_manual_entry(command) -> dict:
    errors = {}
    if not command.transport_mode:
        errors["transport_mode"] = ["transport_mode is required"]
    elif command.transport_mode == TransportMode.COURIER.value and not command.courier_name:
        errors["courier_name"] = ["courier_name is required when shipping by courier"]
    if not command.dispatched_date:
        errors["dispatched_date"] = ["dispatched_date is required"]
    return errors


def _check_automatic_context(context) -> None:
    if not context.integration_enabled:
        raise ConfigurationError("Shipping integration is disabled system-wide", missing="shipping_integration")
    if context.company_mode != ShipmentRequestMode.AUTOMATIC.value:
        raise ConfigurationError("Company is configured for manual shipments", missing="automatic_mode")
    if not context.has_routing:
        raise ConfigurationError("No courier routing configured for this vendor", missing="routing")
    if context.warehouse_id is None:
        raise ConfigurationError("Vendor has no active warehouse to dispatch from", missing="warehouse")


@dispatch.command_handler(part_of=Shipment)
class CreateShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        req_repo = current_domain.repository_for(Requisition)
        requisition = req_repo.get(command.requisition_id)
        if str(requisition.vendor_id) != str(command.vendor_id):
            raise AccessDeniedError("Requisition is not assigned to this vendor")

        shipment_repo = current_domain.repository_for(Shipment)
        existing = shipment_repo.open_for(command.requisition_id, command.vendor_id)
        if existing is not None:
            raise ConflictError(
                "An open shipment already exists for this requisition",
                shipment_id=str(existing.id),
            )

        if not requisition.is_ready_for_shipment:
            raise ValidationError(
                {"requisition_status": [f"Requisition in status {requisition.status} is not ready to ship"]}
            )

        automatic = command.mode == ShipmentRequestMode.AUTOMATIC.value
        package = resolve_dimensions(
            vendor_id=command.vendor_id,
            package_template_id=command.package_template_id,
            length_cm=command.length_cm,
            breadth_cm=command.breadth_cm,
            height_cm=command.height_cm,
            dead_weight_kg=command.dead_weight_kg,
            required=automatic,
        )
        destination = _destination_for(command, requisition)

        if automatic:
            shipment = self._book_with_aggregator(command, requisition, destination, package)
        else:
            shipment = self._record_manual(command, requisition, destination, package)

        requisition.mark_in_shipment(str(shipment.id))
        shipment_repo.add(shipment)
        req_repo.add(requisition)

        logger.info(
            "Shipment created",
            shipment_id=str(shipment.id),
            requisition_id=str(requisition.id),
            vendor_id=str(command.vendor_id),
            shipment_mode=shipment.shipment_mode,
        )
        return str(shipment.id)

    def _record_manual(self, command, requisition, destination, package) -> Shipment:
        errors = {**_check_address(destination), **_check_manual_entry(command)}
        if errors:
            raise ValidationError(errors)
        return Shipment.record_manual(
            requisition,
            destination=destination,
            transport_mode=TransportMode(command.transport_mode),
            dispatched_date=command.dispatched_date,
            courier_name=command.courier_name,
            awb_number=command.awb_number,
            package=package,
        )

    def _book_with_aggregator(self, command, requisition, destination, package) -> Shipment:
        errors = _check_address(destination)
        if errors:
            raise ValidationError(errors)

        context = resolve_context(
            company_id=str(requisition.company_id),
            vendor_id=str(command.vendor_id),
            destination_pincode=destination.pincode,
            warehouse_id=command.warehouse_id,
        )
        _check_automatic_context(context)

        aggregator = get_aggregator()
        checker = ServiceabilityChecker(aggregator=aggregator)
        selection = checker.select_courier(context, package.chargeable_weight_kg)

        warehouse = current_domain.repository_for(VendorWarehouse).get(context.warehouse_id)
        booking = aggregator.create_shipment(
            provider_code=context.provider_code,
            request=ShipmentRequest(
                reference=requisition.requisition_number,
                courier_code=selection.courier_code,
                source_pincode=context.source_pincode,
                destination_pincode=context.destination_pincode,
                destination_address=destination.to_dict(),
                weight_kg=package.chargeable_weight_kg,
                length_cm=package.length_cm,
                breadth_cm=package.breadth_cm,
                height_cm=package.height_cm,
                pickup_contact={
                    "warehouse": warehouse.name,
                    "name": warehouse.contact_name,
                    "phone": warehouse.contact_phone,
                },
            ),
            timeout=timeout_seconds(),
        )
        if not booking.success:
            logger.warning(
                "Aggregator rejected shipment booking",
                requisition_id=str(requisition.id),
                courier_code=selection.courier_code,
                reason=booking.failure_reason,
            )
            raise DependencyError(
                f"Shipping aggregator could not book the shipment: {booking.failure_reason}",
                courier_code=selection.courier_code,
            )
        if not booking.provider_shipment_reference or not booking.awb_number:
            logger.warning(
                "Aggregator booking missing tracking reference",
                requisition_id=str(requisition.id),
                courier_code=selection.courier_code,
            )
            raise DependencyError(
                "Shipping aggregator did not return a shipment reference and AWB",
                courier_code=selection.courier_code,
            )

        return Shipment.book_via_aggregator(
            requisition,
            courier=CourierAssignment(
                provider_code=context.provider_code,
                courier_code=selection.courier_code,
                courier_role=selection.role,
                estimated_cost=selection.estimated_cost,
                estimated_days=selection.estimated_days,
            ),
            package=package,
            warehouse_id=context.warehouse_id,
            source_pincode=context.source_pincode,
            destination=destination,
            destination_pincode=context.destination_pincode,
            provider_shipment_reference=booking.provider_shipment_reference,
            awb_number=booking.awb_number,
            tracking_url=booking.tracking_url,
            raw_provider_response=booking.raw_response,
        )
