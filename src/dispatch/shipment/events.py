"""Shipment domain events."""

from protean.fields import Date, DateTime, Float, Identifier, String

from dispatch.domain import dispatch


@dispatch.event(part_of="Shipment")
class ShipmentCreated:
    """A shipment was recorded for a requisition."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    requisition_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    shipment_mode = String(required=True)
    courier_code = String()
    awb_number = String()
    chargeable_weight_kg = Float()
    created_at = DateTime(required=True)


@dispatch.event(part_of="Shipment")
class ShipmentStatusAdvanced:
    """A shipment moved forward in its lifecycle."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    requisition_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    reason = String()
    occurred_at = DateTime(required=True)


@dispatch.event(part_of="Shipment")
class ShipmentPickupScheduled:
    """The courier agreed to collect a booked shipment, or moved its pickup."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    requisition_id = Identifier(required=True)
    pickup_date = Date(required=True)
    pickup_reference = String()
    previous_pickup_date = Date()
    scheduled_at = DateTime(required=True)
