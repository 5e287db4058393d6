"""Shipment aggregate (CQRS) — one dispatch of a requisition by its vendor.

A shipment is either entered by hand (MANUAL) or booked through the carrier
aggregator (API). It is created at most once per open requisition-vendor
pair and afterwards only moves forward.

State Machine:
    CREATED → IN_TRANSIT → DELIVERED
    {CREATED, IN_TRANSIT} → FAILED

An aggregator shipment waits in CREATED until the courier collects it; its
pickup can be scheduled, and moved, only while it is there.
"""

import json
from datetime import UTC, date, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Float, Identifier, String, Text, ValueObject

from dispatch.domain import dispatch
from dispatch.shared.address import DeliveryAddress
from dispatch.shipment.events import ShipmentCreated, ShipmentPickupScheduled, ShipmentStatusAdvanced


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ShipmentStatus(Enum):
    CREATED = "CREATED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


class ShipmentMode(Enum):
    MANUAL = "MANUAL"
    API = "API"


class TransportMode(Enum):
    COURIER = "COURIER"
    DIRECT = "DIRECT"
    HAND_DELIVERY = "HAND_DELIVERY"


_VALID_TRANSITIONS = {
    ShipmentStatus.CREATED: {ShipmentStatus.IN_TRANSIT, ShipmentStatus.FAILED},
    ShipmentStatus.IN_TRANSIT: {ShipmentStatus.DELIVERED, ShipmentStatus.FAILED},
    ShipmentStatus.DELIVERED: set(),  # terminal
    ShipmentStatus.FAILED: set(),  # terminal
}

# Forward order used when catching up with a provider-reported status
_PROGRESSION = [ShipmentStatus.CREATED, ShipmentStatus.IN_TRANSIT, ShipmentStatus.DELIVERED]

OPEN_STATUSES = frozenset({ShipmentStatus.CREATED.value, ShipmentStatus.IN_TRANSIT.value})


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@dispatch.value_object(part_of="Shipment")
class PackageDimensions:
    """Package size and the weights derived from it."""

    package_template_id = Identifier()
    length_cm = Float()
    breadth_cm = Float()
    height_cm = Float()
    volumetric_divisor = Float()
    volumetric_weight_kg = Float()
    dead_weight_kg = Float()
    chargeable_weight_kg = Float()


@dispatch.value_object(part_of="Shipment")
class CourierAssignment:
    """Which aggregator courier carries the shipment."""

    provider_code = String(max_length=50)
    courier_code = String(max_length=50)
    courier_role = String(max_length=20)
    estimated_cost = Float()
    estimated_days = String(max_length=50)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@dispatch.aggregate
class Shipment:
    requisition_id = Identifier(required=True)
    requisition_number = String(max_length=50)
    vendor_id = Identifier(required=True)
    company_id = Identifier(required=True)
    shipment_mode = String(required=True, choices=ShipmentMode)
    status = String(choices=ShipmentStatus, default=ShipmentStatus.CREATED.value)
    courier = ValueObject(CourierAssignment)
    package = ValueObject(PackageDimensions)
    destination = ValueObject(DeliveryAddress)
    warehouse_id = Identifier()
    source_pincode = String(max_length=6)
    destination_pincode = String(max_length=6)
    awb_number = String(max_length=100)
    # Manual entry
    transport_mode = String(choices=TransportMode)
    courier_name = String(max_length=255)
    dispatched_date = Date()
    # Aggregator booking
    provider_shipment_reference = String(max_length=255)
    tracking_url = String(max_length=500)
    raw_provider_response = Text()  # JSON, kept verbatim for audit
    pickup_date = Date()
    pickup_reference = String(max_length=100)
    pickup_scheduled_at = DateTime()
    failure_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    delivered_at = DateTime()

    # -------------------------------------------------------------------
    # Factory methods
    # -------------------------------------------------------------------
    @classmethod
    def _new(cls, mode: ShipmentMode, requisition, **fields):
        now = datetime.now(UTC)
        shipment = cls(
            requisition_id=str(requisition.id),
            requisition_number=requisition.requisition_number,
            vendor_id=str(requisition.vendor_id),
            company_id=str(requisition.company_id),
            shipment_mode=mode.value,
            status=ShipmentStatus.CREATED.value,
            created_at=now,
            updated_at=now,
            **fields,
        )
        shipment.raise_(
            ShipmentCreated(
                shipment_id=str(shipment.id),
                requisition_id=str(requisition.id),
                vendor_id=str(requisition.vendor_id),
                shipment_mode=mode.value,
                courier_code=shipment.courier.courier_code if shipment.courier else None,
                awb_number=shipment.awb_number,
                chargeable_weight_kg=shipment.package.chargeable_weight_kg if shipment.package else None,
                created_at=now,
            )
        )
        return shipment

    @classmethod
    def record_manual(
        cls,
        requisition,
        destination: DeliveryAddress,
        transport_mode: TransportMode,
        dispatched_date: date,
        courier_name: str | None = None,
        awb_number: str | None = None,
        package: PackageDimensions | None = None,
    ):
        """A shipment the vendor dispatched outside the aggregator; it is already on its way."""
        shipment = cls._new(
            ShipmentMode.MANUAL,
            requisition,
            destination=destination,
            destination_pincode=destination.pincode,
            transport_mode=transport_mode.value,
            courier_name=courier_name,
            awb_number=awb_number,
            dispatched_date=dispatched_date,
            package=package,
        )
        shipment.advance(ShipmentStatus.IN_TRANSIT)
        return shipment

    @classmethod
    def book_via_aggregator(
        cls,
        requisition,
        courier: CourierAssignment,
        package: PackageDimensions,
        warehouse_id: str,
        source_pincode: str,
        destination: DeliveryAddress | None,
        destination_pincode: str,
        provider_shipment_reference: str,
        awb_number: str,
        tracking_url: str | None,
        raw_provider_response: dict | None,
    ):
        return cls._new(
            ShipmentMode.API,
            requisition,
            courier=courier,
            package=package,
            warehouse_id=warehouse_id,
            source_pincode=source_pincode,
            destination=destination,
            destination_pincode=destination_pincode,
            provider_shipment_reference=provider_shipment_reference,
            awb_number=awb_number,
            tracking_url=tracking_url,
            raw_provider_response=json.dumps(raw_provider_response or {}),
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not self.is_open

    def _assert_can_transition(self, target_status: ShipmentStatus) -> None:
        current = ShipmentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def advance(self, target_status: ShipmentStatus, reason: str | None = None) -> None:
        """Apply one legal forward transition."""
        self._assert_can_transition(target_status)
        previous = self.status
        now = datetime.now(UTC)
        self.status = target_status.value
        self.updated_at = now
        if target_status == ShipmentStatus.DELIVERED:
            self.delivered_at = now
        if target_status == ShipmentStatus.FAILED:
            self.failure_reason = reason
        self.raise_(
            ShipmentStatusAdvanced(
                shipment_id=str(self.id),
                requisition_id=str(self.requisition_id),
                previous_status=previous,
                new_status=target_status.value,
                reason=reason,
                occurred_at=now,
            )
        )

    def catch_up_to(self, reported_status: ShipmentStatus) -> list[ShipmentStatus]:
        """Walk forward to a provider-reported status; never moves backward.

        Returns the statuses actually entered, in order.
        """
        if self.is_terminal:
            return []
        if reported_status == ShipmentStatus.FAILED:
            self.advance(ShipmentStatus.FAILED, reason="Reported failed by aggregator")
            return [ShipmentStatus.FAILED]
        if reported_status not in _PROGRESSION:
            return []
        current_index = _PROGRESSION.index(ShipmentStatus(self.status))
        entered = []
        for status in _PROGRESSION[current_index + 1 : _PROGRESSION.index(reported_status) + 1]:
            self.advance(status)
            entered.append(status)
        return entered

    def record_provider_response(self, raw_response: dict | None) -> None:
        if raw_response is not None:
            self.raw_provider_response = json.dumps(raw_response)
            self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Pickup
    # -------------------------------------------------------------------
    @property
    def is_awaiting_pickup(self) -> bool:
        return self.shipment_mode == ShipmentMode.API.value and self.status == ShipmentStatus.CREATED.value

    def assert_pickup_allowed(self, pickup_date: date, today: date | None = None) -> None:
        if not self.is_awaiting_pickup:
            raise ValidationError(
                {"status": [f"Pickup can only be scheduled for an aggregator shipment in CREATED, not {self.status}"]}
            )
        today = today or datetime.now(UTC).date()
        if pickup_date < today:
            raise ValidationError({"pickup_date": ["Pickup date cannot be in the past"]})

    def schedule_pickup(self, pickup_date: date, pickup_reference: str | None = None) -> None:
        """Record the courier's pickup; a second call reschedules it."""
        self.assert_pickup_allowed(pickup_date)
        previous = self.pickup_date
        now = datetime.now(UTC)
        self.pickup_date = pickup_date
        self.pickup_reference = pickup_reference or self.pickup_reference
        self.pickup_scheduled_at = now
        self.updated_at = now
        self.raise_(
            ShipmentPickupScheduled(
                shipment_id=str(self.id),
                requisition_id=str(self.requisition_id),
                pickup_date=pickup_date,
                pickup_reference=self.pickup_reference,
                previous_pickup_date=previous,
                scheduled_at=now,
            )
        )
