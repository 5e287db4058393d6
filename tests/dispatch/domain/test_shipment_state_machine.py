"""Tests for the Shipment aggregate state machine."""

from datetime import date, timedelta

import pytest
from dispatch.requisition.requisition import Requisition
from dispatch.shared.address import DeliveryAddress
from dispatch.shipment.events import ShipmentCreated, ShipmentPickupScheduled, ShipmentStatusAdvanced
from dispatch.shipment.shipment import (
    CourierAssignment,
    PackageDimensions,
    Shipment,
    ShipmentMode,
    ShipmentStatus,
    TransportMode,
)
from protean.exceptions import ValidationError


def _requisition():
    return Requisition.place(
        requisition_number="PR-010",
        company_id="comp-1",
        vendor_id="ven-1",
        items_data=[{"product_id": "prod-1", "quantity": 1, "price": 100.0}],
        requires_site_approval=False,
    )


def _address():
    return DeliveryAddress(
        address_line_1="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        pincode="560001",
    )


def _manual():
    return Shipment.record_manual(
        _requisition(),
        destination=_address(),
        transport_mode=TransportMode.COURIER,
        dispatched_date=date(2026, 3, 1),
        courier_name="BlueDart",
        awb_number="BD123",
    )


def _api():
    return Shipment.book_via_aggregator(
        _requisition(),
        courier=CourierAssignment(provider_code="SHIPWAY", courier_code="DELHIVERY", courier_role="PRIMARY"),
        package=PackageDimensions(length_cm=30, breadth_cm=20, height_cm=10, chargeable_weight_kg=1.2),
        warehouse_id="wh-1",
        source_pincode="400001",
        destination=_address(),
        destination_pincode="560001",
        provider_shipment_reference="ref-1",
        awb_number="AWB1",
        tracking_url="https://track.example.com/AWB1",
        raw_provider_response={"ok": True},
    )


class TestCreation:
    def test_manual_shipment_is_in_transit(self):
        shipment = _manual()
        assert shipment.shipment_mode == ShipmentMode.MANUAL.value
        assert shipment.status == ShipmentStatus.IN_TRANSIT.value
        assert shipment.destination_pincode == "560001"

    def test_manual_shipment_events(self):
        events = _manual()._events
        assert isinstance(events[0], ShipmentCreated)
        assert isinstance(events[1], ShipmentStatusAdvanced)

    def test_api_shipment_starts_created(self):
        shipment = _api()
        assert shipment.shipment_mode == ShipmentMode.API.value
        assert shipment.status == ShipmentStatus.CREATED.value
        assert shipment.courier.courier_code == "DELHIVERY"
        assert shipment.raw_provider_response == '{"ok": true}'

    def test_shipment_copies_requisition_identity(self):
        shipment = _api()
        assert shipment.requisition_number == "PR-010"
        assert shipment.company_id == "comp-1"


class TestTransitions:
    def test_created_to_in_transit_to_delivered(self):
        shipment = _api()
        shipment.advance(ShipmentStatus.IN_TRANSIT)
        shipment.advance(ShipmentStatus.DELIVERED)
        assert shipment.status == ShipmentStatus.DELIVERED.value
        assert shipment.delivered_at is not None
        assert shipment.is_terminal

    def test_cannot_skip_backwards(self):
        shipment = _manual()
        with pytest.raises(ValidationError):
            shipment.advance(ShipmentStatus.CREATED)

    def test_failed_records_reason(self):
        shipment = _api()
        shipment.advance(ShipmentStatus.FAILED, reason="Lost")
        assert shipment.failure_reason == "Lost"
        assert shipment.is_open is False

    def test_delivered_is_terminal(self):
        shipment = _manual()
        shipment.advance(ShipmentStatus.DELIVERED)
        with pytest.raises(ValidationError):
            shipment.advance(ShipmentStatus.FAILED)


class TestCatchUp:
    def test_catch_up_walks_every_step(self):
        shipment = _api()
        entered = shipment.catch_up_to(ShipmentStatus.DELIVERED)
        assert entered == [ShipmentStatus.IN_TRANSIT, ShipmentStatus.DELIVERED]

    def test_catch_up_never_moves_backward(self):
        shipment = _manual()
        assert shipment.catch_up_to(ShipmentStatus.CREATED) == []
        assert shipment.status == ShipmentStatus.IN_TRANSIT.value

    def test_catch_up_to_failed(self):
        shipment = _api()
        assert shipment.catch_up_to(ShipmentStatus.FAILED) == [ShipmentStatus.FAILED]

    def test_terminal_shipment_ignores_reports(self):
        shipment = _api()
        shipment.catch_up_to(ShipmentStatus.DELIVERED)
        assert shipment.catch_up_to(ShipmentStatus.FAILED) == []


class TestPickup:
    def test_schedule_pickup(self):
        shipment = _api()
        tomorrow = date.today() + timedelta(days=1)
        shipment.schedule_pickup(tomorrow, "PKP1")
        assert shipment.pickup_date == tomorrow
        assert shipment.pickup_reference == "PKP1"
        event = shipment._events[-1]
        assert isinstance(event, ShipmentPickupScheduled)
        assert event.previous_pickup_date is None

    def test_reschedule_keeps_reference_and_previous_date(self):
        shipment = _api()
        first = date.today() + timedelta(days=1)
        later = date.today() + timedelta(days=4)
        shipment.schedule_pickup(first, "PKP1")
        shipment.schedule_pickup(later)
        assert shipment.pickup_date == later
        assert shipment.pickup_reference == "PKP1"
        assert shipment._events[-1].previous_pickup_date == first

    def test_past_date_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _api().schedule_pickup(date.today() - timedelta(days=2))
        assert "pickup_date" in exc.value.messages

    def test_manual_shipment_has_no_pickup(self):
        shipment = _manual()
        assert shipment.is_awaiting_pickup is False
        with pytest.raises(ValidationError):
            shipment.schedule_pickup(date.today() + timedelta(days=1))

    def test_collected_shipment_has_no_pickup(self):
        shipment = _api()
        shipment.advance(ShipmentStatus.IN_TRANSIT)
        with pytest.raises(ValidationError):
            shipment.schedule_pickup(date.today() + timedelta(days=1))
