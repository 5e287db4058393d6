"""Application tests for scheduling courier pickups and the awaiting-pickup list."""

import json
from datetime import date, timedelta

import pytest
from dispatch.aggregator import get_aggregator
from dispatch.errors import AccessDeniedError, DependencyError
from dispatch.logistics.administration import (
    ConfigureCourierRouting,
    ConfigureShippingIntegration,
    RegisterWarehouse,
    SetCompanyShipmentMode,
)
from dispatch.requisition.approval import ApproveRequisition
from dispatch.requisition.placement import PlaceRequisition
from dispatch.shipment.creation import CreateShipment
from dispatch.shipment.pickup import SchedulePickup
from dispatch.shipment.shipment import Shipment
from dispatch.shipment.tracking import SyncShipmentStatus
from protean import current_domain
from protean.exceptions import ValidationError

ADDRESS = {"address_line_1": "9 Lake View", "city": "Pune", "state": "Maharashtra", "pincode": "411001"}


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _configure_automatic():
    _process(ConfigureShippingIntegration(enabled=True))
    _process(SetCompanyShipmentMode(company_id="comp-1", shipment_mode="AUTOMATIC"))
    _process(
        ConfigureCourierRouting(
            vendor_id="ven-1", company_id="comp-1", provider_code="SHIPWAY", primary_courier_code="DELHIVERY"
        )
    )
    _process(RegisterWarehouse(vendor_id="ven-1", name="Main", pincode="400001"))


def _requisition(number):
    req_id = _process(
        PlaceRequisition(
            requisition_number=number,
            company_id="comp-1",
            vendor_id="ven-1",
            items=json.dumps([{"product_id": "prod-1", "quantity": 2, "price": 25.0}]),
            destination=json.dumps(ADDRESS),
            requires_site_approval=False,
        )
    )
    _process(ApproveRequisition(requisition_id=req_id, company_id="comp-1", caller_role="COMPANY_ADMIN"))
    return req_id


def _api_shipment(number="PR-700"):
    return _process(
        CreateShipment(
            requisition_id=_requisition(number),
            vendor_id="ven-1",
            mode="AUTOMATIC",
            length_cm=10,
            breadth_cm=10,
            height_cm=10,
        )
    )


def _in_days(days):
    return date.today() + timedelta(days=days)


class TestSchedulePickup:
    def test_pickup_scheduled_with_aggregator(self):
        _configure_automatic()
        shipment_id = _api_shipment()
        _process(SchedulePickup(shipment_id=shipment_id, vendor_id="ven-1", pickup_date=_in_days(1)))

        shipment = current_domain.repository_for(Shipment).get(shipment_id)
        assert shipment.pickup_date == _in_days(1)
        assert shipment.pickup_reference.startswith("PKP")
        call = get_aggregator().calls_to("schedule_pickup")[0]
        assert call["provider_shipment_reference"] == shipment.provider_shipment_reference
        assert call["provider_code"] == "SHIPWAY"

    def test_reschedule_moves_pickup(self):
        _configure_automatic()
        shipment_id = _api_shipment()
        _process(SchedulePickup(shipment_id=shipment_id, vendor_id="ven-1", pickup_date=_in_days(1)))
        _process(SchedulePickup(shipment_id=shipment_id, vendor_id="ven-1", pickup_date=_in_days(5)))

        assert current_domain.repository_for(Shipment).get(shipment_id).pickup_date == _in_days(5)
        assert len(get_aggregator().calls_to("schedule_pickup")) == 2

    def test_other_vendor_denied(self):
        _configure_automatic()
        shipment_id = _api_shipment()
        with pytest.raises(AccessDeniedError):
            _process(SchedulePickup(shipment_id=shipment_id, vendor_id="ven-2", pickup_date=_in_days(1)))

    def test_collected_shipment_rejected_before_aggregator_call(self):
        _configure_automatic()
        shipment_id = _api_shipment()
        _process(SyncShipmentStatus(shipment_id=shipment_id))
        with pytest.raises(ValidationError):
            _process(SchedulePickup(shipment_id=shipment_id, vendor_id="ven-1", pickup_date=_in_days(1)))
        assert get_aggregator().calls_to("schedule_pickup") == []

    def test_aggregator_failure_leaves_shipment_unscheduled(self):
        _configure_automatic()
        shipment_id = _api_shipment()
        get_aggregator().configure(should_succeed=False)
        with pytest.raises(DependencyError):
            _process(SchedulePickup(shipment_id=shipment_id, vendor_id="ven-1", pickup_date=_in_days(1)))
        assert current_domain.repository_for(Shipment).get(shipment_id).pickup_date is None


class TestAwaitingPickup:
    def test_unscheduled_first_then_by_date(self):
        _configure_automatic()
        late = _api_shipment("PR-701")
        early = _api_shipment("PR-702")
        unscheduled = _api_shipment("PR-703")
        _process(SchedulePickup(shipment_id=late, vendor_id="ven-1", pickup_date=_in_days(6)))
        _process(SchedulePickup(shipment_id=early, vendor_id="ven-1", pickup_date=_in_days(2)))

        waiting = current_domain.repository_for(Shipment).awaiting_pickup("ven-1")
        assert [str(s.id) for s in waiting] == [unscheduled, early, late]

    def test_collected_and_other_vendors_excluded(self):
        _configure_automatic()
        collected = _api_shipment("PR-704")
        waiting = _api_shipment("PR-705")
        _process(SyncShipmentStatus(shipment_id=collected))

        repo = current_domain.repository_for(Shipment)
        assert [str(s.id) for s in repo.awaiting_pickup("ven-1")] == [waiting]
        assert repo.awaiting_pickup("ven-2") == []
