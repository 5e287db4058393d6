"""Application tests for shipment status advances and aggregator sync."""

import json
from datetime import date

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
from dispatch.requisition.requisition import Requisition
from dispatch.requisition.status import RequisitionStatus
from dispatch.shipment.creation import CreateShipment
from dispatch.shipment.shipment import Shipment, ShipmentStatus
from dispatch.shipment.tracking import AdvanceShipmentStatus, SyncShipmentStatus, sync_pending_shipments
from protean import current_domain
from protean.exceptions import ValidationError

ADDRESS = {"address_line_1": "3 Hill Rd", "city": "Mumbai", "state": "Maharashtra", "pincode": "400050"}


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _approved_requisition(number="PR-500"):
    req_id = _process(
        PlaceRequisition(
            requisition_number=number,
            company_id="comp-1",
            vendor_id="ven-1",
            items=json.dumps([{"product_id": "prod-1", "quantity": 1, "price": 10.0}]),
            destination=json.dumps(ADDRESS),
            requires_site_approval=False,
        )
    )
    _process(ApproveRequisition(requisition_id=req_id, company_id="comp-1", caller_role="COMPANY_ADMIN"))
    return req_id


def _manual_shipment():
    req_id = _approved_requisition()
    shipment_id = _process(
        CreateShipment(
            requisition_id=req_id,
            vendor_id="ven-1",
            mode="MANUAL",
            transport_mode="DIRECT",
            dispatched_date=date(2026, 4, 1),
        )
    )
    return req_id, shipment_id


def _api_shipment(number="PR-500"):
    _process(ConfigureShippingIntegration(enabled=True))
    _process(SetCompanyShipmentMode(company_id="comp-1", shipment_mode="AUTOMATIC"))
    _process(
        ConfigureCourierRouting(
            vendor_id="ven-1", company_id="comp-1", provider_code="SHIPWAY", primary_courier_code="DELHIVERY"
        )
    )
    _process(RegisterWarehouse(vendor_id="ven-1", name="Main", pincode="400001"))
    req_id = _approved_requisition(number)
    shipment_id = _process(
        CreateShipment(
            requisition_id=req_id, vendor_id="ven-1", mode="AUTOMATIC", length_cm=10, breadth_cm=10, height_cm=10
        )
    )
    return req_id, shipment_id


class TestAdvanceShipmentStatus:
    def test_vendor_marks_delivered(self):
        req_id, shipment_id = _manual_shipment()
        _process(AdvanceShipmentStatus(shipment_id=shipment_id, vendor_id="ven-1", status="DELIVERED"))
        assert current_domain.repository_for(Shipment).get(shipment_id).status == ShipmentStatus.DELIVERED.value
        req = current_domain.repository_for(Requisition).get(req_id)
        assert req.status == RequisitionStatus.FULLY_DELIVERED.value

    def test_failed_returns_requisition_to_approved(self):
        req_id, shipment_id = _manual_shipment()
        _process(AdvanceShipmentStatus(shipment_id=shipment_id, vendor_id="ven-1", status="FAILED", reason="Lost"))
        req = current_domain.repository_for(Requisition).get(req_id)
        assert req.status == RequisitionStatus.COMPANY_ADMIN_APPROVED.value
        assert req.pre_dispatch_status is None

    def test_new_shipment_can_be_created_after_failure(self):
        req_id, shipment_id = _manual_shipment()
        _process(AdvanceShipmentStatus(shipment_id=shipment_id, vendor_id="ven-1", status="FAILED", reason="Lost"))
        retry_id = _process(
            CreateShipment(
                requisition_id=req_id,
                vendor_id="ven-1",
                mode="MANUAL",
                transport_mode="DIRECT",
                dispatched_date=date(2026, 4, 3),
            )
        )
        assert retry_id != shipment_id
        assert current_domain.repository_for(Requisition).get(req_id).status == RequisitionStatus.IN_SHIPMENT.value

    def test_backward_move_rejected(self):
        _, shipment_id = _manual_shipment()
        with pytest.raises(ValidationError):
            _process(AdvanceShipmentStatus(shipment_id=shipment_id, vendor_id="ven-1", status="CREATED"))

    def test_other_vendor_denied(self):
        _, shipment_id = _manual_shipment()
        with pytest.raises(AccessDeniedError):
            _process(AdvanceShipmentStatus(shipment_id=shipment_id, vendor_id="ven-2", status="DELIVERED"))


class TestSyncShipmentStatus:
    def test_sync_moves_to_in_transit(self):
        _, shipment_id = _api_shipment()
        status = _process(SyncShipmentStatus(shipment_id=shipment_id))
        assert status == ShipmentStatus.IN_TRANSIT.value

    def test_sync_delivered_propagates(self):
        req_id, shipment_id = _api_shipment()
        shipment = current_domain.repository_for(Shipment).get(shipment_id)
        get_aggregator().set_tracking_status(shipment.provider_shipment_reference, "DELIVERED")
        assert _process(SyncShipmentStatus(shipment_id=shipment_id)) == ShipmentStatus.DELIVERED.value
        req = current_domain.repository_for(Requisition).get(req_id)
        assert req.status == RequisitionStatus.FULLY_DELIVERED.value

    def test_sync_failed_releases_requisition(self):
        req_id, shipment_id = _api_shipment()
        shipment = current_domain.repository_for(Shipment).get(shipment_id)
        get_aggregator().set_tracking_status(shipment.provider_shipment_reference, "FAILED")
        assert _process(SyncShipmentStatus(shipment_id=shipment_id)) == ShipmentStatus.FAILED.value
        req = current_domain.repository_for(Requisition).get(req_id)
        assert req.status == RequisitionStatus.COMPANY_ADMIN_APPROVED.value

        retry_id = _process(
            CreateShipment(
                requisition_id=req_id, vendor_id="ven-1", mode="AUTOMATIC", length_cm=10, breadth_cm=10, height_cm=10
            )
        )
        assert current_domain.repository_for(Shipment).get(retry_id).status == ShipmentStatus.CREATED.value

    def test_unknown_status_ignored(self):
        _, shipment_id = _api_shipment()
        shipment = current_domain.repository_for(Shipment).get(shipment_id)
        get_aggregator().set_tracking_status(shipment.provider_shipment_reference, "OUT_FOR_PICKUP")
        assert _process(SyncShipmentStatus(shipment_id=shipment_id)) == ShipmentStatus.CREATED.value

    def test_provider_failure(self):
        _, shipment_id = _api_shipment()
        get_aggregator().configure(should_succeed=False)
        with pytest.raises(DependencyError):
            _process(SyncShipmentStatus(shipment_id=shipment_id))

    def test_manual_shipment_not_synced(self):
        _, shipment_id = _manual_shipment()
        assert _process(SyncShipmentStatus(shipment_id=shipment_id)) == ShipmentStatus.IN_TRANSIT.value
        assert get_aggregator().calls_to("get_shipment_status") == []


class TestSyncPendingShipments:
    def test_summary_counts(self):
        _api_shipment()
        summary = sync_pending_shipments()
        assert summary == {"synced": 1, "updated": 1, "failed": 0}

    def test_failures_counted_and_skipped(self):
        _api_shipment()
        get_aggregator().configure(should_succeed=False)
        assert sync_pending_shipments() == {"synced": 0, "updated": 0, "failed": 1}

    def test_no_shipments(self):
        assert sync_pending_shipments() == {"synced": 0, "updated": 0, "failed": 0}

    def test_rejected_delivery_counted_as_failure(self):
        req_id, shipment_id = _api_shipment()
        repo = current_domain.repository_for(Requisition)
        req = repo.get(req_id)
        req.status = RequisitionStatus.FULLY_DELIVERED.value
        repo.add(req)
        shipment = current_domain.repository_for(Shipment).get(shipment_id)
        get_aggregator().set_tracking_status(shipment.provider_shipment_reference, "DELIVERED")

        assert sync_pending_shipments() == {"synced": 0, "updated": 0, "failed": 1}
