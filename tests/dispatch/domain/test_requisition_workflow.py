"""Tests for the Requisition aggregate — placement, approval and shipment transitions."""

import pytest
from dispatch.errors import AccessDeniedError
from dispatch.requisition.events import (
    PurchaseOrderLinked,
    RequisitionApproved,
    RequisitionDispatched,
    RequisitionPlaced,
    RequisitionRejected,
    RequisitionShipmentFailed,
)
from dispatch.requisition.requisition import Requisition
from dispatch.requisition.status import RequisitionStatus
from dispatch.workflow.context import CallerRole
from protean.exceptions import ValidationError


def _make_items():
    return [
        {"product_id": "prod-1", "product_name": "Safety Boots", "size": "9", "quantity": 2, "price": 1500.0},
        {"product_id": "prod-2", "product_name": "Helmet", "quantity": 1, "price": 450.5},
    ]


def _make_requisition(requires_site_approval=True):
    return Requisition.place(
        requisition_number="PR-001",
        company_id="comp-1",
        vendor_id="ven-1",
        items_data=_make_items(),
        employee_name="Asha",
        requires_site_approval=requires_site_approval,
    )


def _approved():
    req = _make_requisition(requires_site_approval=False)
    req.approve(CallerRole.COMPANY_ADMIN)
    return req


class TestPlacement:
    def test_place_sets_initial_status(self):
        req = _make_requisition()
        assert req.status == RequisitionStatus.PENDING_SITE_ADMIN_APPROVAL.value
        assert req.display_status == "Awaiting approval"

    def test_place_without_site_approval(self):
        req = _make_requisition(requires_site_approval=False)
        assert req.status == RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL.value

    def test_total_is_sum_of_lines(self):
        assert _make_requisition().total == 3450.5

    def test_items_added(self):
        assert len(_make_requisition().items) == 2

    def test_place_raises_event(self):
        req = _make_requisition()
        assert isinstance(req._events[-1], RequisitionPlaced)
        assert req._events[-1].requisition_number == "PR-001"


class TestApproval:
    def test_location_admin_moves_to_company_admin(self):
        req = _make_requisition()
        req.approve(CallerRole.LOCATION_ADMIN)
        assert req.status == RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL.value
        assert isinstance(req._events[-1], RequisitionApproved)

    def test_company_admin_approves(self):
        req = _approved()
        assert req.status == RequisitionStatus.COMPANY_ADMIN_APPROVED.value
        assert req.display_status == "Awaiting fulfilment"

    def test_company_admin_cannot_skip_site_approval(self):
        req = _make_requisition()
        with pytest.raises(ValidationError):
            req.approve(CallerRole.COMPANY_ADMIN)

    def test_vendor_cannot_approve(self):
        with pytest.raises(AccessDeniedError):
            _make_requisition().approve(CallerRole.VENDOR)

    def test_site_rejection(self):
        req = _make_requisition()
        req.reject(CallerRole.LOCATION_ADMIN, reason="Not budgeted")
        assert req.status == RequisitionStatus.REJECTED_BY_SITE_ADMIN.value
        assert req.rejection_reason == "Not budgeted"
        assert isinstance(req._events[-1], RequisitionRejected)

    def test_company_rejection(self):
        req = _make_requisition(requires_site_approval=False)
        req.reject(CallerRole.COMPANY_ADMIN)
        assert req.status == RequisitionStatus.REJECTED_BY_COMPANY_ADMIN.value

    def test_rejected_is_terminal(self):
        req = _make_requisition()
        req.reject(CallerRole.LOCATION_ADMIN)
        with pytest.raises(ValidationError):
            req.approve(CallerRole.LOCATION_ADMIN)


class TestPurchaseOrder:
    def test_link_moves_to_linked(self):
        req = _approved()
        req.link_purchase_order("PO-77")
        assert req.status == RequisitionStatus.LINKED_TO_PO.value
        assert req.po_number_list == ["PO-77"]
        assert isinstance(req._events[-1], PurchaseOrderLinked)

    def test_second_po_keeps_status(self):
        req = _approved()
        req.link_purchase_order("PO-77")
        req.link_purchase_order("PO-78")
        assert req.po_number_list == ["PO-77", "PO-78"]
        assert req.status == RequisitionStatus.LINKED_TO_PO.value

    def test_duplicate_po_is_ignored(self):
        req = _approved()
        req.link_purchase_order("PO-77")
        req.link_purchase_order(" PO-77 ")
        assert req.po_number_list == ["PO-77"]

    def test_blank_po_rejected(self):
        with pytest.raises(ValidationError):
            _approved().link_purchase_order("   ")

    def test_cannot_link_before_approval(self):
        with pytest.raises(ValidationError):
            _make_requisition().link_purchase_order("PO-1")


class TestShipmentTransitions:
    def test_approved_is_ready_for_shipment(self):
        assert _approved().is_ready_for_shipment is True

    def test_pending_is_not_ready(self):
        assert _make_requisition().is_ready_for_shipment is False

    def test_mark_in_shipment(self):
        req = _approved()
        req.mark_in_shipment("shp-1")
        assert req.status == RequisitionStatus.IN_SHIPMENT.value
        assert isinstance(req._events[-1], RequisitionDispatched)

    def test_mark_in_shipment_twice_fails(self):
        req = _approved()
        req.mark_in_shipment("shp-1")
        with pytest.raises(ValidationError):
            req.mark_in_shipment("shp-2")

    def test_mark_delivered(self):
        req = _approved()
        req.mark_in_shipment("shp-1")
        req.mark_delivered("shp-1")
        assert req.status == RequisitionStatus.FULLY_DELIVERED.value
        assert req.display_status == "Delivered"

    def test_release_returns_to_pre_dispatch_status(self):
        req = _approved()
        req.link_purchase_order("PO-7")
        req.mark_in_shipment("shp-1")
        req.release_from_shipment("shp-1", reason="Lost in transit")
        assert req.status == RequisitionStatus.LINKED_TO_PO.value
        assert req.is_ready_for_shipment is True
        event = req._events[-1]
        assert isinstance(event, RequisitionShipmentFailed)
        assert event.restored_status == RequisitionStatus.LINKED_TO_PO.value

    def test_release_without_recorded_status_falls_back_to_approved(self):
        req = _approved()
        req.mark_in_shipment("shp-1")
        req.pre_dispatch_status = None
        req.release_from_shipment("shp-1")
        assert req.status == RequisitionStatus.COMPANY_ADMIN_APPROVED.value

    def test_release_requires_open_shipment(self):
        with pytest.raises(ValidationError):
            _approved().release_from_shipment("shp-1")
