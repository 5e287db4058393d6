"""Requisition aggregate (CQRS) — a purchase request and its approval workflow.

A requisition raised by an employee may be split per vendor. Each slice is
its own Requisition carrying the ``parent_order_id`` of the original; the
parent itself is never shown once it has slices.

State Machine:
    PENDING_SITE_ADMIN_APPROVAL → PENDING_COMPANY_ADMIN_APPROVAL → COMPANY_ADMIN_APPROVED
    COMPANY_ADMIN_APPROVED → LINKED_TO_PO
    {COMPANY_ADMIN_APPROVED, LINKED_TO_PO, PO_CREATED} → IN_SHIPMENT → {PARTIALLY_DELIVERED, FULLY_DELIVERED}
    PARTIALLY_DELIVERED → FULLY_DELIVERED
    IN_SHIPMENT → pre-dispatch status, when the shipment fails
    PENDING_SITE_ADMIN_APPROVAL → REJECTED_BY_SITE_ADMIN
    PENDING_COMPANY_ADMIN_APPROVAL → REJECTED_BY_COMPANY_ADMIN
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from dispatch.domain import dispatch
from dispatch.errors import AccessDeniedError
from dispatch.requisition.events import (
    PurchaseOrderLinked,
    RequisitionApproved,
    RequisitionDelivered,
    RequisitionDispatched,
    RequisitionShipmentFailed,
    RequisitionPlaced,
    RequisitionRejected,
)
from dispatch.requisition.status import RequisitionStatus, display_label_for, is_shippable
from dispatch.shared.address import DeliveryAddress
from dispatch.workflow.context import CallerRole

_VALID_TRANSITIONS = {
    RequisitionStatus.PENDING_SITE_ADMIN_APPROVAL: {
        RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL,
        RequisitionStatus.REJECTED_BY_SITE_ADMIN,
    },
    RequisitionStatus.SITE_ADMIN_APPROVED: {
        RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL,
        RequisitionStatus.REJECTED_BY_SITE_ADMIN,
    },
    RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL: {
        RequisitionStatus.COMPANY_ADMIN_APPROVED,
        RequisitionStatus.REJECTED_BY_COMPANY_ADMIN,
    },
    RequisitionStatus.COMPANY_ADMIN_APPROVED: {
        RequisitionStatus.LINKED_TO_PO,
        RequisitionStatus.IN_SHIPMENT,
    },
    RequisitionStatus.LINKED_TO_PO: {RequisitionStatus.IN_SHIPMENT},
    RequisitionStatus.PO_CREATED: {RequisitionStatus.IN_SHIPMENT},
    RequisitionStatus.IN_SHIPMENT: {
        RequisitionStatus.PARTIALLY_DELIVERED,
        RequisitionStatus.FULLY_DELIVERED,
        # Back to where it was dispatched from when its shipment fails
        RequisitionStatus.COMPANY_ADMIN_APPROVED,
        RequisitionStatus.LINKED_TO_PO,
        RequisitionStatus.PO_CREATED,
    },
    RequisitionStatus.PARTIALLY_DELIVERED: {RequisitionStatus.FULLY_DELIVERED},
    RequisitionStatus.FULLY_DELIVERED: set(),  # terminal
    RequisitionStatus.REJECTED: set(),  # terminal
    RequisitionStatus.REJECTED_BY_SITE_ADMIN: set(),  # terminal
    RequisitionStatus.REJECTED_BY_COMPANY_ADMIN: set(),  # terminal
}

# Which status each approver role is allowed to act on, and where approval leads
_APPROVAL_STEPS = {
    CallerRole.LOCATION_ADMIN: (
        {RequisitionStatus.PENDING_SITE_ADMIN_APPROVAL, RequisitionStatus.SITE_ADMIN_APPROVED},
        RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL,
        RequisitionStatus.REJECTED_BY_SITE_ADMIN,
    ),
    CallerRole.COMPANY_ADMIN: (
        {RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL},
        RequisitionStatus.COMPANY_ADMIN_APPROVED,
        RequisitionStatus.REJECTED_BY_COMPANY_ADMIN,
    ),
}


@dispatch.entity(part_of="Requisition")
class RequisitionItem:
    """A single product line on the requisition."""

    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    size = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    price = Float(default=0.0, min_value=0.0)


@dispatch.aggregate
class Requisition:
    requisition_number = String(required=True, max_length=50)
    parent_order_id = Identifier()
    company_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    vendor_name = String(max_length=255)
    employee_name = String(max_length=255)
    dispatch_location = String(max_length=255)
    items = HasMany(RequisitionItem)
    status = String(
        choices=RequisitionStatus,
        default=RequisitionStatus.PENDING_SITE_ADMIN_APPROVAL.value,
    )
    display_status = String(max_length=100)
    pre_dispatch_status = String(max_length=50)
    po_numbers = Text()  # JSON list of PO numbers
    destination = ValueObject(DeliveryAddress)
    total = Float(default=0.0)
    rejection_reason = String(max_length=500)
    order_date = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        requisition_number: str,
        company_id: str,
        vendor_id: str,
        items_data: list[dict],
        vendor_name: str | None = None,
        employee_name: str | None = None,
        dispatch_location: str | None = None,
        destination: DeliveryAddress | None = None,
        parent_order_id: str | None = None,
        requires_site_approval: bool = True,
        order_date: datetime | None = None,
    ):
        """Place a requisition; the total is the sum of line amounts."""
        now = datetime.now(UTC)
        status = (
            RequisitionStatus.PENDING_SITE_ADMIN_APPROVAL
            if requires_site_approval
            else RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL
        )
        total = sum(item.get("price", 0.0) * item["quantity"] for item in items_data)
        req = cls(
            requisition_number=requisition_number,
            parent_order_id=parent_order_id,
            company_id=company_id,
            vendor_id=vendor_id,
            vendor_name=vendor_name,
            employee_name=employee_name,
            dispatch_location=dispatch_location,
            destination=destination,
            status=status.value,
            display_status=display_label_for(status.value),
            po_numbers=json.dumps([]),
            total=round(total, 2),
            order_date=order_date or now,
            created_at=now,
            updated_at=now,
        )
        for item_data in items_data:
            req.add_items(RequisitionItem(**item_data))
        req.raise_(
            RequisitionPlaced(
                requisition_id=str(req.id),
                requisition_number=requisition_number,
                parent_order_id=parent_order_id,
                company_id=company_id,
                vendor_id=vendor_id,
                status=status.value,
                total=req.total,
                placed_at=now,
            )
        )
        return req

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: RequisitionStatus) -> None:
        current = RequisitionStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _move_to(self, target_status: RequisitionStatus, now: datetime) -> None:
        self.status = target_status.value
        self.display_status = display_label_for(target_status.value)
        self.updated_at = now

    def _approval_step_for(self, role: CallerRole):
        step = _APPROVAL_STEPS.get(role)
        if step is None:
            raise AccessDeniedError(f"{role.value} cannot approve or reject requisitions")
        acting_on, _, _ = step
        if RequisitionStatus(self.status) not in acting_on:
            raise ValidationError(
                {"status": [f"{role.value} cannot act on a requisition in status {self.status}"]}
            )
        return step

    @property
    def po_number_list(self) -> list[str]:
        return json.loads(self.po_numbers) if self.po_numbers else []

    @property
    def is_ready_for_shipment(self) -> bool:
        return is_shippable(self.status)

    # -------------------------------------------------------------------
    # Approval
    # -------------------------------------------------------------------
    def approve(self, role: CallerRole) -> None:
        """Advance the requisition one approval step on behalf of ``role``."""
        _, target, _ = self._approval_step_for(role)
        self._assert_can_transition(target)
        previous = self.status
        now = datetime.now(UTC)
        self._move_to(target, now)
        self.raise_(
            RequisitionApproved(
                requisition_id=str(self.id),
                approved_by_role=role.value,
                previous_status=previous,
                new_status=target.value,
                approved_at=now,
            )
        )

    def reject(self, role: CallerRole, reason: str | None = None) -> None:
        _, _, target = self._approval_step_for(role)
        self._assert_can_transition(target)
        now = datetime.now(UTC)
        self._move_to(target, now)
        self.rejection_reason = reason
        self.raise_(
            RequisitionRejected(
                requisition_id=str(self.id),
                rejected_by_role=role.value,
                new_status=target.value,
                reason=reason,
                rejected_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Purchase order
    # -------------------------------------------------------------------
    def link_purchase_order(self, po_number: str) -> None:
        """Attach a PO number; the first PO moves the requisition to LINKED_TO_PO."""
        if not po_number or not po_number.strip():
            raise ValidationError({"po_number": ["PO number is required"]})
        po_number = po_number.strip()
        numbers = self.po_number_list
        if po_number in numbers:
            return
        now = datetime.now(UTC)
        if self.status != RequisitionStatus.LINKED_TO_PO.value:
            self._assert_can_transition(RequisitionStatus.LINKED_TO_PO)
            self._move_to(RequisitionStatus.LINKED_TO_PO, now)
        numbers.append(po_number)
        self.po_numbers = json.dumps(numbers)
        self.updated_at = now
        self.raise_(
            PurchaseOrderLinked(
                requisition_id=str(self.id),
                po_number=po_number,
                linked_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Shipment
    # -------------------------------------------------------------------
    def mark_in_shipment(self, shipment_id: str) -> None:
        self._assert_can_transition(RequisitionStatus.IN_SHIPMENT)
        now = datetime.now(UTC)
        self.pre_dispatch_status = self.status
        self._move_to(RequisitionStatus.IN_SHIPMENT, now)
        self.raise_(
            RequisitionDispatched(
                requisition_id=str(self.id),
                shipment_id=shipment_id,
                dispatched_at=now,
            )
        )

    def mark_delivered(self, shipment_id: str) -> None:
        self._assert_can_transition(RequisitionStatus.FULLY_DELIVERED)
        now = datetime.now(UTC)
        self._move_to(RequisitionStatus.FULLY_DELIVERED, now)
        self.raise_(
            RequisitionDelivered(
                requisition_id=str(self.id),
                shipment_id=shipment_id,
                delivered_at=now,
            )
        )

    def release_from_shipment(self, shipment_id: str, reason: str | None = None) -> None:
        """Return the requisition to its pre-dispatch status after its shipment failed."""
        if self.status != RequisitionStatus.IN_SHIPMENT.value:
            raise ValidationError({"status": [f"Requisition in status {self.status} has no shipment to release"]})
        target = RequisitionStatus(self.pre_dispatch_status or RequisitionStatus.COMPANY_ADMIN_APPROVED.value)
        self._assert_can_transition(target)
        now = datetime.now(UTC)
        self._move_to(target, now)
        self.pre_dispatch_status = None
        self.raise_(
            RequisitionShipmentFailed(
                requisition_id=str(self.id),
                shipment_id=shipment_id,
                restored_status=target.value,
                reason=reason,
                failed_at=now,
            )
        )
