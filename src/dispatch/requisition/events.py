"""Requisition domain events — facts about a requisition's workflow."""

from protean.fields import DateTime, Float, Identifier, String

from dispatch.domain import dispatch


@dispatch.event(part_of="Requisition")
class RequisitionPlaced:
    """An employee's requisition (or one vendor slice of it) was placed."""

    __version__ = 1

    requisition_id = Identifier(required=True)
    requisition_number = String(required=True)
    parent_order_id = Identifier()
    company_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    status = String(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@dispatch.event(part_of="Requisition")
class RequisitionApproved:
    """An approver moved the requisition forward."""

    __version__ = 1

    requisition_id = Identifier(required=True)
    approved_by_role = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    approved_at = DateTime(required=True)


@dispatch.event(part_of="Requisition")
class RequisitionRejected:
    """An approver rejected the requisition."""

    __version__ = 1

    requisition_id = Identifier(required=True)
    rejected_by_role = String(required=True)
    new_status = String(required=True)
    reason = String()
    rejected_at = DateTime(required=True)


@dispatch.event(part_of="Requisition")
class PurchaseOrderLinked:
    """A purchase order was linked to an approved requisition."""

    __version__ = 1

    requisition_id = Identifier(required=True)
    po_number = String(required=True)
    linked_at = DateTime(required=True)


@dispatch.event(part_of="Requisition")
class RequisitionDispatched:
    """The vendor created a shipment for the requisition."""

    __version__ = 1

    requisition_id = Identifier(required=True)
    shipment_id = Identifier(required=True)
    dispatched_at = DateTime(required=True)


@dispatch.event(part_of="Requisition")
class RequisitionDelivered:
    """The requisition's shipment was delivered."""

    __version__ = 1

    requisition_id = Identifier(required=True)
    shipment_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@dispatch.event(part_of="Requisition")
class RequisitionShipmentFailed:
    """The requisition's shipment failed; it is ready to ship again."""

    __version__ = 1

    requisition_id = Identifier(required=True)
    shipment_id = Identifier(required=True)
    restored_status = String(required=True)
    reason = String()
    failed_at = DateTime(required=True)
