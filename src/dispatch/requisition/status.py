"""Requisition workflow statuses and their priority lattice.

The lattice is a total order from "furthest behind" to "furthest along".
When one requisition is split across vendors, the logical order is only as
far along as its slowest slice, so the slice with the lowest rank decides
the overall status. Statuses that are not part of the lattice rank as
infinity and never win over a known status.
"""

import math
from enum import Enum


class RequisitionStatus(Enum):
    REJECTED = "REJECTED"
    REJECTED_BY_SITE_ADMIN = "REJECTED_BY_SITE_ADMIN"
    REJECTED_BY_COMPANY_ADMIN = "REJECTED_BY_COMPANY_ADMIN"
    PENDING_SITE_ADMIN_APPROVAL = "PENDING_SITE_ADMIN_APPROVAL"
    SITE_ADMIN_APPROVED = "SITE_ADMIN_APPROVED"
    PENDING_COMPANY_ADMIN_APPROVAL = "PENDING_COMPANY_ADMIN_APPROVAL"
    COMPANY_ADMIN_APPROVED = "COMPANY_ADMIN_APPROVED"
    LINKED_TO_PO = "LINKED_TO_PO"
    PO_CREATED = "PO_CREATED"
    IN_SHIPMENT = "IN_SHIPMENT"
    PARTIALLY_DELIVERED = "PARTIALLY_DELIVERED"
    FULLY_DELIVERED = "FULLY_DELIVERED"


STATUS_RANK = {
    RequisitionStatus.REJECTED: 0,
    RequisitionStatus.REJECTED_BY_SITE_ADMIN: 1,
    RequisitionStatus.REJECTED_BY_COMPANY_ADMIN: 2,
    RequisitionStatus.PENDING_SITE_ADMIN_APPROVAL: 3,
    RequisitionStatus.SITE_ADMIN_APPROVED: 4,
    RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL: 5,
    RequisitionStatus.COMPANY_ADMIN_APPROVED: 6,
    RequisitionStatus.LINKED_TO_PO: 7,
    RequisitionStatus.PO_CREATED: 8,
    RequisitionStatus.IN_SHIPMENT: 9,
    RequisitionStatus.PARTIALLY_DELIVERED: 10,
    RequisitionStatus.FULLY_DELIVERED: 11,
}

_RANK_BY_VALUE = {status.value: rank for status, rank in STATUS_RANK.items()}

# Statuses from which a vendor may dispatch goods
SHIPPABLE_STATUSES = frozenset(
    {
        RequisitionStatus.COMPANY_ADMIN_APPROVED,
        RequisitionStatus.LINKED_TO_PO,
        RequisitionStatus.PO_CREATED,
    }
)

# Human-readable label stored alongside the workflow status
DISPLAY_LABELS = {
    RequisitionStatus.REJECTED: "Rejected",
    RequisitionStatus.REJECTED_BY_SITE_ADMIN: "Rejected",
    RequisitionStatus.REJECTED_BY_COMPANY_ADMIN: "Rejected",
    RequisitionStatus.PENDING_SITE_ADMIN_APPROVAL: "Awaiting approval",
    RequisitionStatus.SITE_ADMIN_APPROVED: "Awaiting approval",
    RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL: "Awaiting approval",
    RequisitionStatus.COMPANY_ADMIN_APPROVED: "Awaiting fulfilment",
    RequisitionStatus.LINKED_TO_PO: "Awaiting fulfilment",
    RequisitionStatus.PO_CREATED: "Awaiting fulfilment",
    RequisitionStatus.IN_SHIPMENT: "Dispatched",
    RequisitionStatus.PARTIALLY_DELIVERED: "Dispatched",
    RequisitionStatus.FULLY_DELIVERED: "Delivered",
}

# Listing tabs and the workflow statuses each one shows
STATUS_TABS = {
    "pending_site_admin": (RequisitionStatus.PENDING_SITE_ADMIN_APPROVAL,),
    "site_admin_approved": (RequisitionStatus.SITE_ADMIN_APPROVED,),
    "pending_company_admin": (RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL,),
    "company_admin_approved": (RequisitionStatus.COMPANY_ADMIN_APPROVED,),
    "po_created": (RequisitionStatus.LINKED_TO_PO, RequisitionStatus.PO_CREATED),
    "in_shipment": (RequisitionStatus.IN_SHIPMENT, RequisitionStatus.PARTIALLY_DELIVERED),
    "delivered": (RequisitionStatus.FULLY_DELIVERED,),
    "rejected": (
        RequisitionStatus.REJECTED,
        RequisitionStatus.REJECTED_BY_SITE_ADMIN,
        RequisitionStatus.REJECTED_BY_COMPANY_ADMIN,
    ),
}

ALL_TAB = "all"


def rank_of(status) -> float:
    """Lattice rank of a status (enum member or raw string); unknown is infinity."""
    if isinstance(status, RequisitionStatus):
        return STATUS_RANK[status]
    return _RANK_BY_VALUE.get(status, math.inf)


def is_shippable(status: str) -> bool:
    return status in {s.value for s in SHIPPABLE_STATUSES}


def display_label_for(status: str) -> str:
    try:
        return DISPLAY_LABELS[RequisitionStatus(status)]
    except ValueError:
        return status


def statuses_for_tab(tab: str) -> set[str] | None:
    """Raw status values shown under a listing tab; ``None`` means no restriction."""
    if tab == ALL_TAB:
        return None
    if tab not in STATUS_TABS:
        raise ValueError(f"Unknown status tab: {tab}")
    return {status.value for status in STATUS_TABS[tab]}
