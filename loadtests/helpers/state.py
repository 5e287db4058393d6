"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
State tracks entity IDs returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class RequisitionState:
    """Tracks state for a single simulated requisition lifecycle."""

    company_id: str | None = None
    vendor_id: str | None = None
    requisition_id: str | None = None
    requisition_number: str | None = None
    current_status: str = "PENDING_COMPANY_ADMIN_APPROVAL"


@dataclass
class SplitOrderState:
    """Tracks the vendor slices of one split order."""

    company_id: str | None = None
    parent_order_id: str | None = None
    vendor_ids: list[str] = field(default_factory=list)
    requisition_ids: list[str] = field(default_factory=list)


@dataclass
class ShipmentState:
    """Tracks state for a single shipment lifecycle."""

    company_id: str | None = None
    vendor_id: str | None = None
    requisition_id: str | None = None
    shipment_id: str | None = None
    awb_number: str | None = None
    current_status: str = "CREATED"
