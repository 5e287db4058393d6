"""Pending-action resolution for logical orders.

Priorities:
    1              the order itself awaits company-admin approval
    2 + 0.1 × i    the i-th GRN still awaiting a decision
    3 + 0.1 × i    the i-th invoice still awaiting a decision

Only company admins take these decisions, so every other caller gets an
empty list.
"""

from dataclasses import dataclass
from enum import Enum

from dispatch.documents.document import AWAITING_DECISION
from dispatch.requisition.status import RequisitionStatus
from dispatch.workflow.context import RequestContext


class ActionKind(Enum):
    ORDER = "ORDER"
    GRN = "GRN"
    INVOICE = "INVOICE"


_KIND_ORDER = {ActionKind.ORDER: 0, ActionKind.GRN: 1, ActionKind.INVOICE: 2}

ORDER_PRIORITY = 1
GRN_BASE_PRIORITY = 2
INVOICE_BASE_PRIORITY = 3


@dataclass(frozen=True)
class PendingAction:
    kind: ActionKind
    entity_id: str
    display_id: str
    label: str
    priority: float

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "entity_id": self.entity_id,
            "display_id": self.display_id,
            "label": self.label,
            "priority": self.priority,
        }


def _document_actions(kind: ActionKind, base: int, documents, noun: str) -> list[PendingAction]:
    actions = []
    seen = set()
    for document in documents:
        if document.status not in AWAITING_DECISION or document.id in seen:
            continue
        seen.add(document.id)
        actions.append(
            PendingAction(
                kind=kind,
                entity_id=document.id,
                display_id=document.number,
                label=f"Approve {noun} {document.number}",
                priority=round(base + 0.1 * len(actions), 4),
            )
        )
    return actions


def resolve_pending_actions(logical_order, grns, invoices, context: RequestContext) -> list[PendingAction]:
    """Outstanding decisions on ``logical_order`` for the caller, most urgent first."""
    if not context.is_company_admin:
        return []

    actions = []
    awaiting = RequisitionStatus.PENDING_COMPANY_ADMIN_APPROVAL.value
    if logical_order.status == awaiting:
        # The slice that is actually waiting is the record an approval acts on
        waiting = next((order for order in logical_order.orders if order.status == awaiting), None)
        display_id = logical_order.requisition_number or logical_order.id
        actions.append(
            PendingAction(
                kind=ActionKind.ORDER,
                entity_id=waiting.id if waiting else logical_order.id,
                display_id=display_id,
                label=f"Approve requisition {display_id}",
                priority=ORDER_PRIORITY,
            )
        )
    actions.extend(_document_actions(ActionKind.GRN, GRN_BASE_PRIORITY, grns, "GRN"))
    actions.extend(_document_actions(ActionKind.INVOICE, INVOICE_BASE_PRIORITY, invoices, "invoice"))

    return sorted(actions, key=lambda action: (action.priority, _KIND_ORDER[action.kind]))
