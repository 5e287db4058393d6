"""Goods receipt notes and vendor invoices.

Both documents link to requisitions through any of three keys: a PO
number, a list of requisition numbers, or a direct order id. Each waits on
a company admin until it is approved or rejected.

State Machine (both):
    RAISED → PENDING_APPROVAL → {APPROVED, REJECTED}
    RAISED → {APPROVED, REJECTED}
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from dispatch.documents.events import GrnDecided, GrnRaised, InvoiceDecided, InvoiceRaised
from dispatch.domain import dispatch


class DocumentStatus(Enum):
    RAISED = "RAISED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Documents in these statuses still need a company admin's decision
AWAITING_DECISION = frozenset({DocumentStatus.RAISED.value, DocumentStatus.PENDING_APPROVAL.value})

_VALID_TRANSITIONS = {
    DocumentStatus.RAISED: {DocumentStatus.PENDING_APPROVAL, DocumentStatus.APPROVED, DocumentStatus.REJECTED},
    DocumentStatus.PENDING_APPROVAL: {DocumentStatus.APPROVED, DocumentStatus.REJECTED},
    DocumentStatus.APPROVED: set(),  # terminal
    DocumentStatus.REJECTED: set(),  # terminal
}

_INITIAL_STATUSES = {DocumentStatus.RAISED.value, DocumentStatus.PENDING_APPROVAL.value}


def _check_links(po_number, pr_numbers, order_id) -> None:
    if not (po_number or pr_numbers or order_id):
        raise ValidationError({"links": ["A PO number, requisition number or order id is required"]})


def _check_initial_status(status: str) -> None:
    if status not in _INITIAL_STATUSES:
        raise ValidationError({"status": [f"A document cannot be raised in status {status}"]})


def _assert_can_transition(current_value: str, target: DocumentStatus) -> None:
    current = DocumentStatus(current_value)
    if target not in _VALID_TRANSITIONS.get(current, set()):
        raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})


@dispatch.aggregate
class GoodsReceiptNote:
    grn_number = String(required=True, max_length=50)
    company_id = Identifier(required=True)
    vendor_id = Identifier()
    po_number = String(max_length=50)
    pr_numbers = Text()  # JSON list of requisition numbers
    order_id = Identifier()
    status = String(choices=DocumentStatus, default=DocumentStatus.RAISED.value)
    decision_reason = String(max_length=500)
    raised_at = DateTime()
    decided_at = DateTime()

    @classmethod
    def raise_note(
        cls,
        grn_number: str,
        company_id: str,
        vendor_id: str | None = None,
        po_number: str | None = None,
        pr_numbers: list[str] | None = None,
        order_id: str | None = None,
        status: str = DocumentStatus.RAISED.value,
    ):
        _check_links(po_number, pr_numbers, order_id)
        _check_initial_status(status)
        now = datetime.now(UTC)
        grn = cls(
            grn_number=grn_number,
            company_id=company_id,
            vendor_id=vendor_id,
            po_number=po_number,
            pr_numbers=json.dumps(pr_numbers or []),
            order_id=order_id,
            status=status,
            raised_at=now,
        )
        grn.raise_(
            GrnRaised(
                grn_id=str(grn.id),
                grn_number=grn_number,
                company_id=company_id,
                po_number=po_number,
                order_id=order_id,
                raised_at=now,
            )
        )
        return grn

    @property
    def pr_number_list(self) -> list[str]:
        return json.loads(self.pr_numbers) if self.pr_numbers else []

    def decide(self, approve: bool, reason: str | None = None) -> None:
        target = DocumentStatus.APPROVED if approve else DocumentStatus.REJECTED
        _assert_can_transition(self.status, target)
        now = datetime.now(UTC)
        self.status = target.value
        self.decision_reason = reason
        self.decided_at = now
        self.raise_(GrnDecided(grn_id=str(self.id), status=target.value, reason=reason, decided_at=now))


@dispatch.aggregate
class VendorInvoice:
    invoice_number = String(required=True, max_length=50)
    company_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    amount = Float(default=0.0, min_value=0.0)
    po_number = String(max_length=50)
    pr_numbers = Text()  # JSON list of requisition numbers
    order_id = Identifier()
    status = String(choices=DocumentStatus, default=DocumentStatus.RAISED.value)
    decision_reason = String(max_length=500)
    raised_at = DateTime()
    decided_at = DateTime()

    @classmethod
    def raise_invoice(
        cls,
        invoice_number: str,
        company_id: str,
        vendor_id: str,
        amount: float,
        po_number: str | None = None,
        pr_numbers: list[str] | None = None,
        order_id: str | None = None,
        status: str = DocumentStatus.RAISED.value,
    ):
        _check_links(po_number, pr_numbers, order_id)
        _check_initial_status(status)
        now = datetime.now(UTC)
        invoice = cls(
            invoice_number=invoice_number,
            company_id=company_id,
            vendor_id=vendor_id,
            amount=amount,
            po_number=po_number,
            pr_numbers=json.dumps(pr_numbers or []),
            order_id=order_id,
            status=status,
            raised_at=now,
        )
        invoice.raise_(
            InvoiceRaised(
                invoice_id=str(invoice.id),
                invoice_number=invoice_number,
                company_id=company_id,
                vendor_id=vendor_id,
                amount=amount,
                po_number=po_number,
                order_id=order_id,
                raised_at=now,
            )
        )
        return invoice

    @property
    def pr_number_list(self) -> list[str]:
        return json.loads(self.pr_numbers) if self.pr_numbers else []

    def decide(self, approve: bool, reason: str | None = None) -> None:
        target = DocumentStatus.APPROVED if approve else DocumentStatus.REJECTED
        _assert_can_transition(self.status, target)
        now = datetime.now(UTC)
        self.status = target.value
        self.decision_reason = reason
        self.decided_at = now
        self.raise_(InvoiceDecided(invoice_id=str(self.id), status=target.value, reason=reason, decided_at=now))
