"""Raising and deciding GRNs and invoices — commands and handlers.

Vendors (and company admins) raise documents; only a company admin may
approve or reject them.
"""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from dispatch.documents.document import DocumentStatus, GoodsReceiptNote, VendorInvoice
from dispatch.domain import dispatch
from dispatch.errors import AccessDeniedError
from dispatch.workflow.context import CallerRole


def _require_company_admin(caller_role: str) -> None:
    if CallerRole(caller_role) != CallerRole.COMPANY_ADMIN:
        raise AccessDeniedError("Only a company admin can approve or reject documents")


def _load_for_company(repo, document_id: str, company_id: str):
    document = repo.get(document_id)
    if str(document.company_id) != str(company_id):
        raise AccessDeniedError("Document does not belong to the caller's company")
    return document


def _pr_numbers(raw) -> list[str]:
    if not raw:
        return []
    return json.loads(raw) if isinstance(raw, str) else list(raw)


@dispatch.command(part_of="GoodsReceiptNote")
class RaiseGrn:
    grn_number = String(required=True, max_length=50)
    company_id = Identifier(required=True)
    vendor_id = Identifier()
    po_number = String(max_length=50)
    pr_numbers = Text()  # JSON list of requisition numbers
    order_id = Identifier()
    status = String(choices=DocumentStatus, default=DocumentStatus.RAISED.value)


@dispatch.command(part_of="GoodsReceiptNote")
class DecideGrn:
    grn_id = Identifier(required=True)
    company_id = Identifier(required=True)
    caller_role = String(required=True, choices=CallerRole)
    approve = Boolean(required=True)
    reason = String(max_length=500)


@dispatch.command(part_of="VendorInvoice")
class RaiseInvoice:
    invoice_number = String(required=True, max_length=50)
    company_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    amount = Float(required=True, min_value=0.0)
    po_number = String(max_length=50)
    pr_numbers = Text()  # JSON list of requisition numbers
    order_id = Identifier()
    status = String(choices=DocumentStatus, default=DocumentStatus.RAISED.value)


@dispatch.command(part_of="VendorInvoice")
class DecideInvoice:
    invoice_id = Identifier(required=True)
    company_id = Identifier(required=True)
    caller_role = String(required=True, choices=CallerRole)
    approve = Boolean(required=True)
    reason = String(max_length=500)


@dispatch.command_handler(part_of=GoodsReceiptNote)
class GrnHandler:
    @handle(RaiseGrn)
    def raise_grn(self, command):
        grn = GoodsReceiptNote.raise_note(
            grn_number=command.grn_number,
            company_id=command.company_id,
            vendor_id=command.vendor_id,
            po_number=command.po_number,
            pr_numbers=_pr_numbers(command.pr_numbers),
            order_id=command.order_id,
            status=command.status,
        )
        current_domain.repository_for(GoodsReceiptNote).add(grn)
        return str(grn.id)

    @handle(DecideGrn)
    def decide_grn(self, command):
        _require_company_admin(command.caller_role)
        repo = current_domain.repository_for(GoodsReceiptNote)
        grn = _load_for_company(repo, command.grn_id, command.company_id)
        grn.decide(command.approve, command.reason)
        repo.add(grn)


@dispatch.command_handler(part_of=VendorInvoice)
class InvoiceHandler:
    @handle(RaiseInvoice)
    def raise_invoice(self, command):
        invoice = VendorInvoice.raise_invoice(
            invoice_number=command.invoice_number,
            company_id=command.company_id,
            vendor_id=command.vendor_id,
            amount=command.amount,
            po_number=command.po_number,
            pr_numbers=_pr_numbers(command.pr_numbers),
            order_id=command.order_id,
            status=command.status,
        )
        current_domain.repository_for(VendorInvoice).add(invoice)
        return str(invoice.id)

    @handle(DecideInvoice)
    def decide_invoice(self, command):
        _require_company_admin(command.caller_role)
        repo = current_domain.repository_for(VendorInvoice)
        invoice = _load_for_company(repo, command.invoice_id, command.company_id)
        invoice.decide(command.approve, command.reason)
        repo.add(invoice)
