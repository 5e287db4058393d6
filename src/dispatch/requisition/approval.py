"""Requisition approval, rejection and PO linking — commands and handler.

Approval rights are decided by the caller role carried on the command:
location admins clear the site step, company admins the company step.
Any other role is refused outright.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from dispatch.domain import dispatch
from dispatch.errors import AccessDeniedError
from dispatch.requisition.requisition import Requisition
from dispatch.workflow.context import CallerRole


def _load_for_company(repo, requisition_id: str, company_id: str) -> Requisition:
    req = repo.get(requisition_id)
    if str(req.company_id) != str(company_id):
        raise AccessDeniedError("Requisition does not belong to the caller's company")
    return req


@dispatch.command(part_of="Requisition")
class ApproveRequisition:
    requisition_id = Identifier(required=True)
    company_id = Identifier(required=True)
    caller_role = String(required=True, choices=CallerRole)


@dispatch.command(part_of="Requisition")
class RejectRequisition:
    requisition_id = Identifier(required=True)
    company_id = Identifier(required=True)
    caller_role = String(required=True, choices=CallerRole)
    reason = String(max_length=500)


@dispatch.command(part_of="Requisition")
class LinkPurchaseOrder:
    """Link a purchase order to a company-approved requisition."""

    requisition_id = Identifier(required=True)
    company_id = Identifier(required=True)
    caller_role = String(required=True, choices=CallerRole)
    po_number = String(required=True, max_length=50)


@dispatch.command_handler(part_of=Requisition)
class RequisitionApprovalHandler:
    @handle(ApproveRequisition)
    def approve(self, command):
        repo = current_domain.repository_for(Requisition)
        req = _load_for_company(repo, command.requisition_id, command.company_id)
        req.approve(CallerRole(command.caller_role))
        repo.add(req)

    @handle(RejectRequisition)
    def reject(self, command):
        repo = current_domain.repository_for(Requisition)
        req = _load_for_company(repo, command.requisition_id, command.company_id)
        req.reject(CallerRole(command.caller_role), command.reason)
        repo.add(req)

    @handle(LinkPurchaseOrder)
    def link_purchase_order(self, command):
        if CallerRole(command.caller_role) != CallerRole.COMPANY_ADMIN:
            raise AccessDeniedError("Only a company admin can link purchase orders")
        repo = current_domain.repository_for(Requisition)
        req = _load_for_company(repo, command.requisition_id, command.company_id)
        req.link_purchase_order(command.po_number)
        repo.add(req)
