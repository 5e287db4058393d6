"""Logical order listing — the read path behind the orders screen.

Loads a company's requisitions and documents, folds them into logical
orders, attaches each order's pending actions for the caller, then applies
the status tab, status, location and search filters.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from dispatch.documents.document import GoodsReceiptNote, VendorInvoice
from dispatch.errors import AccessDeniedError
from dispatch.requisition.requisition import Requisition
from dispatch.requisition.status import ALL_TAB, STATUS_TABS, statuses_for_tab
from dispatch.utils.logging import get_logger
from dispatch.workflow.aggregation import LogicalOrder, OrderRecord, aggregate
from dispatch.workflow.context import CallerRole, RequestContext
from dispatch.workflow.linking import LinkedDocument, LinkedDocuments, build_link_map
from dispatch.workflow.pending_actions import resolve_pending_actions

logger = get_logger(__name__)


@dataclass(frozen=True)
class ListingFilter:
    tab: str = ALL_TAB
    status: str | None = None
    location: str | None = None
    search: str | None = None


def _load_requisitions(context: RequestContext) -> list[Requisition]:
    repo = current_domain.repository_for(Requisition)
    if context.role == CallerRole.VENDOR:
        if not context.vendor_id:
            raise AccessDeniedError("Vendor callers must identify their vendor")
        return repo.for_vendor(context.company_id, context.vendor_id)
    return repo.for_company(context.company_id)


def build_logical_orders(context: RequestContext) -> list[LogicalOrder]:
    """Every logical order visible to the caller, newest first, with pending actions."""
    records = [OrderRecord.from_requisition(req) for req in _load_requisitions(context)]
    logical_orders = aggregate(records)

    grns = [LinkedDocument.from_grn(g) for g in current_domain.repository_for(GoodsReceiptNote).for_company(context.company_id)]
    invoices = [
        LinkedDocument.from_invoice(i) for i in current_domain.repository_for(VendorInvoice).for_company(context.company_id)
    ]
    link_map = build_link_map(logical_orders, grns, invoices)

    result = []
    for logical_order in logical_orders:
        linked = link_map.get(logical_order.id, LinkedDocuments())
        actions = resolve_pending_actions(logical_order, linked.grns, linked.invoices, context)
        result.append(logical_order.with_pending_actions(actions))
    return result


def _matches_search(logical_order: LogicalOrder, term: str) -> bool:
    term = term.strip().lower()
    if not term:
        return True
    haystack = [
        logical_order.id,
        logical_order.employee_name,
        logical_order.requisition_number,
        *logical_order.requisition_numbers,
        *logical_order.po_numbers,
        *(order.id for order in logical_order.orders),
        *(order.vendor_name for order in logical_order.orders),
    ]
    return any(term in value.lower() for value in haystack if value)


def _matches_location(logical_order: LogicalOrder, location: str) -> bool:
    return (logical_order.dispatch_location or "").lower() == location.strip().lower()


def _narrow(logical_orders, location: str | None, search: str | None) -> list[LogicalOrder]:
    if location:
        logical_orders = [lo for lo in logical_orders if _matches_location(lo, location)]
    if search:
        logical_orders = [lo for lo in logical_orders if _matches_search(lo, search)]
    return list(logical_orders)


def _tab_statuses(tab: str) -> set[str] | None:
    try:
        return statuses_for_tab(tab)
    except ValueError as exc:
        raise ValidationError({"tab": [str(exc)]}) from exc


def list_logical_orders(context: RequestContext, filters: ListingFilter | None = None) -> list[LogicalOrder]:
    filters = filters or ListingFilter()
    allowed = _tab_statuses(filters.tab)
    logical_orders = _narrow(build_logical_orders(context), filters.location, filters.search)
    if allowed is not None:
        logical_orders = [lo for lo in logical_orders if lo.status in allowed]
    if filters.status:
        logical_orders = [lo for lo in logical_orders if lo.status == filters.status]

    logger.debug(
        "Listed logical orders",
        company_id=context.company_id,
        role=context.role.value,
        tab=filters.tab,
        count=len(logical_orders),
    )
    return logical_orders


def count_by_tab(context: RequestContext, location: str | None = None, search: str | None = None) -> dict[str, int]:
    """Number of logical orders under each status tab (plus ``all``)."""
    logical_orders = _narrow(build_logical_orders(context), location, search)
    counts = {ALL_TAB: len(logical_orders)}
    for tab in STATUS_TABS:
        allowed = statuses_for_tab(tab)
        counts[tab] = sum(1 for lo in logical_orders if lo.status in allowed)
    return counts
