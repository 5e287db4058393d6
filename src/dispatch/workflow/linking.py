"""Document linking — attach GRNs and invoices to logical orders.

A document reaches an order through one of three keys. Each key is a
matcher type; a document yields its matchers in a fixed order (requisition
number, then PO number, then order id) and every logical order any matcher
hits receives the document once. The result is built once per read as
``{logical order id: LinkedDocuments}``.
"""

from collections import defaultdict
from dataclasses import dataclass


@dataclass(frozen=True)
class LinkedDocument:
    """Read-side snapshot of a GRN or invoice."""

    id: str
    number: str
    status: str
    po_number: str | None = None
    pr_numbers: tuple[str, ...] = ()
    order_id: str | None = None

    @classmethod
    def from_grn(cls, grn) -> "LinkedDocument":
        return cls(
            id=str(grn.id),
            number=grn.grn_number,
            status=grn.status,
            po_number=grn.po_number,
            pr_numbers=tuple(grn.pr_number_list),
            order_id=str(grn.order_id) if grn.order_id else None,
        )

    @classmethod
    def from_invoice(cls, invoice) -> "LinkedDocument":
        return cls(
            id=str(invoice.id),
            number=invoice.invoice_number,
            status=invoice.status,
            po_number=invoice.po_number,
            pr_numbers=tuple(invoice.pr_number_list),
            order_id=str(invoice.order_id) if invoice.order_id else None,
        )


@dataclass(frozen=True)
class ByPrNumber:
    pr_number: str


@dataclass(frozen=True)
class ByPoNumber:
    po_number: str


@dataclass(frozen=True)
class ByOrderId:
    order_id: str


LinkMatcher = ByPrNumber | ByPoNumber | ByOrderId


@dataclass(frozen=True)
class LinkedDocuments:
    grns: tuple[LinkedDocument, ...] = ()
    invoices: tuple[LinkedDocument, ...] = ()


def matchers_for(document: LinkedDocument) -> list[LinkMatcher]:
    matchers: list[LinkMatcher] = [ByPrNumber(number) for number in document.pr_numbers if number]
    if document.po_number:
        matchers.append(ByPoNumber(document.po_number))
    if document.order_id:
        matchers.append(ByOrderId(document.order_id))
    return matchers


class _OrderIndex:
    """Lookup from each link key to the logical orders it reaches."""

    def __init__(self, logical_orders):
        self.by_pr_number = defaultdict(list)
        self.by_po_number = defaultdict(list)
        self.by_order_id = defaultdict(list)
        for logical_order in logical_orders:
            for number in logical_order.requisition_numbers:
                self.by_pr_number[number].append(logical_order.id)
            for po_number in logical_order.po_numbers:
                self.by_po_number[po_number].append(logical_order.id)
            for member_id in logical_order.member_ids:
                self.by_order_id[member_id].append(logical_order.id)

    def resolve(self, matcher: LinkMatcher) -> list[str]:
        if isinstance(matcher, ByPrNumber):
            return self.by_pr_number.get(matcher.pr_number, [])
        if isinstance(matcher, ByPoNumber):
            return self.by_po_number.get(matcher.po_number, [])
        if isinstance(matcher, ByOrderId):
            return self.by_order_id.get(matcher.order_id, [])
        return []


def _link(index: _OrderIndex, documents) -> dict[str, list[LinkedDocument]]:
    linked: dict[str, list[LinkedDocument]] = defaultdict(list)
    seen: dict[str, set[str]] = defaultdict(set)
    for document in documents:
        for matcher in matchers_for(document):
            for logical_id in index.resolve(matcher):
                if document.id not in seen[logical_id]:
                    seen[logical_id].add(document.id)
                    linked[logical_id].append(document)
    return linked


def build_link_map(logical_orders, grns, invoices) -> dict[str, LinkedDocuments]:
    """Map every logical order id to the documents linked to it (each at most once)."""
    logical_orders = list(logical_orders)
    index = _OrderIndex(logical_orders)
    linked_grns = _link(index, grns)
    linked_invoices = _link(index, invoices)
    return {
        logical_order.id: LinkedDocuments(
            grns=tuple(linked_grns.get(logical_order.id, ())),
            invoices=tuple(linked_invoices.get(logical_order.id, ())),
        )
        for logical_order in logical_orders
    }
