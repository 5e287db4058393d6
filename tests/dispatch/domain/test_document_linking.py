"""Tests for attaching GRNs and invoices to logical orders."""

from dispatch.workflow.aggregation import OrderRecord, aggregate
from dispatch.workflow.linking import (
    ByOrderId,
    ByPoNumber,
    ByPrNumber,
    LinkedDocument,
    build_link_map,
    matchers_for,
)


def _logical_orders():
    return aggregate(
        [
            OrderRecord(id="c1", status="IN_SHIPMENT", requisition_number="PR-1A", parent_order_id="p1", po_numbers=("PO-9",)),
            OrderRecord(id="c2", status="IN_SHIPMENT", requisition_number="PR-1B", parent_order_id="p1"),
            OrderRecord(id="solo", status="COMPANY_ADMIN_APPROVED", requisition_number="PR-2"),
        ]
    )


def _doc(doc_id, **overrides):
    defaults = {"id": doc_id, "number": f"DOC-{doc_id}", "status": "RAISED"}
    defaults.update(overrides)
    return LinkedDocument(**defaults)


class TestMatchersFor:
    def test_matcher_order_is_pr_then_po_then_order(self):
        doc = _doc("d1", pr_numbers=("PR-1",), po_number="PO-1", order_id="o-1")
        assert matchers_for(doc) == [ByPrNumber("PR-1"), ByPoNumber("PO-1"), ByOrderId("o-1")]

    def test_no_links_no_matchers(self):
        assert matchers_for(_doc("d1")) == []

    def test_blank_pr_numbers_are_skipped(self):
        assert matchers_for(_doc("d1", pr_numbers=("", "PR-3"))) == [ByPrNumber("PR-3")]


class TestBuildLinkMap:
    def test_links_by_requisition_number(self):
        link_map = build_link_map(_logical_orders(), [_doc("g1", pr_numbers=("PR-2",))], [])
        assert [d.id for d in link_map["solo"].grns] == ["g1"]
        assert link_map["p1"].grns == ()

    def test_links_by_child_requisition_number(self):
        link_map = build_link_map(_logical_orders(), [_doc("g1", pr_numbers=("PR-1B",))], [])
        assert [d.id for d in link_map["p1"].grns] == ["g1"]

    def test_links_by_po_number(self):
        link_map = build_link_map(_logical_orders(), [], [_doc("i1", po_number="PO-9")])
        assert [d.id for d in link_map["p1"].invoices] == ["i1"]

    def test_links_by_child_order_id(self):
        link_map = build_link_map(_logical_orders(), [], [_doc("i1", order_id="c2")])
        assert [d.id for d in link_map["p1"].invoices] == ["i1"]

    def test_links_by_parent_order_id(self):
        link_map = build_link_map(_logical_orders(), [_doc("g1", order_id="p1")], [])
        assert [d.id for d in link_map["p1"].grns] == ["g1"]

    def test_document_matching_twice_is_linked_once(self):
        doc = _doc("g1", pr_numbers=("PR-1A",), po_number="PO-9", order_id="c1")
        link_map = build_link_map(_logical_orders(), [doc], [])
        assert [d.id for d in link_map["p1"].grns] == ["g1"]

    def test_unmatched_document_is_dropped(self):
        link_map = build_link_map(_logical_orders(), [_doc("g1", po_number="PO-404")], [])
        assert all(linked.grns == () for linked in link_map.values())

    def test_every_logical_order_has_an_entry(self):
        link_map = build_link_map(_logical_orders(), [], [])
        assert set(link_map) == {"p1", "solo"}
