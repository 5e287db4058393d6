"""Tests for resolving the outstanding decisions on a logical order."""

from dispatch.workflow.aggregation import OrderRecord, aggregate
from dispatch.workflow.context import CallerRole, RequestContext
from dispatch.workflow.linking import LinkedDocument
from dispatch.workflow.pending_actions import ActionKind, resolve_pending_actions

ADMIN = RequestContext(company_id="comp-1", role=CallerRole.COMPANY_ADMIN)


def _logical(status="PENDING_COMPANY_ADMIN_APPROVAL"):
    return aggregate([OrderRecord(id="o1", status=status, requisition_number="PR-1")])[0]


def _doc(doc_id, status="RAISED"):
    return LinkedDocument(id=doc_id, number=f"N-{doc_id}", status=status)


class TestOrderAction:
    def test_awaiting_company_admin_yields_order_action(self):
        actions = resolve_pending_actions(_logical(), [], [], ADMIN)
        assert len(actions) == 1
        assert actions[0].kind == ActionKind.ORDER
        assert actions[0].priority == 1
        assert actions[0].display_id == "PR-1"

    def test_no_order_action_once_approved(self):
        assert resolve_pending_actions(_logical("COMPANY_ADMIN_APPROVED"), [], [], ADMIN) == []

    def test_order_action_targets_waiting_child(self):
        logical = aggregate(
            [
                OrderRecord(id="c1", status="IN_SHIPMENT", parent_order_id="p"),
                OrderRecord(id="c2", status="PENDING_COMPANY_ADMIN_APPROVAL", parent_order_id="p"),
            ]
        )[0]
        actions = resolve_pending_actions(logical, [], [], ADMIN)
        assert actions[0].entity_id == "c2"


class TestDocumentActions:
    def test_grn_priorities_step_by_tenth(self):
        actions = resolve_pending_actions(_logical("IN_SHIPMENT"), [_doc("g1"), _doc("g2")], [], ADMIN)
        assert [a.priority for a in actions] == [2, 2.1]

    def test_decided_documents_are_ignored(self):
        grns = [_doc("g1", status="APPROVED"), _doc("g2", status="PENDING_APPROVAL")]
        actions = resolve_pending_actions(_logical("IN_SHIPMENT"), grns, [], ADMIN)
        assert [a.entity_id for a in actions] == ["g2"]
        assert actions[0].priority == 2

    def test_duplicate_documents_counted_once(self):
        actions = resolve_pending_actions(_logical("IN_SHIPMENT"), [_doc("g1"), _doc("g1")], [], ADMIN)
        assert len(actions) == 1

    def test_sorted_order_then_grn_then_invoice(self):
        actions = resolve_pending_actions(_logical(), [_doc("g1")], [_doc("i1")], ADMIN)
        assert [a.kind for a in actions] == [ActionKind.ORDER, ActionKind.GRN, ActionKind.INVOICE]
        assert [a.priority for a in actions] == [1, 2, 3]

    def test_order_with_two_grns_and_an_invoice(self):
        actions = resolve_pending_actions(_logical(), [_doc("g1"), _doc("g2")], [_doc("i1")], ADMIN)
        assert [a.priority for a in actions] == [1, 2.0, 2.1, 3.0]
        assert [a.kind for a in actions] == [ActionKind.ORDER, ActionKind.GRN, ActionKind.GRN, ActionKind.INVOICE]
        assert [a.entity_id for a in actions][1:] == ["g1", "g2", "i1"]

    def test_labels_name_the_document(self):
        actions = resolve_pending_actions(_logical("IN_SHIPMENT"), [], [_doc("i1")], ADMIN)
        assert actions[0].label == "Approve invoice N-i1"


class TestCallerRole:
    def test_non_admin_gets_nothing(self):
        for role in (CallerRole.VENDOR, CallerRole.LOCATION_ADMIN, CallerRole.EMPLOYEE, CallerRole.SUPER_ADMIN):
            context = RequestContext(company_id="comp-1", role=role, vendor_id="ven-1")
            assert resolve_pending_actions(_logical(), [_doc("g1")], [_doc("i1")], context) == []

    def test_to_dict_uses_plain_values(self):
        action = resolve_pending_actions(_logical(), [], [], ADMIN)[0]
        assert action.to_dict()["kind"] == "ORDER"
