"""Integration tests for the logical order listing endpoints."""

import pytest
from dispatch.api import ROUTERS, register_error_handlers
from fastapi import FastAPI
from fastapi.testclient import TestClient

ADMIN = {"X-Company-Id": "comp-1", "X-Caller-Role": "COMPANY_ADMIN"}


@pytest.fixture()
def client():
    app = FastAPI()
    for router in ROUTERS:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


def _place(client, number, vendor_id, parent=None, **overrides):
    payload = {
        "requisition_number": number,
        "vendor_id": vendor_id,
        "vendor_name": f"Vendor {vendor_id}",
        "parent_order_id": parent,
        "items": [{"product_id": f"prod-{number}", "quantity": 1, "price": 250.0}],
        "requires_site_approval": False,
    }
    payload.update(overrides)
    return client.post("/requisitions", json=payload, headers=ADMIN).json()["id"]


class TestLogicalOrdersAPI:
    def test_split_order_listed_once_with_pending_action(self, client):
        first = _place(client, "PR-9A", "ven-1", parent="parent-9")
        _place(client, "PR-9B", "ven-2", parent="parent-9")
        client.put(f"/requisitions/{first}/approve", headers=ADMIN)

        response = client.get("/logical-orders", headers=ADMIN)
        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        order = body[0]
        assert order["id"] == "parent-9"
        assert order["is_split"] is True
        assert order["status"] == "PENDING_COMPANY_ADMIN_APPROVAL"
        assert order["total"] == 500.0
        assert len(order["orders"]) == 2
        assert order["pending_actions"][0]["kind"] == "ORDER"
        assert order["pending_actions"][0]["priority"] == 1

    def test_vendor_listing_has_no_actions(self, client):
        _place(client, "PR-1", "ven-1")
        vendor = {"X-Company-Id": "comp-1", "X-Caller-Role": "VENDOR", "X-Vendor-Id": "ven-1"}
        body = client.get("/logical-orders", headers=vendor).json()
        assert len(body) == 1
        assert body[0]["pending_actions"] == []

    def test_tab_filter(self, client):
        _place(client, "PR-1", "ven-1")
        assert client.get("/logical-orders?tab=delivered", headers=ADMIN).json() == []
        assert len(client.get("/logical-orders?tab=pending_company_admin", headers=ADMIN).json()) == 1

    def test_unknown_tab_is_400(self, client):
        assert client.get("/logical-orders?tab=archived", headers=ADMIN).status_code == 400

    def test_search(self, client):
        _place(client, "PR-ALPHA", "ven-1")
        _place(client, "PR-BETA", "ven-1")
        body = client.get("/logical-orders?search=alpha", headers=ADMIN).json()
        assert [o["requisition_number"] for o in body] == ["PR-ALPHA"]

    def test_tab_counts(self, client):
        _place(client, "PR-1", "ven-1")
        counts = client.get("/logical-orders/tab-counts", headers=ADMIN).json()["counts"]
        assert counts["all"] == 1
        assert counts["pending_company_admin"] == 1
