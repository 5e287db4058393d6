"""Requisition workflow load test scenarios.

Stateful SequentialTaskSet journeys covering the approval chain, split
orders shown as one logical order, and the document pipeline that
attaches GRNs and invoices.
"""

import random
import uuid

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    caller_headers,
    company_id,
    po_number,
    requisition_data,
    vendor_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import RequisitionState, SplitOrderState


class ApprovalChainJourney(SequentialTaskSet):
    """Place -> Site Approve -> Company Approve -> Link PO -> Read back.

    The happy path through both approval steps, ending at LINKED_TO_PO.
    """

    def on_start(self):
        self.state = RequisitionState(company_id=company_id(), vendor_id=vendor_id())
        self.admin = caller_headers(self.state.company_id, "COMPANY_ADMIN")
        self.site_admin = caller_headers(self.state.company_id, "LOCATION_ADMIN")

    @task
    def place_requisition(self):
        payload = requisition_data(self.state.vendor_id, requires_site_approval=True)
        with self.client.post(
            "/requisitions",
            json=payload,
            headers=self.admin,
            catch_response=True,
            name="POST /requisitions",
        ) as resp:
            if resp.status_code == 201:
                self.state.requisition_id = resp.json()["id"]
                self.state.requisition_number = payload["requisition_number"]
                self.state.current_status = "PENDING_SITE_ADMIN_APPROVAL"
            else:
                resp.failure(f"Place requisition failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def site_approve(self):
        with self.client.put(
            f"/requisitions/{self.state.requisition_id}/approve",
            headers=self.site_admin,
            catch_response=True,
            name="PUT /requisitions/{id}/approve [site]",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "PENDING_COMPANY_ADMIN_APPROVAL"
            else:
                resp.failure(f"Site approval failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def company_approve(self):
        with self.client.put(
            f"/requisitions/{self.state.requisition_id}/approve",
            headers=self.admin,
            catch_response=True,
            name="PUT /requisitions/{id}/approve [company]",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "COMPANY_ADMIN_APPROVED"
            else:
                resp.failure(f"Company approval failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def link_po(self):
        with self.client.put(
            f"/requisitions/{self.state.requisition_id}/purchase-order",
            json={"po_number": po_number()},
            headers=self.admin,
            catch_response=True,
            name="PUT /requisitions/{id}/purchase-order",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "LINKED_TO_PO"
            else:
                resp.failure(f"Link PO failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def read_back(self):
        with self.client.get(
            f"/requisitions/{self.state.requisition_id}",
            headers=self.admin,
            catch_response=True,
            name="GET /requisitions/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Get requisition failed: {resp.status_code} — {extract_error_detail(resp)}")
            elif resp.json()["status"] != self.state.current_status:
                resp.failure(f"Expected {self.state.current_status}, got {resp.json()['status']}")
        self.interrupt()


class RejectionJourney(SequentialTaskSet):
    """Place -> Reject. Exercises the unhappy path of the approval chain."""

    def on_start(self):
        self.state = RequisitionState(company_id=company_id(), vendor_id=vendor_id())
        self.admin = caller_headers(self.state.company_id, "COMPANY_ADMIN")

    @task
    def place_requisition(self):
        with self.client.post(
            "/requisitions",
            json=requisition_data(self.state.vendor_id),
            headers=self.admin,
            catch_response=True,
            name="POST /requisitions",
        ) as resp:
            if resp.status_code == 201:
                self.state.requisition_id = resp.json()["id"]
            else:
                resp.failure(f"Place requisition failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def reject(self):
        with self.client.put(
            f"/requisitions/{self.state.requisition_id}/reject",
            json={"reason": random.choice(["Over budget", "Duplicate request", "Wrong vendor"])},
            headers=self.admin,
            catch_response=True,
            name="PUT /requisitions/{id}/reject",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Reject failed: {resp.status_code} — {extract_error_detail(resp)}")
        self.interrupt()


class SplitOrderJourney(SequentialTaskSet):
    """Place N vendor slices -> Approve one -> List logical orders -> Tab counts.

    Exercises the aggregation read path, which groups the slices into one
    logical order with a bottleneck status.
    """

    def on_start(self):
        self.state = SplitOrderState(
            company_id=company_id(),
            parent_order_id=f"ord-lt-{uuid.uuid4().hex[:8]}",
            vendor_ids=[vendor_id() for _ in range(random.randint(2, 4))],
        )
        self.admin = caller_headers(self.state.company_id, "COMPANY_ADMIN")

    @task
    def place_slices(self):
        for vendor in self.state.vendor_ids:
            payload = requisition_data(vendor, parent_order_id=self.state.parent_order_id)
            with self.client.post(
                "/requisitions",
                json=payload,
                headers=self.admin,
                catch_response=True,
                name="POST /requisitions [split]",
            ) as resp:
                if resp.status_code == 201:
                    self.state.requisition_ids.append(resp.json()["id"])
                else:
                    resp.failure(f"Place slice failed: {resp.status_code} — {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def approve_first_slice(self):
        self.client.put(
            f"/requisitions/{self.state.requisition_ids[0]}/approve",
            headers=self.admin,
            name="PUT /requisitions/{id}/approve [split]",
        )

    @task
    def list_logical_orders(self):
        with self.client.get(
            "/logical-orders",
            params={"tab": "pending_company_admin"},
            headers=self.admin,
            catch_response=True,
            name="GET /logical-orders?tab=pending_company_admin",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List failed: {resp.status_code} — {extract_error_detail(resp)}")
            elif not any(order["id"] == self.state.parent_order_id for order in resp.json()):
                resp.failure("Split order missing from the pending company admin tab")

    @task
    def tab_counts(self):
        self.client.get("/logical-orders/tab-counts", headers=self.admin, name="GET /logical-orders/tab-counts")
        self.interrupt()


class DocumentPipelineJourney(SequentialTaskSet):
    """Place -> Approve -> Link PO -> Raise GRN -> Raise Invoice -> Approve both."""

    def on_start(self):
        self.state = RequisitionState(company_id=company_id(), vendor_id=vendor_id())
        self.admin = caller_headers(self.state.company_id, "COMPANY_ADMIN")
        self.vendor = caller_headers(self.state.company_id, "VENDOR", self.state.vendor_id)
        self.po_number = po_number()
        self.grn_id = None
        self.invoice_id = None

    @task
    def place_and_approve(self):
        resp = self.client.post(
            "/requisitions",
            json=requisition_data(self.state.vendor_id),
            headers=self.admin,
            name="POST /requisitions [docs]",
        )
        if resp.status_code != 201:
            self.interrupt()
        self.state.requisition_id = resp.json()["id"]
        self.client.put(
            f"/requisitions/{self.state.requisition_id}/approve",
            headers=self.admin,
            name="PUT /requisitions/{id}/approve [docs]",
        )
        self.client.put(
            f"/requisitions/{self.state.requisition_id}/purchase-order",
            json={"po_number": self.po_number},
            headers=self.admin,
            name="PUT /requisitions/{id}/purchase-order [docs]",
        )

    @task
    def raise_grn(self):
        with self.client.post(
            "/grns",
            json={"grn_number": f"GRN-{uuid.uuid4().hex[:8].upper()}", "po_number": self.po_number},
            headers=self.vendor,
            catch_response=True,
            name="POST /grns",
        ) as resp:
            if resp.status_code == 201:
                self.grn_id = resp.json()["id"]
            else:
                resp.failure(f"Raise GRN failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def raise_invoice(self):
        with self.client.post(
            "/invoices",
            json={
                "invoice_number": f"INV-{uuid.uuid4().hex[:8].upper()}",
                "amount": round(random.uniform(500.0, 50000.0), 2),
                "po_number": self.po_number,
            },
            headers=self.vendor,
            catch_response=True,
            name="POST /invoices",
        ) as resp:
            if resp.status_code == 201:
                self.invoice_id = resp.json()["id"]
            else:
                resp.failure(f"Raise invoice failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def approve_documents(self):
        if self.grn_id:
            self.client.put(
                f"/grns/{self.grn_id}/decision",
                json={"approve": True},
                headers=self.admin,
                name="PUT /grns/{id}/decision",
            )
        if self.invoice_id:
            self.client.put(
                f"/invoices/{self.invoice_id}/decision",
                json={"approve": True},
                headers=self.admin,
                name="PUT /invoices/{id}/decision",
            )
        self.interrupt()


class RequisitionUser(HttpUser):
    """Simulates company and vendor users driving the requisition workflow."""

    wait_time = between(1.0, 3.0)
    tasks = {
        ApprovalChainJourney: 5,
        RejectionJourney: 1,
        SplitOrderJourney: 3,
        DocumentPipelineJourney: 2,
    }
