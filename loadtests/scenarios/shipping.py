"""Shipment load test scenarios.

Journeys covering manual shipment entry, aggregator-booked shipments with
courier fallback, and status sync. Automatic journeys assume the server
runs with the fake aggregator (AGGREGATOR_ADAPTER=fake).
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    COURIERS,
    automatic_shipment_data,
    caller_headers,
    company_id,
    manual_shipment_data,
    requisition_data,
    routing_data,
    vendor_id,
    warehouse_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShipmentState


def _approved_requisition(client, state, admin) -> None:
    with client.post(
        "/requisitions",
        json=requisition_data(state.vendor_id),
        headers=admin,
        catch_response=True,
        name="POST /requisitions [ship]",
    ) as resp:
        if resp.status_code != 201:
            resp.failure(f"Place requisition failed: {resp.status_code} — {extract_error_detail(resp)}")
            return
        state.requisition_id = resp.json()["id"]
    client.put(
        f"/requisitions/{state.requisition_id}/approve",
        headers=admin,
        name="PUT /requisitions/{id}/approve [ship]",
    )


class ManualShipmentJourney(SequentialTaskSet):
    """Approved requisition -> Manual shipment -> Deliver -> Read back."""

    def on_start(self):
        self.state = ShipmentState(company_id=company_id(), vendor_id=vendor_id())
        self.admin = caller_headers(self.state.company_id, "COMPANY_ADMIN")
        self.vendor = caller_headers(self.state.company_id, "VENDOR", self.state.vendor_id)

    @task
    def prepare(self):
        _approved_requisition(self.client, self.state, self.admin)
        if self.state.requisition_id is None:
            self.interrupt()

    @task
    def create_manual_shipment(self):
        with self.client.post(
            "/shipments",
            json=manual_shipment_data(self.state.requisition_id),
            headers=self.vendor,
            catch_response=True,
            name="POST /shipments [manual]",
        ) as resp:
            if resp.status_code == 201:
                self.state.shipment_id = resp.json()["id"]
                self.state.current_status = resp.json()["status"]
            else:
                resp.failure(f"Manual shipment failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def duplicate_is_rejected(self):
        with self.client.post(
            "/shipments",
            json=manual_shipment_data(self.state.requisition_id),
            headers=self.vendor,
            catch_response=True,
            name="POST /shipments [duplicate]",
        ) as resp:
            if resp.status_code == 409:
                resp.success()
            else:
                resp.failure(f"Expected 409 for a duplicate shipment, got {resp.status_code}")

    @task
    def deliver(self):
        with self.client.put(
            f"/shipments/{self.state.shipment_id}/status",
            json={"status": "DELIVERED"},
            headers=self.vendor,
            catch_response=True,
            name="PUT /shipments/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "DELIVERED"
            else:
                resp.failure(f"Deliver failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def read_back(self):
        self.client.get(f"/shipments/{self.state.shipment_id}", headers=self.vendor, name="GET /shipments/{id}")
        self.interrupt()


class AutomaticShipmentJourney(SequentialTaskSet):
    """Configure routing -> Estimate -> Book via aggregator -> Sync.

    Each journey uses a fresh company and vendor so routing writes never
    contend. The system-wide integration switch is turned on once per
    journey; it is idempotent.
    """

    def on_start(self):
        self.state = ShipmentState(company_id=company_id(), vendor_id=vendor_id())
        self.admin = caller_headers(self.state.company_id, "COMPANY_ADMIN")
        self.super_admin = caller_headers(self.state.company_id, "SUPER_ADMIN")
        self.vendor = caller_headers(self.state.company_id, "VENDOR", self.state.vendor_id)

    @task
    def configure_shipping(self):
        self.client.put(
            "/shipping/integration",
            json={"enabled": True},
            headers=self.super_admin,
            name="PUT /shipping/integration",
        )
        self.client.put(
            "/shipping/mode",
            json={"shipment_mode": "AUTOMATIC"},
            headers=self.admin,
            name="PUT /shipping/mode",
        )
        self.client.put(
            "/shipping/routings",
            json=routing_data(self.state.vendor_id),
            headers=self.admin,
            name="PUT /shipping/routings",
        )
        with self.client.post(
            "/shipping/warehouses",
            json=warehouse_data(),
            headers=self.vendor,
            catch_response=True,
            name="POST /shipping/warehouses",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Register warehouse failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def prepare(self):
        _approved_requisition(self.client, self.state, self.admin)
        if self.state.requisition_id is None:
            self.interrupt()

    @task
    def estimate(self):
        with self.client.post(
            "/shipping/estimate",
            json={"destination_pincode": "560001", "length_cm": 40, "breadth_cm": 30, "height_cm": 20},
            headers=self.vendor,
            catch_response=True,
            name="POST /shipping/estimate",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Estimate failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def book_shipment(self):
        with self.client.post(
            "/shipments",
            json=automatic_shipment_data(self.state.requisition_id),
            headers=self.vendor,
            catch_response=True,
            name="POST /shipments [automatic]",
        ) as resp:
            if resp.status_code == 201:
                self.state.shipment_id = resp.json()["id"]
                self.state.awb_number = resp.json()["awb_number"]
            elif resp.status_code in (422, 502):
                # Unserviceable routes and aggregator outages are expected outcomes
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Automatic shipment failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def sync(self):
        with self.client.put(
            f"/shipments/{self.state.shipment_id}/sync",
            headers=self.vendor,
            catch_response=True,
            name="PUT /shipments/{id}/sync",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = resp.json()["status"]
            elif resp.status_code == 502:
                resp.success()
            else:
                resp.failure(f"Sync failed: {resp.status_code} — {extract_error_detail(resp)}")
        self.interrupt()


class ShippingContextReader(HttpUser):
    """Read-heavy traffic against the shipping context endpoint.

    Vendors without any configuration resolve to manual mode; this keeps
    the read path warm without writing anything.
    """

    wait_time = between(0.5, 2.0)

    def on_start(self):
        self.headers = caller_headers(company_id(), "VENDOR", vendor_id())

    @task
    def shipping_context(self):
        self.client.get(
            "/shipping/context",
            params={"destination_pincode": random.choice(["110001", "400001", "560001", "600001"])},
            headers=self.headers,
            name="GET /shipping/context",
        )


class ShipmentUser(HttpUser):
    """Simulates vendors dispatching approved requisitions."""

    wait_time = between(1.0, 3.0)
    tasks = {
        ManualShipmentJourney: 3,
        AutomaticShipmentJourney: 2,
    }


class AggregatorOutageUser(HttpUser):
    """Flips fake-aggregator couriers unserviceable and back during a run.

    Drives the fallback-to-secondary and fallback-to-manual paths while
    other users book shipments.
    """

    wait_time = between(5.0, 10.0)

    @task
    def flip_couriers(self):
        unserviceable = random.sample(COURIERS, random.randint(0, 2))
        self.client.post(
            "/shipping/aggregator/configure",
            json={"should_succeed": random.random() > 0.1, "unserviceable_couriers": unserviceable},
            name="POST /shipping/aggregator/configure",
        )
