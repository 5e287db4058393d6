"""Dispatch Load Testing — Locust entry point.

Discovers all user classes from the scenarios package.
Run specific scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Mixed workload only:
    locust -f loadtests/locustfile.py MixedWorkloadUser

    # Shipments with courier outages injected:
    locust -f loadtests/locustfile.py ShipmentUser AggregatorOutageUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py MixedWorkloadUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.mixed import MixedWorkloadUser  # noqa: F401
from loadtests.scenarios.requisitions import RequisitionUser  # noqa: F401
from loadtests.scenarios.shipping import (  # noqa: F401
    AggregatorOutageUser,
    ShipmentUser,
    ShippingContextReader,
)

logger = logging.getLogger("loadtest")

SYNC_SUPER_ADMIN_HEADERS = {"X-Company-Id": "loadtest", "X-Caller-Role": "SUPER_ADMIN"}


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Fires globally for all scenarios — no per-task wiring needed.
    Extracts the API error body so you see "ConflictError: An open shipment
    already exists" instead of just "409".
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when load test begins."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Run one pending-shipment sync when the test ends and print its summary."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        resp = requests.post(
            f"{environment.host}/shipments/sync",
            headers=SYNC_SUPER_ADMIN_HEADERS,
            timeout=30,
        )
        if resp.status_code == 200:
            summary = resp.json()
            print(
                f"[LOADTEST] Shipment sync: {summary['synced']} synced, "
                f"{summary['updated']} updated, {summary['failed']} failed\n"
            )
        else:
            print(f"[LOADTEST] Shipment sync failed: {resp.status_code} {extract_error_detail(resp)}\n")
    except Exception as e:
        print(f"[LOADTEST] Could not run shipment sync: {e}\n")
