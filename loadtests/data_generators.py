"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules
(6-digit pincodes, complete dispatch addresses, positive package
dimensions) and match the exact field names expected by the API's
Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker("en_IN")

COURIERS = ["DELHIVERY", "BLUEDART", "XPRESSBEES", "ECOM_EXPRESS", "DTDC"]
LOCATIONS = ["Mumbai HQ", "Pune Plant", "Bengaluru Office", "Chennai Depot"]


def company_id() -> str:
    return f"comp-lt-{uuid.uuid4().hex[:8]}"


def vendor_id() -> str:
    return f"ven-lt-{uuid.uuid4().hex[:8]}"


def requisition_number() -> str:
    """Generate requisition numbers like 'PR-LT-A1B2C3D4'."""
    return f"PR-LT-{uuid.uuid4().hex[:8].upper()}"


def po_number() -> str:
    return f"PO-LT-{uuid.uuid4().hex[:8].upper()}"


def valid_pincode() -> str:
    """Six digits, never starting with zero."""
    return f"{random.randint(110000, 855999)}"


def address_data() -> dict:
    """Generate an AddressSchema payload with every dispatch field present."""
    return {
        "address_line_1": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state()[:100],
        "pincode": valid_pincode(),
        "country": "India",
    }


def requisition_items(count: int | None = None) -> list[dict]:
    count = count or random.randint(1, 4)
    return [
        {
            "product_id": f"prod-{uuid.uuid4().hex[:6]}",
            "product_name": fake.word().capitalize(),
            "size": random.choice(["S", "M", "L", "XL", None]),
            "quantity": random.randint(1, 20),
            "price": round(random.uniform(50.0, 2500.0), 2),
        }
        for _ in range(count)
    ]


def requisition_data(vendor: str, parent_order_id: str | None = None, requires_site_approval: bool = False) -> dict:
    """Generate a PlaceRequisitionRequest payload."""
    return {
        "requisition_number": requisition_number(),
        "vendor_id": vendor,
        "vendor_name": fake.company()[:255],
        "employee_name": fake.name()[:255],
        "dispatch_location": random.choice(LOCATIONS),
        "parent_order_id": parent_order_id,
        "items": requisition_items(),
        "destination": address_data(),
        "requires_site_approval": requires_site_approval,
    }


def warehouse_data() -> dict:
    return {
        "name": f"{fake.city()} Warehouse"[:255],
        "pincode": valid_pincode(),
        "contact_name": fake.name()[:255],
        "contact_phone": f"+91 9{random.randint(100000000, 999999999)}",
    }


def routing_data(vendor: str) -> dict:
    primary, secondary = random.sample(COURIERS, 2)
    return {
        "vendor_id": vendor,
        "provider_code": "SHIPWAY",
        "primary_courier_code": primary,
        "secondary_courier_code": secondary,
    }


def package_dimensions() -> dict:
    return {
        "length_cm": round(random.uniform(10.0, 80.0), 1),
        "breadth_cm": round(random.uniform(10.0, 60.0), 1),
        "height_cm": round(random.uniform(5.0, 50.0), 1),
        "dead_weight_kg": round(random.uniform(0.2, 15.0), 2),
    }


def manual_shipment_data(requisition_id: str) -> dict:
    """Generate a CreateShipmentRequest payload for a manual courier entry."""
    return {
        "requisition_id": requisition_id,
        "mode": "MANUAL",
        "transport_mode": "COURIER",
        "courier_name": random.choice(COURIERS),
        "awb_number": f"AWB{uuid.uuid4().hex[:10].upper()}",
        "dispatched_date": fake.date_between(start_date="-3d", end_date="today").isoformat(),
    }


def automatic_shipment_data(requisition_id: str) -> dict:
    return {"requisition_id": requisition_id, "mode": "AUTOMATIC", **package_dimensions()}


def caller_headers(company: str, role: str, vendor: str | None = None) -> dict:
    """Identity headers the API reads into a RequestContext."""
    headers = {"X-Company-Id": company, "X-Caller-Role": role}
    if vendor:
        headers["X-Vendor-Id"] = vendor
    return headers
