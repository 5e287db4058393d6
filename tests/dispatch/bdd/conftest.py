"""Shared BDD fixtures and step definitions for shipment routing."""

import json

import pytest
from dispatch.aggregator import get_aggregator
from dispatch.logistics.administration import (
    ConfigureCourierRouting,
    ConfigureShippingIntegration,
    RegisterWarehouse,
    SetCompanyShipmentMode,
)
from dispatch.requisition.approval import ApproveRequisition
from dispatch.requisition.placement import PlaceRequisition
from dispatch.requisition.requisition import Requisition
from dispatch.shipment.shipment import Shipment
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then

_DESTINATION = {
    "address_line_1": "12 MG Road",
    "city": "Pune",
    "state": "Maharashtra",
    "pincode": "411001",
}


@pytest.fixture()
def booking():
    """Container for the booked shipment id or the refusal raised."""
    return {"shipment_id": None, "exc": None}


@pytest.fixture()
def shipping_setup():
    return {"company_id": "comp-bdd"}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("shipping integration is enabled")
def integration_enabled():
    current_domain.process(ConfigureShippingIntegration(enabled=True), asynchronous=False)


@given("shipping integration is disabled")
def integration_disabled():
    current_domain.process(ConfigureShippingIntegration(enabled=False), asynchronous=False)


@given(parsers.cfparse('company "{company_id}" ships automatically'))
def company_ships_automatically(shipping_setup, company_id):
    shipping_setup["company_id"] = company_id
    current_domain.process(
        SetCompanyShipmentMode(company_id=company_id, shipment_mode="AUTOMATIC"),
        asynchronous=False,
    )


@given(parsers.cfparse('vendor "{vendor_id}" dispatches from pincode "{pincode}"'))
def vendor_warehouse(vendor_id, pincode):
    current_domain.process(
        RegisterWarehouse(
            vendor_id=vendor_id,
            name="Main warehouse",
            pincode=pincode,
            contact_name="Ravi",
            contact_phone="+91 99000 00000",
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('vendor "{vendor_id}" routes through "{primary}" with fallback "{secondary}"'))
def vendor_routing(shipping_setup, vendor_id, primary, secondary):
    current_domain.process(
        ConfigureCourierRouting(
            vendor_id=vendor_id,
            company_id=shipping_setup["company_id"],
            provider_code="SHIPWAY",
            primary_courier_code=primary,
            secondary_courier_code=secondary,
        ),
        asynchronous=False,
    )


@given(
    parsers.cfparse('an approved requisition "{number}" from vendor "{vendor_id}"'),
    target_fixture="requisition_id",
)
def approved_requisition(shipping_setup, number, vendor_id):
    requisition_id = current_domain.process(
        PlaceRequisition(
            requisition_number=number,
            company_id=shipping_setup["company_id"],
            vendor_id=vendor_id,
            items=json.dumps([{"product_id": "prod-1", "quantity": 3, "price": 250.0}]),
            destination=json.dumps(_DESTINATION),
            requires_site_approval=False,
        ),
        asynchronous=False,
    )
    current_domain.process(
        ApproveRequisition(
            requisition_id=requisition_id,
            company_id=shipping_setup["company_id"],
            caller_role="COMPANY_ADMIN",
        ),
        asynchronous=False,
    )
    return requisition_id


@given(parsers.cfparse('courier "{courier_code}" does not serve the route'))
def courier_unserviceable(courier_code):
    get_aggregator().set_courier(courier_code, serviceable=False)


@given(parsers.cfparse('courier "{courier_code}" fails to answer'))
def courier_errors(courier_code):
    get_aggregator().set_courier(courier_code, errors=True)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the shipment is booked with courier "{courier_code}"'))
def booked_with(booking, courier_code):
    assert booking["exc"] is None
    shipment = current_domain.repository_for(Shipment).get(booking["shipment_id"])
    assert shipment.courier.courier_code == courier_code
    assert shipment.awb_number is not None


@then(parsers.cfparse('the shipment courier role is "{role}"'))
def courier_role(booking, role):
    shipment = current_domain.repository_for(Shipment).get(booking["shipment_id"])
    assert shipment.courier.courier_role == role


@then(parsers.cfparse('the shipment status is "{status}"'))
def shipment_status(booking, status):
    shipment = current_domain.repository_for(Shipment).get(booking["shipment_id"])
    assert shipment.status == status


@then(parsers.cfparse('the requisition is "{status}"'))
def requisition_status(requisition_id, status):
    assert current_domain.repository_for(Requisition).get(requisition_id).status == status
