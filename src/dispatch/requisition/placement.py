"""Requisition placement — command and handler."""

import json

from protean import handle
from protean.fields import Boolean, DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from dispatch.domain import dispatch
from dispatch.requisition.requisition import Requisition
from dispatch.shared.address import DeliveryAddress


@dispatch.command(part_of="Requisition")
class PlaceRequisition:
    """Place a requisition (or one vendor slice of a split requisition)."""

    requisition_number = String(required=True, max_length=50)
    company_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    vendor_name = String(max_length=255)
    employee_name = String(max_length=255)
    dispatch_location = String(max_length=255)
    parent_order_id = Identifier()
    items = Text(required=True)  # JSON list of item dicts
    destination = Text()  # JSON address dict
    requires_site_approval = Boolean(default=True)
    order_date = DateTime()


@dispatch.command_handler(part_of=Requisition)
class PlaceRequisitionHandler:
    @handle(PlaceRequisition)
    def place_requisition(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        destination = None
        if command.destination:
            address = json.loads(command.destination) if isinstance(command.destination, str) else command.destination
            destination = DeliveryAddress(**address)

        req = Requisition.place(
            requisition_number=command.requisition_number,
            company_id=command.company_id,
            vendor_id=command.vendor_id,
            items_data=items_data,
            vendor_name=command.vendor_name,
            employee_name=command.employee_name,
            dispatch_location=command.dispatch_location,
            destination=destination,
            parent_order_id=command.parent_order_id,
            requires_site_approval=command.requires_site_approval,
            order_date=command.order_date,
        )
        current_domain.repository_for(Requisition).add(req)
        return str(req.id)
