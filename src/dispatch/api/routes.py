"""FastAPI routes for the Dispatch domain.

Caller identity arrives in the X-Company-Id, X-Caller-Role and X-Vendor-Id
headers and is turned into a ``RequestContext`` for every request.
"""

import json
import os

from fastapi import APIRouter, Depends, HTTPException
from protean.utils.globals import current_domain

from dispatch.aggregator import get_aggregator
from dispatch.aggregator.fake_adapter import FakeAggregator
from dispatch.api.dependencies import request_context, require_role, require_vendor
from dispatch.api.schemas import (
    AdvanceShipmentStatusRequest,
    AggregatorConfigResponse,
    ChildOrderResponse,
    CompanyShipmentModeRequest,
    ConfigureAggregatorRequest,
    CourierCheckResponse,
    CourierRoutingRequest,
    CourierRoutingResponse,
    CreateShipmentRequest,
    DecisionRequest,
    IdResponse,
    LinkPurchaseOrderRequest,
    LogicalOrderResponse,
    OrderLineResponse,
    PackageTemplateResponse,
    PendingActionResponse,
    PickupResponse,
    PlaceRequisitionRequest,
    RaiseGrnRequest,
    RaiseInvoiceRequest,
    RegisterPackageRequest,
    RegisterWarehouseRequest,
    RejectRequisitionRequest,
    SchedulePickupRequest,
    ShipmentResponse,
    ShippingContextResponse,
    ShippingEstimateRequest,
    ShippingEstimateResponse,
    ShippingIntegrationRequest,
    StatusResponse,
    SyncSummaryResponse,
    TabCountsResponse,
    WarehouseResponse,
)
from dispatch.documents.handling import DecideGrn, DecideInvoice, RaiseGrn, RaiseInvoice
from dispatch.errors import AccessDeniedError
from dispatch.logistics.administration import (
    ConfigureCourierRouting,
    ConfigureShippingIntegration,
    DeactivatePackageTemplate,
    DeactivateWarehouse,
    RegisterPackageTemplate,
    RegisterWarehouse,
    SetCompanyShipmentMode,
)
from dispatch.logistics.context import resolve_context
from dispatch.logistics.packaging import PackageTemplate
from dispatch.logistics.routing import VendorCourierRouting
from dispatch.logistics.serviceability import DEFAULT_WEIGHT_KG, ServiceabilityChecker
from dispatch.logistics.warehouse import VendorWarehouse
from dispatch.requisition.approval import ApproveRequisition, LinkPurchaseOrder, RejectRequisition
from dispatch.requisition.placement import PlaceRequisition
from dispatch.requisition.requisition import Requisition
from dispatch.shipment.creation import CreateShipment
from dispatch.shipment.dimensions import resolve_dimensions
from dispatch.shipment.pickup import SchedulePickup
from dispatch.shipment.shipment import Shipment
from dispatch.shipment.tracking import AdvanceShipmentStatus, SyncShipmentStatus, sync_pending_shipments
from dispatch.workflow.context import CallerRole, RequestContext
from dispatch.workflow.listing import ListingFilter, count_by_tab, list_logical_orders


def _owned_by_company(record, context: RequestContext) -> None:
    if str(record.company_id) != str(context.company_id):
        raise AccessDeniedError("Record does not belong to the caller's company")


# ---------------------------------------------------------------------------
# Requisition Router
# ---------------------------------------------------------------------------
requisition_router = APIRouter(prefix="/requisitions", tags=["requisitions"])


@requisition_router.post("", status_code=201, response_model=IdResponse)
async def place_requisition(
    body: PlaceRequisitionRequest,
    context: RequestContext = Depends(request_context),
) -> IdResponse:
    """Place a requisition (or one vendor slice of a split requisition)."""
    command = PlaceRequisition(
        requisition_number=body.requisition_number,
        company_id=context.company_id,
        vendor_id=body.vendor_id,
        vendor_name=body.vendor_name,
        employee_name=body.employee_name,
        dispatch_location=body.dispatch_location,
        parent_order_id=body.parent_order_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        destination=json.dumps(body.destination.model_dump()) if body.destination else None,
        requires_site_approval=body.requires_site_approval,
        order_date=body.order_date,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@requisition_router.put("/{requisition_id}/approve", response_model=StatusResponse)
async def approve_requisition(
    requisition_id: str,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    command = ApproveRequisition(
        requisition_id=requisition_id,
        company_id=context.company_id,
        caller_role=context.role.value,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="approved")


@requisition_router.put("/{requisition_id}/reject", response_model=StatusResponse)
async def reject_requisition(
    requisition_id: str,
    body: RejectRequisitionRequest,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    command = RejectRequisition(
        requisition_id=requisition_id,
        company_id=context.company_id,
        caller_role=context.role.value,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="rejected")


@requisition_router.put("/{requisition_id}/purchase-order", response_model=StatusResponse)
async def link_purchase_order(
    requisition_id: str,
    body: LinkPurchaseOrderRequest,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    command = LinkPurchaseOrder(
        requisition_id=requisition_id,
        company_id=context.company_id,
        caller_role=context.role.value,
        po_number=body.po_number,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="po_linked")


@requisition_router.get("/{requisition_id}")
async def get_requisition(
    requisition_id: str,
    context: RequestContext = Depends(request_context),
) -> dict:
    requisition = current_domain.repository_for(Requisition).get(requisition_id)
    _owned_by_company(requisition, context)
    if context.role == CallerRole.VENDOR and str(requisition.vendor_id) != str(context.vendor_id):
        raise AccessDeniedError("Requisition is not assigned to this vendor")
    return requisition.to_dict()


# ---------------------------------------------------------------------------
# GRN and Invoice Routers
# ---------------------------------------------------------------------------
grn_router = APIRouter(prefix="/grns", tags=["documents"])
invoice_router = APIRouter(prefix="/invoices", tags=["documents"])


@grn_router.post("", status_code=201, response_model=IdResponse)
async def raise_grn(
    body: RaiseGrnRequest,
    context: RequestContext = Depends(request_context),
) -> IdResponse:
    require_role(context, CallerRole.COMPANY_ADMIN, CallerRole.LOCATION_ADMIN, CallerRole.VENDOR)
    command = RaiseGrn(
        grn_number=body.grn_number,
        company_id=context.company_id,
        vendor_id=context.vendor_id or body.vendor_id,
        po_number=body.po_number,
        pr_numbers=json.dumps(body.pr_numbers),
        order_id=body.order_id,
        status=body.status,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@grn_router.put("/{grn_id}/decision", response_model=StatusResponse)
async def decide_grn(
    grn_id: str,
    body: DecisionRequest,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    command = DecideGrn(
        grn_id=grn_id,
        company_id=context.company_id,
        caller_role=context.role.value,
        approve=body.approve,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="approved" if body.approve else "rejected")


@invoice_router.post("", status_code=201, response_model=IdResponse)
async def raise_invoice(
    body: RaiseInvoiceRequest,
    context: RequestContext = Depends(request_context),
) -> IdResponse:
    vendor_id = require_vendor(context)
    command = RaiseInvoice(
        invoice_number=body.invoice_number,
        company_id=context.company_id,
        vendor_id=vendor_id,
        amount=body.amount,
        po_number=body.po_number,
        pr_numbers=json.dumps(body.pr_numbers),
        order_id=body.order_id,
        status=body.status,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@invoice_router.put("/{invoice_id}/decision", response_model=StatusResponse)
async def decide_invoice(
    invoice_id: str,
    body: DecisionRequest,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    command = DecideInvoice(
        invoice_id=invoice_id,
        company_id=context.company_id,
        caller_role=context.role.value,
        approve=body.approve,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="approved" if body.approve else "rejected")


# ---------------------------------------------------------------------------
# Logical Order Router
# ---------------------------------------------------------------------------
logical_order_router = APIRouter(prefix="/logical-orders", tags=["logical-orders"])


def _logical_order_response(logical_order) -> LogicalOrderResponse:
    return LogicalOrderResponse(
        id=logical_order.id,
        requisition_number=logical_order.requisition_number,
        status=logical_order.status,
        display_status=logical_order.display_status,
        is_split=logical_order.is_split,
        employee_name=logical_order.employee_name,
        dispatch_location=logical_order.dispatch_location,
        order_date=logical_order.order_date,
        total=logical_order.total,
        po_numbers=list(logical_order.po_numbers),
        vendor_names=list(logical_order.vendor_names),
        items=[
            OrderLineResponse(
                product_id=line.product_id,
                product_name=line.product_name,
                size=line.size,
                quantity=line.quantity,
                price=line.price,
            )
            for line in logical_order.items
        ],
        orders=[
            ChildOrderResponse(
                id=order.id,
                requisition_number=order.requisition_number,
                vendor_id=order.vendor_id,
                vendor_name=order.vendor_name,
                status=order.status,
                display_status=order.display_status,
                total=order.total,
            )
            for order in logical_order.orders
        ],
        pending_actions=[PendingActionResponse(**action.to_dict()) for action in logical_order.pending_actions],
    )


@logical_order_router.get("", response_model=list[LogicalOrderResponse])
async def list_orders(
    tab: str = "all",
    status: str | None = None,
    location: str | None = None,
    search: str | None = None,
    context: RequestContext = Depends(request_context),
) -> list[LogicalOrderResponse]:
    """Logical orders visible to the caller, newest first."""
    filters = ListingFilter(tab=tab, status=status, location=location, search=search)
    return [_logical_order_response(lo) for lo in list_logical_orders(context, filters)]


@logical_order_router.get("/tab-counts", response_model=TabCountsResponse)
async def tab_counts(
    location: str | None = None,
    search: str | None = None,
    context: RequestContext = Depends(request_context),
) -> TabCountsResponse:
    return TabCountsResponse(counts=count_by_tab(context, location=location, search=search))


# ---------------------------------------------------------------------------
# Shipping Router
# ---------------------------------------------------------------------------
shipping_router = APIRouter(prefix="/shipping", tags=["shipping"])


def _vendor_for(context: RequestContext, vendor_id: str | None) -> str:
    """Vendors act for themselves; company admins name the vendor."""
    if context.role == CallerRole.VENDOR:
        return require_vendor(context)
    require_role(context, CallerRole.COMPANY_ADMIN)
    if not vendor_id:
        raise HTTPException(status_code=400, detail="vendor_id is required")
    return vendor_id


@shipping_router.get("/context", response_model=ShippingContextResponse)
async def shipping_context(
    destination_pincode: str,
    vendor_id: str | None = None,
    warehouse_id: str | None = None,
    context: RequestContext = Depends(request_context),
) -> ShippingContextResponse:
    """How this vendor would ship to the destination right now."""
    shipping = resolve_context(
        company_id=context.company_id,
        vendor_id=_vendor_for(context, vendor_id),
        destination_pincode=destination_pincode,
        warehouse_id=warehouse_id,
    )
    return ShippingContextResponse(
        shipping_mode=shipping.shipping_mode,
        has_routing=shipping.has_routing,
        integration_enabled=shipping.integration_enabled,
        company_mode=shipping.company_mode,
        provider_code=shipping.provider_code,
        primary_courier=shipping.primary_courier,
        secondary_courier=shipping.secondary_courier,
        warehouse_id=shipping.warehouse_id,
        source_pincode=shipping.source_pincode,
        destination_pincode=shipping.destination_pincode,
    )


@shipping_router.post("/estimate", response_model=ShippingEstimateResponse)
async def shipping_estimate(
    body: ShippingEstimateRequest,
    context: RequestContext = Depends(request_context),
) -> ShippingEstimateResponse:
    """Run the courier fallback protocol without booking anything."""
    vendor_id = _vendor_for(context, body.vendor_id)
    shipping = resolve_context(
        company_id=context.company_id,
        vendor_id=vendor_id,
        destination_pincode=body.destination_pincode,
        warehouse_id=body.warehouse_id,
    )
    package = resolve_dimensions(
        vendor_id=vendor_id,
        package_template_id=body.package_template_id,
        length_cm=body.length_cm,
        breadth_cm=body.breadth_cm,
        height_cm=body.height_cm,
        dead_weight_kg=body.weight_kg,
        required=False,
    )
    weight = package.chargeable_weight_kg if package else (body.weight_kg or DEFAULT_WEIGHT_KG)

    if not shipping.can_auto_ship:
        return ShippingEstimateResponse(
            chargeable_weight_kg=weight,
            message="No courier routing configured; ship manually",
        )

    checks = ServiceabilityChecker().evaluate(shipping, weight)
    by_role = {check.role: CourierCheckResponse(**check.to_dict()) for check in checks}
    selected = next((check for check in checks if check.serviceable), None)
    if selected:
        message = f"Serviceable via {selected.courier_code}"
    elif all(check.errored for check in checks):
        message = "Serviceability check failed"
    else:
        message = "No configured courier serves this route; ship manually"
    return ShippingEstimateResponse(
        primary=by_role.get("PRIMARY"),
        secondary=by_role.get("SECONDARY"),
        selected_courier=selected.courier_code if selected else None,
        chargeable_weight_kg=weight,
        message=message,
    )


@shipping_router.put("/integration", response_model=StatusResponse)
async def configure_integration(
    body: ShippingIntegrationRequest,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    """Switch the system-wide shipping integration on or off."""
    require_role(context, CallerRole.SUPER_ADMIN)
    current_domain.process(ConfigureShippingIntegration(enabled=body.enabled), asynchronous=False)
    return StatusResponse(status="enabled" if body.enabled else "disabled")


@shipping_router.put("/mode", response_model=StatusResponse)
async def set_company_mode(
    body: CompanyShipmentModeRequest,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    require_role(context, CallerRole.COMPANY_ADMIN, CallerRole.SUPER_ADMIN)
    command = SetCompanyShipmentMode(company_id=context.company_id, shipment_mode=body.shipment_mode)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=body.shipment_mode)


@shipping_router.put("/routings", response_model=IdResponse)
async def configure_routing(
    body: CourierRoutingRequest,
    context: RequestContext = Depends(request_context),
) -> IdResponse:
    require_role(context, CallerRole.COMPANY_ADMIN, CallerRole.SUPER_ADMIN)
    command = ConfigureCourierRouting(
        vendor_id=body.vendor_id,
        company_id=context.company_id,
        provider_code=body.provider_code,
        primary_courier_code=body.primary_courier_code,
        secondary_courier_code=body.secondary_courier_code,
        is_active=body.is_active,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@shipping_router.get("/routings", response_model=list[CourierRoutingResponse])
async def list_routings(context: RequestContext = Depends(request_context)) -> list[CourierRoutingResponse]:
    require_role(context, CallerRole.COMPANY_ADMIN, CallerRole.SUPER_ADMIN)
    routings = current_domain.repository_for(VendorCourierRouting).for_company(context.company_id)
    return [
        CourierRoutingResponse(
            id=str(routing.id),
            vendor_id=str(routing.vendor_id),
            provider_code=routing.provider_code,
            primary_courier_code=routing.primary_courier_code,
            secondary_courier_code=routing.secondary_courier_code,
            is_active=routing.is_active,
        )
        for routing in routings
    ]


@shipping_router.post("/warehouses", status_code=201, response_model=IdResponse)
async def register_warehouse(
    body: RegisterWarehouseRequest,
    context: RequestContext = Depends(request_context),
) -> IdResponse:
    command = RegisterWarehouse(
        vendor_id=require_vendor(context),
        name=body.name,
        pincode=body.pincode,
        address=json.dumps(body.address.model_dump()) if body.address else None,
        contact_name=body.contact_name,
        contact_phone=body.contact_phone,
        is_primary=body.is_primary,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@shipping_router.get("/warehouses", response_model=list[WarehouseResponse])
async def list_warehouses(context: RequestContext = Depends(request_context)) -> list[WarehouseResponse]:
    warehouses = current_domain.repository_for(VendorWarehouse).for_vendor(require_vendor(context))
    return [
        WarehouseResponse(
            id=str(warehouse.id),
            name=warehouse.name,
            pincode=warehouse.pincode,
            is_primary=warehouse.is_primary,
            is_active=warehouse.is_active,
        )
        for warehouse in warehouses
    ]


@shipping_router.put("/warehouses/{warehouse_id}/deactivate", response_model=StatusResponse)
async def deactivate_warehouse(
    warehouse_id: str,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    command = DeactivateWarehouse(warehouse_id=warehouse_id, vendor_id=require_vendor(context))
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deactivated")


@shipping_router.post("/packages", status_code=201, response_model=IdResponse)
async def register_package(
    body: RegisterPackageRequest,
    context: RequestContext = Depends(request_context),
) -> IdResponse:
    """Register a package template; shared templates need a super admin."""
    if body.shared:
        require_role(context, CallerRole.SUPER_ADMIN)
        vendor_id = None
    else:
        vendor_id = require_vendor(context)
    command = RegisterPackageTemplate(
        name=body.name,
        length_cm=body.length_cm,
        breadth_cm=body.breadth_cm,
        height_cm=body.height_cm,
        volumetric_divisor=body.volumetric_divisor,
        dead_weight_kg=body.dead_weight_kg,
        vendor_id=vendor_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@shipping_router.get("/packages", response_model=list[PackageTemplateResponse])
async def list_packages(context: RequestContext = Depends(request_context)) -> list[PackageTemplateResponse]:
    templates = current_domain.repository_for(PackageTemplate).available_to(require_vendor(context))
    return [
        PackageTemplateResponse(
            id=str(template.id),
            name=template.name,
            length_cm=template.length_cm,
            breadth_cm=template.breadth_cm,
            height_cm=template.height_cm,
            volumetric_divisor=template.volumetric_divisor,
            volumetric_weight_kg=template.volumetric_weight,
            dead_weight_kg=template.dead_weight_kg,
            chargeable_weight_kg=template.chargeable_weight,
        )
        for template in templates
    ]


@shipping_router.put("/packages/{package_id}/deactivate", response_model=StatusResponse)
async def deactivate_package(
    package_id: str,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    vendor_id = None if context.role == CallerRole.SUPER_ADMIN else require_vendor(context)
    command = DeactivatePackageTemplate(package_id=package_id, vendor_id=vendor_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deactivated")


@shipping_router.post("/aggregator/configure", response_model=AggregatorConfigResponse)
async def configure_aggregator(body: ConfigureAggregatorRequest) -> AggregatorConfigResponse:
    """Configure the FakeAggregator behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Aggregator configuration not available in production")

    aggregator = get_aggregator()
    if not isinstance(aggregator, FakeAggregator):
        raise HTTPException(status_code=400, detail="Aggregator configuration only available for FakeAggregator")

    aggregator.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
        omit_reference=body.omit_reference,
    )
    for courier_code in body.unserviceable_couriers:
        aggregator.set_courier(courier_code, serviceable=False)
    for courier_code in body.erroring_couriers:
        aggregator.set_courier(courier_code, errors=True)
    return AggregatorConfigResponse(
        aggregator=type(aggregator).__name__,
        should_succeed=aggregator.should_succeed,
        failure_reason=aggregator.failure_reason,
        omit_reference=aggregator.omit_reference,
    )


# ---------------------------------------------------------------------------
# Shipment Router
# ---------------------------------------------------------------------------
shipment_router = APIRouter(prefix="/shipments", tags=["shipments"])


def _shipment_response(shipment: Shipment) -> ShipmentResponse:
    return ShipmentResponse(
        id=str(shipment.id),
        requisition_id=str(shipment.requisition_id),
        requisition_number=shipment.requisition_number,
        vendor_id=str(shipment.vendor_id),
        shipment_mode=shipment.shipment_mode,
        status=shipment.status,
        awb_number=shipment.awb_number,
        transport_mode=shipment.transport_mode,
        courier_name=shipment.courier_name,
        courier_code=shipment.courier.courier_code if shipment.courier else None,
        provider_shipment_reference=shipment.provider_shipment_reference,
        tracking_url=shipment.tracking_url,
        chargeable_weight_kg=shipment.package.chargeable_weight_kg if shipment.package else None,
        volumetric_weight_kg=shipment.package.volumetric_weight_kg if shipment.package else None,
        dispatched_date=shipment.dispatched_date,
        pickup_date=shipment.pickup_date,
        pickup_reference=shipment.pickup_reference,
    )


@shipment_router.post("", status_code=201, response_model=ShipmentResponse)
async def create_shipment(
    body: CreateShipmentRequest,
    context: RequestContext = Depends(request_context),
) -> ShipmentResponse:
    """Create the shipment for a requisition assigned to the calling vendor."""
    command = CreateShipment(
        requisition_id=body.requisition_id,
        vendor_id=require_vendor(context),
        mode=body.mode,
        destination=json.dumps(body.destination.model_dump()) if body.destination else None,
        package_template_id=body.package_template_id,
        length_cm=body.length_cm,
        breadth_cm=body.breadth_cm,
        height_cm=body.height_cm,
        dead_weight_kg=body.dead_weight_kg,
        warehouse_id=body.warehouse_id,
        transport_mode=body.transport_mode,
        courier_name=body.courier_name,
        awb_number=body.awb_number,
        dispatched_date=body.dispatched_date,
    )
    shipment_id = current_domain.process(command, asynchronous=False)
    shipment = current_domain.repository_for(Shipment).get(shipment_id)
    return _shipment_response(shipment)


@shipment_router.post("/sync", response_model=SyncSummaryResponse)
async def sync_all_shipments(context: RequestContext = Depends(request_context)) -> SyncSummaryResponse:
    """Sync every open aggregator shipment with the provider."""
    require_role(context, CallerRole.SUPER_ADMIN)
    return SyncSummaryResponse(**sync_pending_shipments())


@shipment_router.get("/awaiting-pickup", response_model=list[ShipmentResponse])
async def list_awaiting_pickup(context: RequestContext = Depends(request_context)) -> list[ShipmentResponse]:
    """The calling vendor's aggregator shipments the courier has not collected yet."""
    vendor_id = require_vendor(context)
    shipments = current_domain.repository_for(Shipment).awaiting_pickup(vendor_id)
    return [
        _shipment_response(shipment) for shipment in shipments if str(shipment.company_id) == str(context.company_id)
    ]


@shipment_router.get("/{shipment_id}", response_model=ShipmentResponse)
async def get_shipment(
    shipment_id: str,
    context: RequestContext = Depends(request_context),
) -> ShipmentResponse:
    shipment = current_domain.repository_for(Shipment).get(shipment_id)
    _owned_by_company(shipment, context)
    if context.role == CallerRole.VENDOR and str(shipment.vendor_id) != str(context.vendor_id):
        raise AccessDeniedError("Shipment does not belong to this vendor")
    return _shipment_response(shipment)


@shipment_router.put("/{shipment_id}/status", response_model=StatusResponse)
async def advance_shipment_status(
    shipment_id: str,
    body: AdvanceShipmentStatusRequest,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    command = AdvanceShipmentStatus(
        shipment_id=shipment_id,
        vendor_id=require_vendor(context),
        status=body.status,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=body.status)


@shipment_router.put("/{shipment_id}/sync", response_model=StatusResponse)
async def sync_shipment_status(
    shipment_id: str,
    context: RequestContext = Depends(request_context),
) -> StatusResponse:
    shipment = current_domain.repository_for(Shipment).get(shipment_id)
    _owned_by_company(shipment, context)
    if context.role == CallerRole.VENDOR and str(shipment.vendor_id) != str(context.vendor_id):
        raise AccessDeniedError("Shipment does not belong to this vendor")
    status = current_domain.process(SyncShipmentStatus(shipment_id=shipment_id), asynchronous=False)
    return StatusResponse(status=status)


@shipment_router.put("/{shipment_id}/pickup", response_model=PickupResponse)
async def schedule_pickup(
    shipment_id: str,
    body: SchedulePickupRequest,
    context: RequestContext = Depends(request_context),
) -> PickupResponse:
    """Schedule, or move, the courier pickup of an aggregator shipment."""
    command = SchedulePickup(shipment_id=shipment_id, vendor_id=require_vendor(context), pickup_date=body.pickup_date)
    current_domain.process(command, asynchronous=False)
    shipment = current_domain.repository_for(Shipment).get(shipment_id)
    return PickupResponse(
        shipment_id=str(shipment.id),
        pickup_date=shipment.pickup_date,
        pickup_reference=shipment.pickup_reference,
    )
