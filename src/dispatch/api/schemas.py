"""Pydantic API schemas for the Dispatch domain.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    address_line_1: str | None = None
    address_line_2: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    country: str = "India"


# ---------------------------------------------------------------------------
# Requisition requests
# ---------------------------------------------------------------------------
class RequisitionItemRequest(BaseModel):
    product_id: str
    product_name: str | None = None
    size: str | None = None
    quantity: int
    price: float = 0.0


class PlaceRequisitionRequest(BaseModel):
    requisition_number: str
    vendor_id: str
    vendor_name: str | None = None
    employee_name: str | None = None
    dispatch_location: str | None = None
    parent_order_id: str | None = None
    items: list[RequisitionItemRequest]
    destination: AddressSchema | None = None
    requires_site_approval: bool = True
    order_date: datetime | None = None


class RejectRequisitionRequest(BaseModel):
    reason: str | None = None


class LinkPurchaseOrderRequest(BaseModel):
    po_number: str


# ---------------------------------------------------------------------------
# Document requests
# ---------------------------------------------------------------------------
class RaiseGrnRequest(BaseModel):
    grn_number: str
    vendor_id: str | None = None
    po_number: str | None = None
    pr_numbers: list[str] = Field(default_factory=list)
    order_id: str | None = None
    status: str = "RAISED"


class RaiseInvoiceRequest(BaseModel):
    invoice_number: str
    amount: float
    po_number: str | None = None
    pr_numbers: list[str] = Field(default_factory=list)
    order_id: str | None = None
    status: str = "RAISED"


class DecisionRequest(BaseModel):
    approve: bool
    reason: str | None = None


# ---------------------------------------------------------------------------
# Logistics requests
# ---------------------------------------------------------------------------
class ShippingIntegrationRequest(BaseModel):
    enabled: bool


class CompanyShipmentModeRequest(BaseModel):
    shipment_mode: str


class CourierRoutingRequest(BaseModel):
    vendor_id: str
    provider_code: str
    primary_courier_code: str
    secondary_courier_code: str | None = None
    is_active: bool = True


class RegisterWarehouseRequest(BaseModel):
    name: str
    pincode: str
    address: AddressSchema | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    is_primary: bool = False


class RegisterPackageRequest(BaseModel):
    name: str
    length_cm: float
    breadth_cm: float
    height_cm: float
    volumetric_divisor: float | None = None
    dead_weight_kg: float | None = None
    shared: bool = False


class ShippingEstimateRequest(BaseModel):
    vendor_id: str | None = None
    destination_pincode: str
    warehouse_id: str | None = None
    package_template_id: str | None = None
    length_cm: float | None = None
    breadth_cm: float | None = None
    height_cm: float | None = None
    weight_kg: float | None = None


class ConfigureAggregatorRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Aggregator unavailable"
    omit_reference: bool = False
    unserviceable_couriers: list[str] = Field(default_factory=list)
    erroring_couriers: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Shipment requests
# ---------------------------------------------------------------------------
class CreateShipmentRequest(BaseModel):
    requisition_id: str
    mode: str = "MANUAL"
    destination: AddressSchema | None = None
    package_template_id: str | None = None
    length_cm: float | None = None
    breadth_cm: float | None = None
    height_cm: float | None = None
    dead_weight_kg: float | None = None
    warehouse_id: str | None = None
    transport_mode: str | None = None
    courier_name: str | None = None
    awb_number: str | None = None
    dispatched_date: date | None = None


class AdvanceShipmentStatusRequest(BaseModel):
    status: str
    reason: str | None = None


class SchedulePickupRequest(BaseModel):
    pickup_date: date


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class IdResponse(BaseModel):
    id: str


class StatusResponse(BaseModel):
    status: str


class PendingActionResponse(BaseModel):
    kind: str
    entity_id: str
    display_id: str
    label: str
    priority: float


class OrderLineResponse(BaseModel):
    product_id: str
    product_name: str | None = None
    size: str | None = None
    quantity: int
    price: float


class ChildOrderResponse(BaseModel):
    id: str
    requisition_number: str | None = None
    vendor_id: str | None = None
    vendor_name: str | None = None
    status: str
    display_status: str | None = None
    total: float


class LogicalOrderResponse(BaseModel):
    id: str
    requisition_number: str | None = None
    status: str
    display_status: str | None = None
    is_split: bool
    employee_name: str | None = None
    dispatch_location: str | None = None
    order_date: datetime | None = None
    total: float
    po_numbers: list[str]
    vendor_names: list[str]
    items: list[OrderLineResponse]
    orders: list[ChildOrderResponse]
    pending_actions: list[PendingActionResponse]


class ShippingContextResponse(BaseModel):
    shipping_mode: str
    has_routing: bool
    integration_enabled: bool
    company_mode: str
    provider_code: str | None = None
    primary_courier: str | None = None
    secondary_courier: str | None = None
    warehouse_id: str | None = None
    source_pincode: str | None = None
    destination_pincode: str


class CourierCheckResponse(BaseModel):
    courier_code: str
    role: str | None = None
    serviceable: bool
    estimated_cost: float | None = None
    estimated_days: str | None = None
    message: str
    errored: bool


class ShippingEstimateResponse(BaseModel):
    primary: CourierCheckResponse | None = None
    secondary: CourierCheckResponse | None = None
    selected_courier: str | None = None
    chargeable_weight_kg: float
    message: str


class ShipmentResponse(BaseModel):
    id: str
    requisition_id: str
    requisition_number: str | None = None
    vendor_id: str
    shipment_mode: str
    status: str
    awb_number: str | None = None
    transport_mode: str | None = None
    courier_name: str | None = None
    courier_code: str | None = None
    provider_shipment_reference: str | None = None
    tracking_url: str | None = None
    chargeable_weight_kg: float | None = None
    volumetric_weight_kg: float | None = None
    dispatched_date: date | None = None
    pickup_date: date | None = None
    pickup_reference: str | None = None


class PickupResponse(BaseModel):
    shipment_id: str
    pickup_date: date
    pickup_reference: str | None = None


class SyncSummaryResponse(BaseModel):
    synced: int
    updated: int
    failed: int


class AggregatorConfigResponse(BaseModel):
    aggregator: str
    should_succeed: bool
    failure_reason: str
    omit_reference: bool


class TabCountsResponse(BaseModel):
    counts: dict[str, int]


class WarehouseResponse(BaseModel):
    id: str
    name: str
    pincode: str
    is_primary: bool
    is_active: bool


class PackageTemplateResponse(BaseModel):
    id: str
    name: str
    length_cm: float
    breadth_cm: float
    height_cm: float
    volumetric_divisor: float
    volumetric_weight_kg: float
    dead_weight_kg: float | None = None
    chargeable_weight_kg: float


class CourierRoutingResponse(BaseModel):
    id: str
    vendor_id: str
    provider_code: str
    primary_courier_code: str
    secondary_courier_code: str | None = None
    is_active: bool
