"""Dispatch domain API package."""

from dispatch.api.errors import register_error_handlers
from dispatch.api.routes import (
    grn_router,
    invoice_router,
    logical_order_router,
    requisition_router,
    shipment_router,
    shipping_router,
)

ROUTERS = [
    requisition_router,
    grn_router,
    invoice_router,
    logical_order_router,
    shipping_router,
    shipment_router,
]

__all__ = [
    "ROUTERS",
    "grn_router",
    "invoice_router",
    "logical_order_router",
    "register_error_handlers",
    "requisition_router",
    "shipment_router",
    "shipping_router",
]
