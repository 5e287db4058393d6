"""Receipt and invoice domain events."""

from protean.fields import DateTime, Float, Identifier, String

from dispatch.domain import dispatch


@dispatch.event(part_of="GoodsReceiptNote")
class GrnRaised:
    """A goods receipt note was raised against a purchase order or requisition."""

    __version__ = 1

    grn_id = Identifier(required=True)
    grn_number = String(required=True)
    company_id = Identifier(required=True)
    po_number = String()
    order_id = Identifier()
    raised_at = DateTime(required=True)


@dispatch.event(part_of="GoodsReceiptNote")
class GrnDecided:
    """A company admin approved or rejected a goods receipt note."""

    __version__ = 1

    grn_id = Identifier(required=True)
    status = String(required=True)
    reason = String()
    decided_at = DateTime(required=True)


@dispatch.event(part_of="VendorInvoice")
class InvoiceRaised:
    """A vendor raised an invoice."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    invoice_number = String(required=True)
    company_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    amount = Float(required=True)
    po_number = String()
    order_id = Identifier()
    raised_at = DateTime(required=True)


@dispatch.event(part_of="VendorInvoice")
class InvoiceDecided:
    """A company admin approved or rejected a vendor invoice."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    status = String(required=True)
    reason = String()
    decided_at = DateTime(required=True)
