"""Repositories for GRNs and vendor invoices."""

from dispatch.documents.document import GoodsReceiptNote, VendorInvoice
from dispatch.domain import dispatch
from dispatch.requisition.repository import QUERY_LIMIT


@dispatch.repository(part_of=GoodsReceiptNote)
class GoodsReceiptNoteRepository:
    def for_company(self, company_id: str) -> list[GoodsReceiptNote]:
        return self._dao.query.filter(company_id=str(company_id)).limit(QUERY_LIMIT).all().items


@dispatch.repository(part_of=VendorInvoice)
class VendorInvoiceRepository:
    def for_company(self, company_id: str) -> list[VendorInvoice]:
        return self._dao.query.filter(company_id=str(company_id)).limit(QUERY_LIMIT).all().items
