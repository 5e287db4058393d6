"""Repository for the Requisition aggregate."""

from dispatch.domain import dispatch
from dispatch.requisition.requisition import Requisition

# Upper bound on rows fetched for one company listing
QUERY_LIMIT = 1000


@dispatch.repository(part_of=Requisition)
class RequisitionRepository:
    def for_company(self, company_id: str) -> list[Requisition]:
        return self._dao.query.filter(company_id=str(company_id)).limit(QUERY_LIMIT).all().items

    def for_vendor(self, company_id: str, vendor_id: str) -> list[Requisition]:
        return (
            self._dao.query.filter(company_id=str(company_id), vendor_id=str(vendor_id))
            .limit(QUERY_LIMIT)
            .all()
            .items
        )
