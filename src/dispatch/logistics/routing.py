"""Vendor courier routing — which aggregator and couriers a vendor ships with."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String

from dispatch.domain import dispatch
from dispatch.requisition.repository import QUERY_LIMIT


@dispatch.aggregate
class VendorCourierRouting:
    vendor_id = Identifier(required=True)
    company_id = Identifier(required=True)
    provider_code = String(required=True, max_length=50)
    primary_courier_code = String(required=True, max_length=50)
    secondary_courier_code = String(max_length=50)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        vendor_id: str,
        company_id: str,
        provider_code: str,
        primary_courier_code: str,
        secondary_courier_code: str | None = None,
    ):
        cls._check_couriers(primary_courier_code, secondary_courier_code)
        now = datetime.now(UTC)
        return cls(
            vendor_id=vendor_id,
            company_id=company_id,
            provider_code=provider_code,
            primary_courier_code=primary_courier_code,
            secondary_courier_code=secondary_courier_code or None,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def _check_couriers(primary: str, secondary: str | None) -> None:
        if secondary and secondary == primary:
            raise ValidationError({"secondary_courier_code": ["Secondary courier must differ from the primary"]})

    def reconfigure(
        self,
        provider_code: str,
        primary_courier_code: str,
        secondary_courier_code: str | None,
        is_active: bool = True,
    ) -> None:
        self._check_couriers(primary_courier_code, secondary_courier_code)
        self.provider_code = provider_code
        self.primary_courier_code = primary_courier_code
        self.secondary_courier_code = secondary_courier_code or None
        self.is_active = is_active
        self.updated_at = datetime.now(UTC)


@dispatch.repository(part_of=VendorCourierRouting)
class VendorCourierRoutingRepository:
    def for_pair(self, vendor_id: str, company_id: str) -> VendorCourierRouting | None:
        """The routing record for the pair, active or not."""
        results = self._dao.query.filter(vendor_id=str(vendor_id), company_id=str(company_id)).all().items
        return results[0] if results else None

    def active_for_pair(self, vendor_id: str, company_id: str) -> VendorCourierRouting | None:
        routing = self.for_pair(vendor_id, company_id)
        return routing if routing is not None and routing.is_active else None

    def for_company(self, company_id: str) -> list[VendorCourierRouting]:
        return self._dao.query.filter(company_id=str(company_id)).limit(QUERY_LIMIT).all().items
