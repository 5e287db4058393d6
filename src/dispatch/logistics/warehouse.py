"""Vendor warehouses — where shipments are dispatched from."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, ValueObject

from dispatch.domain import dispatch
from dispatch.requisition.repository import QUERY_LIMIT
from dispatch.shared.address import DeliveryAddress, normalize_phone, validate_pincode


@dispatch.aggregate
class VendorWarehouse:
    vendor_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    address = ValueObject(DeliveryAddress)
    pincode = String(required=True, max_length=6)
    contact_name = String(max_length=255)
    contact_phone = String(max_length=10)
    is_primary = Boolean(default=False)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(
        cls,
        vendor_id: str,
        name: str,
        pincode: str,
        address: DeliveryAddress | None = None,
        contact_name: str | None = None,
        contact_phone: str | None = None,
        is_primary: bool = False,
    ):
        phone = normalize_phone(contact_phone)
        if contact_phone and phone is None:
            raise ValidationError({"contact_phone": ["Phone number must have 10 digits"]})
        now = datetime.now(UTC)
        return cls(
            vendor_id=vendor_id,
            name=name,
            pincode=validate_pincode(pincode),
            address=address,
            contact_name=contact_name,
            contact_phone=phone,
            is_primary=is_primary,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def make_primary(self) -> None:
        self.is_primary = True
        self.updated_at = datetime.now(UTC)

    def clear_primary(self) -> None:
        self.is_primary = False
        self.updated_at = datetime.now(UTC)

    def deactivate(self) -> None:
        self.is_active = False
        self.is_primary = False
        self.updated_at = datetime.now(UTC)


@dispatch.repository(part_of=VendorWarehouse)
class VendorWarehouseRepository:
    def for_vendor(self, vendor_id: str) -> list[VendorWarehouse]:
        return self._dao.query.filter(vendor_id=str(vendor_id)).limit(QUERY_LIMIT).all().items

    def active_for_vendor(self, vendor_id: str) -> list[VendorWarehouse]:
        return [warehouse for warehouse in self.for_vendor(vendor_id) if warehouse.is_active]
