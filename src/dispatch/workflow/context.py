"""Request-scoped caller context passed explicitly into every resolver."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class CallerRole(Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    COMPANY_ADMIN = "COMPANY_ADMIN"
    LOCATION_ADMIN = "LOCATION_ADMIN"
    VENDOR = "VENDOR"
    EMPLOYEE = "EMPLOYEE"


@dataclass(frozen=True)
class RequestContext:
    """Who is asking, for which tenant, and when."""

    company_id: str
    role: CallerRole
    vendor_id: str | None = None
    now: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_company_admin(self) -> bool:
        return self.role == CallerRole.COMPANY_ADMIN
