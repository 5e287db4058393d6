"""Shipping switches: the system-wide integration flag and per-company mode.

The system flag is a kill switch. While it is off, every company ships
manually regardless of its own setting. A company without a stored policy
ships manually too.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from dispatch.domain import dispatch

SYSTEM_CONFIG_KEY = "system"


class ShipmentRequestMode(Enum):
    MANUAL = "MANUAL"
    AUTOMATIC = "AUTOMATIC"


@dispatch.aggregate
class SystemShippingConfig:
    """Singleton holding platform-wide shipping switches."""

    config_key = Identifier(identifier=True, default=SYSTEM_CONFIG_KEY)
    shipping_integration_enabled = Boolean(default=False)
    updated_at = DateTime()

    def set_integration(self, enabled: bool) -> None:
        self.shipping_integration_enabled = enabled
        self.updated_at = datetime.now(UTC)


@dispatch.aggregate
class CompanyShippingPolicy:
    """How one company requests shipments."""

    company_id = Identifier(identifier=True)
    shipment_mode = String(choices=ShipmentRequestMode, default=ShipmentRequestMode.MANUAL.value)
    updated_at = DateTime()

    def set_mode(self, mode: ShipmentRequestMode) -> None:
        self.shipment_mode = mode.value
        self.updated_at = datetime.now(UTC)


def is_integration_enabled() -> bool:
    try:
        config = current_domain.repository_for(SystemShippingConfig).get(SYSTEM_CONFIG_KEY)
    except ObjectNotFoundError:
        return False
    return bool(config.shipping_integration_enabled)


def company_mode(company_id: str) -> ShipmentRequestMode:
    try:
        policy = current_domain.repository_for(CompanyShippingPolicy).get(str(company_id))
    except ObjectNotFoundError:
        return ShipmentRequestMode.MANUAL
    return ShipmentRequestMode(policy.shipment_mode)


def effective_mode(company_id: str) -> ShipmentRequestMode:
    """The company's mode, forced to MANUAL while the system flag is off."""
    if not is_integration_enabled():
        return ShipmentRequestMode.MANUAL
    return company_mode(company_id)
