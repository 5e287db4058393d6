"""Serviceability checks and courier selection.

The primary courier is always asked first. The secondary is asked only
when the primary cannot take the shipment (unserviceable, or the check
itself failed) and a secondary is configured. The checks run one after the
other, never in parallel, and stop as soon as a courier is usable.
"""

from dataclasses import dataclass
from enum import Enum

from dispatch.aggregator import get_aggregator, timeout_seconds
from dispatch.aggregator.port import AggregatorPort
from dispatch.errors import ConfigurationError, DependencyError, UnserviceableRouteError
from dispatch.logistics.context import ShippingContext
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_WEIGHT_KG = 1.0


class CourierRole(Enum):
    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"


@dataclass(frozen=True)
class CourierCheck:
    courier_code: str
    serviceable: bool
    message: str
    role: str | None = None
    estimated_cost: float | None = None
    estimated_days: str | None = None
    errored: bool = False

    def to_dict(self) -> dict:
        return {
            "courier_code": self.courier_code,
            "role": self.role,
            "serviceable": self.serviceable,
            "estimated_cost": self.estimated_cost,
            "estimated_days": self.estimated_days,
            "message": self.message,
            "errored": self.errored,
        }


@dataclass(frozen=True)
class CourierSelection:
    courier_code: str
    role: str
    estimated_cost: float | None
    estimated_days: str | None
    checks: tuple[CourierCheck, ...]


class ServiceabilityChecker:
    def __init__(self, aggregator: AggregatorPort | None = None, timeout: float | None = None) -> None:
        self.aggregator = aggregator or get_aggregator()
        self.timeout = timeout if timeout is not None else timeout_seconds()

    def check(
        self,
        provider_code: str,
        source_pincode: str,
        destination_pincode: str,
        courier_code: str,
        weight_kg: float | None = None,
        role: CourierRole | None = None,
    ) -> CourierCheck:
        """Ask the aggregator about one courier; transport failures become ``errored`` checks."""
        weight = weight_kg if weight_kg and weight_kg > 0 else DEFAULT_WEIGHT_KG
        result = self.aggregator.check_serviceability(
            provider_code=provider_code,
            source_pincode=source_pincode,
            destination_pincode=destination_pincode,
            courier_code=courier_code,
            weight_kg=weight,
            timeout=self.timeout,
        )
        role_value = role.value if role else None
        if not result.success:
            logger.warning(
                "Serviceability check failed",
                provider_code=provider_code,
                courier_code=courier_code,
                reason=result.failure_reason,
            )
            return CourierCheck(
                courier_code=courier_code,
                serviceable=False,
                message=f"Serviceability check failed: {result.failure_reason}",
                role=role_value,
                errored=True,
            )
        return CourierCheck(
            courier_code=courier_code,
            serviceable=result.serviceable,
            message=result.message or ("Serviceable" if result.serviceable else "Not serviceable"),
            role=role_value,
            estimated_cost=result.estimated_cost,
            estimated_days=result.estimated_days,
        )

    def evaluate(self, context: ShippingContext, weight_kg: float | None = None) -> list[CourierCheck]:
        """Run the primary-then-secondary protocol; returns the checks actually made."""
        candidates = [(context.primary_courier, CourierRole.PRIMARY)]
        if context.secondary_courier:
            candidates.append((context.secondary_courier, CourierRole.SECONDARY))

        checks = []
        for courier_code, role in candidates:
            check = self.check(
                provider_code=context.provider_code,
                source_pincode=context.source_pincode,
                destination_pincode=context.destination_pincode,
                courier_code=courier_code,
                weight_kg=weight_kg,
                role=role,
            )
            checks.append(check)
            if check.serviceable:
                break
        return checks

    def select_courier(self, context: ShippingContext, weight_kg: float | None = None) -> CourierSelection:
        """Pick the courier to book with, or raise why none can be used."""
        if not context.has_routing:
            raise ConfigurationError("No courier routing configured for this vendor", missing="routing")
        if context.source_pincode is None:
            raise ConfigurationError("Vendor has no active warehouse to dispatch from", missing="warehouse")

        checks = self.evaluate(context, weight_kg)
        chosen = next((check for check in checks if check.serviceable), None)
        if chosen is not None:
            logger.info(
                "Courier selected",
                courier_code=chosen.courier_code,
                role=chosen.role,
                checks=len(checks),
            )
            return CourierSelection(
                courier_code=chosen.courier_code,
                role=chosen.role,
                estimated_cost=chosen.estimated_cost,
                estimated_days=chosen.estimated_days,
                checks=tuple(checks),
            )

        couriers = [check.courier_code for check in checks]
        if all(check.errored for check in checks):
            raise DependencyError(
                "Could not reach the shipping aggregator to check serviceability",
                couriers_checked=couriers,
            )
        raise UnserviceableRouteError(
            "No configured courier serves this route; create the shipment manually",
            couriers_checked=couriers,
        )
