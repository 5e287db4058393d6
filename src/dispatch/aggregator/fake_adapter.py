"""Fake carrier aggregator — deterministic aggregator for testing and development.

Every courier serves every route by default. Individual couriers can be made
unserviceable or made to fail at transport level; bookings can be made to
fail or to come back without a tracking reference. Pickups follow the
booking switch. All calls are recorded
in ``calls``.
"""

from datetime import date
from uuid import uuid4

from dispatch.aggregator.port import (
    AggregatorPort,
    PickupResult,
    ServiceabilityResult,
    ShipmentBooking,
    ShipmentRequest,
    TrackingResult,
)


class FakeAggregator(AggregatorPort):
    """Configurable fake aggregator that succeeds by default."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Aggregator unavailable"
        self.omit_reference: bool = False
        self.courier_rules: dict[str, dict] = {}
        self.tracking_statuses: dict[str, str] = {}
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Aggregator unavailable",
        omit_reference: bool = False,
    ) -> None:
        """Configure booking and tracking behaviour at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.omit_reference = omit_reference

    def set_courier(
        self,
        courier_code: str,
        serviceable: bool = True,
        errors: bool = False,
        estimated_cost: float = 120.0,
        estimated_days: str = "3-5",
    ) -> None:
        """Configure how serviceability checks for one courier answer."""
        self.courier_rules[courier_code] = {
            "serviceable": serviceable,
            "errors": errors,
            "estimated_cost": estimated_cost,
            "estimated_days": estimated_days,
        }

    def set_tracking_status(self, provider_shipment_reference: str, status: str) -> None:
        self.tracking_statuses[provider_shipment_reference] = status

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def check_serviceability(
        self,
        provider_code: str,
        source_pincode: str,
        destination_pincode: str,
        courier_code: str,
        weight_kg: float,
        timeout: float,
    ) -> ServiceabilityResult:
        self.calls.append(
            {
                "method": "check_serviceability",
                "provider_code": provider_code,
                "source_pincode": source_pincode,
                "destination_pincode": destination_pincode,
                "courier_code": courier_code,
                "weight_kg": weight_kg,
                "timeout": timeout,
            }
        )
        rule = self.courier_rules.get(courier_code, {})
        if rule.get("errors"):
            return ServiceabilityResult(success=False, failure_reason=f"{courier_code} check timed out")
        if not rule.get("serviceable", True):
            return ServiceabilityResult(
                success=True,
                serviceable=False,
                message=f"{courier_code} does not serve {source_pincode} -> {destination_pincode}",
            )
        cost = rule.get("estimated_cost", 120.0)
        return ServiceabilityResult(
            success=True,
            serviceable=True,
            estimated_cost=round(cost * max(weight_kg, 1.0), 2),
            estimated_days=rule.get("estimated_days", "3-5"),
            message="Serviceable",
        )

    def create_shipment(self, provider_code: str, request: ShipmentRequest, timeout: float) -> ShipmentBooking:
        self.calls.append(
            {
                "method": "create_shipment",
                "provider_code": provider_code,
                "courier_code": request.courier_code,
                "reference": request.reference,
                "weight_kg": request.weight_kg,
                "timeout": timeout,
            }
        )
        if not self.should_succeed:
            return ShipmentBooking(success=False, failure_reason=self.failure_reason)

        reference = None if self.omit_reference else f"fake_shp_{uuid4().hex[:10]}"
        awb = None if self.omit_reference else f"AWB{uuid4().hex[:10].upper()}"
        raw = {
            "status": "NEW",
            "shipment_id": reference,
            "awb_code": awb,
            "courier_code": request.courier_code,
            "order_ref": request.reference,
        }
        return ShipmentBooking(
            success=True,
            provider_shipment_reference=reference,
            awb_number=awb,
            tracking_url=f"https://track.fake-aggregator.example.com/{awb}" if awb else None,
            courier_name=request.courier_code,
            raw_response=raw,
        )

    def get_shipment_status(self, provider_code: str, provider_shipment_reference: str, timeout: float) -> TrackingResult:
        self.calls.append(
            {
                "method": "get_shipment_status",
                "provider_code": provider_code,
                "provider_shipment_reference": provider_shipment_reference,
                "timeout": timeout,
            }
        )
        if not self.should_succeed:
            return TrackingResult(success=False, failure_reason=self.failure_reason)
        status = self.tracking_statuses.get(provider_shipment_reference, "IN_TRANSIT")
        return TrackingResult(
            success=True,
            status=status,
            raw_response={"shipment_id": provider_shipment_reference, "current_status": status},
        )

    def schedule_pickup(
        self,
        provider_code: str,
        provider_shipment_reference: str,
        pickup_date: date,
        timeout: float,
    ) -> PickupResult:
        self.calls.append(
            {
                "method": "schedule_pickup",
                "provider_code": provider_code,
                "provider_shipment_reference": provider_shipment_reference,
                "pickup_date": pickup_date,
                "timeout": timeout,
            }
        )
        if not self.should_succeed:
            return PickupResult(success=False, failure_reason=self.failure_reason)
        pickup_reference = f"PKP{uuid4().hex[:8].upper()}"
        return PickupResult(
            success=True,
            pickup_reference=pickup_reference,
            pickup_date=pickup_date,
            raw_response={
                "shipment_id": provider_shipment_reference,
                "pickup_token": pickup_reference,
                "pickup_scheduled_date": pickup_date.isoformat(),
            },
        )
