"""Carrier aggregator port — abstract interface for shipping aggregators.

An aggregator (Shiprocket-style) fronts many couriers: it answers whether a
courier serves a pincode pair, books shipments and their pickups, and
reports their status.
The domain programs against this port; adapters are swapped via
configuration. Adapters never raise for remote failures; they return a
result with ``success=False`` and a ``failure_reason``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class ServiceabilityResult:
    """Answer to "does this courier serve this route?"."""

    success: bool
    serviceable: bool = False
    estimated_cost: float | None = None
    estimated_days: str | None = None
    message: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class ShipmentRequest:
    """What the aggregator needs to book a pickup."""

    reference: str
    courier_code: str
    source_pincode: str
    destination_pincode: str
    destination_address: dict
    weight_kg: float
    length_cm: float
    breadth_cm: float
    height_cm: float
    pickup_contact: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ShipmentBooking:
    """Result of a booking attempt."""

    success: bool
    provider_shipment_reference: str | None = None
    awb_number: str | None = None
    tracking_url: str | None = None
    courier_name: str | None = None
    raw_response: dict | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class PickupResult:
    """Result of asking the courier to collect a booked shipment."""

    success: bool
    pickup_reference: str | None = None
    pickup_date: date | None = None
    raw_response: dict | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class TrackingResult:
    """Latest status the aggregator reports for a booked shipment."""

    success: bool
    status: str | None = None
    raw_response: dict | None = None
    failure_reason: str | None = None


class AggregatorPort(ABC):
    """Abstract carrier aggregator interface."""

    @abstractmethod
    def check_serviceability(
        self,
        provider_code: str,
        source_pincode: str,
        destination_pincode: str,
        courier_code: str,
        weight_kg: float,
        timeout: float,
    ) -> ServiceabilityResult:
        """Ask whether ``courier_code`` serves the pincode pair for the given weight."""
        ...

    @abstractmethod
    def create_shipment(self, provider_code: str, request: ShipmentRequest, timeout: float) -> ShipmentBooking:
        """Book a shipment with the aggregator."""
        ...

    @abstractmethod
    def get_shipment_status(self, provider_code: str, provider_shipment_reference: str, timeout: float) -> TrackingResult:
        """Fetch the current status of a booked shipment.

        ``status`` is one of CREATED, IN_TRANSIT, DELIVERED, FAILED.
        """
        ...

    @abstractmethod
    def schedule_pickup(
        self,
        provider_code: str,
        provider_shipment_reference: str,
        pickup_date: date,
        timeout: float,
    ) -> PickupResult:
        """Ask the courier to collect a booked shipment on ``pickup_date``.

        Calling it again for the same shipment moves the pickup to the new date.
        """
        ...
