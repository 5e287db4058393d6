"""Pickup scheduling for aggregator-booked shipments.

The courier is asked first; the shipment only records a pickup the
aggregator accepted. Scheduling again moves the pickup to the new date.
"""

from protean import handle
from protean.fields import Date, Identifier
from protean.utils.globals import current_domain

from dispatch.aggregator import get_aggregator, timeout_seconds
from dispatch.domain import dispatch
from dispatch.errors import AccessDeniedError, DependencyError
from dispatch.shipment.shipment import Shipment
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Shipment")
class SchedulePickup:
    shipment_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    pickup_date = Date(required=True)


@dispatch.command_handler(part_of=Shipment)
class PickupHandler:
    @handle(SchedulePickup)
    def schedule_pickup(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        if str(shipment.vendor_id) != str(command.vendor_id):
            raise AccessDeniedError("Shipment does not belong to this vendor")
        shipment.assert_pickup_allowed(command.pickup_date)

        result = get_aggregator().schedule_pickup(
            provider_code=shipment.courier.provider_code if shipment.courier else None,
            provider_shipment_reference=shipment.provider_shipment_reference,
            pickup_date=command.pickup_date,
            timeout=timeout_seconds(),
        )
        if not result.success:
            raise DependencyError(
                f"Could not schedule pickup: {result.failure_reason}",
                shipment_id=str(shipment.id),
            )

        rescheduled = shipment.pickup_date is not None
        shipment.schedule_pickup(result.pickup_date or command.pickup_date, result.pickup_reference)
        shipment.record_provider_response(result.raw_response)
        repo.add(shipment)
        logger.info(
            "Pickup rescheduled" if rescheduled else "Pickup scheduled",
            shipment_id=str(shipment.id),
            pickup_date=shipment.pickup_date.isoformat(),
            pickup_reference=shipment.pickup_reference,
        )
        return shipment.pickup_date
