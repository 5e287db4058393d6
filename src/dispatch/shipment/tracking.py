"""Shipment tracking — status advances and aggregator status sync.

Manual shipments are advanced by the vendor. Aggregator shipments are
brought up to date from the provider; the local status only ever moves
forward. Reaching DELIVERED marks the requisition fully delivered; reaching
FAILED hands the requisition back so it can be shipped again.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from dispatch.aggregator import get_aggregator, timeout_seconds
from dispatch.domain import dispatch
from dispatch.errors import AccessDeniedError, DependencyError
from dispatch.requisition.requisition import Requisition
from dispatch.shipment.shipment import Shipment, ShipmentMode, ShipmentStatus
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dispatch.command(part_of="Shipment")
class AdvanceShipmentStatus:
    shipment_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    status = String(required=True, choices=ShipmentStatus)
    reason = String(max_length=500)


@dispatch.command(part_of="Shipment")
class SyncShipmentStatus:
    """Pull the latest status of an aggregator-booked shipment."""

    shipment_id = Identifier(required=True)


def _propagate_delivery(shipment: Shipment) -> None:
    repo = current_domain.repository_for(Requisition)
    requisition = repo.get(shipment.requisition_id)
    requisition.mark_delivered(str(shipment.id))
    repo.add(requisition)


def _release_requisition(shipment: Shipment) -> None:
    repo = current_domain.repository_for(Requisition)
    requisition = repo.get(shipment.requisition_id)
    requisition.release_from_shipment(str(shipment.id), reason=shipment.failure_reason)
    repo.add(requisition)
    logger.info(
        "Requisition released after failed shipment",
        requisition_id=str(requisition.id),
        shipment_id=str(shipment.id),
        status=requisition.status,
    )


def sync_shipment(shipment: Shipment) -> list[ShipmentStatus]:
    """Bring one shipment up to date with the aggregator; returns statuses entered.

    Terminal and manual shipments are left alone.
    """
    if shipment.is_terminal or shipment.shipment_mode != ShipmentMode.API.value:
        return []

    result = get_aggregator().get_shipment_status(
        provider_code=shipment.courier.provider_code if shipment.courier else None,
        provider_shipment_reference=shipment.provider_shipment_reference,
        timeout=timeout_seconds(),
    )
    if not result.success:
        raise DependencyError(
            f"Could not fetch shipment status: {result.failure_reason}",
            shipment_id=str(shipment.id),
        )

    try:
        reported = ShipmentStatus(result.status)
    except ValueError:
        logger.warning("Unknown status reported by aggregator", shipment_id=str(shipment.id), status=result.status)
        reported = None

    entered = shipment.catch_up_to(reported) if reported else []
    shipment.record_provider_response(result.raw_response)
    current_domain.repository_for(Shipment).add(shipment)
    if ShipmentStatus.DELIVERED in entered:
        _propagate_delivery(shipment)
    elif ShipmentStatus.FAILED in entered:
        _release_requisition(shipment)
    return entered


@dispatch.command_handler(part_of=Shipment)
class ShipmentTrackingHandler:
    @handle(AdvanceShipmentStatus)
    def advance_status(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        if str(shipment.vendor_id) != str(command.vendor_id):
            raise AccessDeniedError("Shipment does not belong to this vendor")
        target = ShipmentStatus(command.status)
        shipment.advance(target, reason=command.reason)
        repo.add(shipment)
        if target == ShipmentStatus.DELIVERED:
            _propagate_delivery(shipment)
        elif target == ShipmentStatus.FAILED:
            _release_requisition(shipment)

    @handle(SyncShipmentStatus)
    def sync_status(self, command):
        shipment = current_domain.repository_for(Shipment).get(command.shipment_id)
        entered = sync_shipment(shipment)
        logger.info(
            "Shipment status synced",
            shipment_id=str(shipment.id),
            status=shipment.status,
            entered=[status.value for status in entered],
        )
        return shipment.status


def sync_pending_shipments() -> dict[str, int]:
    """Sync every open aggregator shipment, one at a time.

    A failure on one shipment is logged and counted; the rest still sync.
    """
    summary = {"synced": 0, "updated": 0, "failed": 0}
    for shipment in current_domain.repository_for(Shipment).awaiting_sync():
        try:
            status = current_domain.process(SyncShipmentStatus(shipment_id=str(shipment.id)), asynchronous=False)
        except DependencyError as exc:
            summary["failed"] += 1
            logger.warning("Shipment sync failed", shipment_id=str(shipment.id), error=exc.message)
            continue
        except ValidationError as exc:
            summary["failed"] += 1
            logger.warning("Shipment sync rejected", shipment_id=str(shipment.id), errors=exc.messages)
            continue
        summary["synced"] += 1
        if status != shipment.status:
            summary["updated"] += 1
    logger.info("Pending shipment sync complete", **summary)
    return summary
