"""Repository for the Shipment aggregate."""

from datetime import date

from dispatch.domain import dispatch
from dispatch.requisition.repository import QUERY_LIMIT
from dispatch.shipment.shipment import OPEN_STATUSES, Shipment, ShipmentMode


@dispatch.repository(part_of=Shipment)
class ShipmentRepository:
    def for_requisition(self, requisition_id: str) -> list[Shipment]:
        return self._dao.query.filter(requisition_id=str(requisition_id)).limit(QUERY_LIMIT).all().items

    def open_for(self, requisition_id: str, vendor_id: str) -> Shipment | None:
        """The non-terminal shipment for a requisition-vendor pair, if any."""
        for shipment in self.for_requisition(requisition_id):
            if str(shipment.vendor_id) == str(vendor_id) and shipment.status in OPEN_STATUSES:
                return shipment
        return None

    def awaiting_sync(self) -> list[Shipment]:
        """Aggregator-booked shipments that have not reached a terminal status."""
        shipments = self._dao.query.filter(shipment_mode=ShipmentMode.API.value).limit(QUERY_LIMIT).all().items
        return [shipment for shipment in shipments if shipment.status in OPEN_STATUSES]

    def awaiting_pickup(self, vendor_id: str) -> list[Shipment]:
        """The vendor's aggregator shipments still waiting to be collected, earliest pickup first."""
        shipments = (
            self._dao.query.filter(vendor_id=str(vendor_id), shipment_mode=ShipmentMode.API.value)
            .limit(QUERY_LIMIT)
            .all()
            .items
        )
        waiting = [shipment for shipment in shipments if shipment.is_awaiting_pickup]
        # Unscheduled pickups first, then by date
        return sorted(waiting, key=lambda shipment: (shipment.pickup_date is not None, shipment.pickup_date or date.min))
