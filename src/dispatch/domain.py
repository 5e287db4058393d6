"""Dispatch bounded context — requisition workflow and shipment routing.

Groups vendor-split requisitions into logical orders, works out which human
action is pending on each, and routes shipments either through a carrier
aggregator (primary/secondary courier fallback) or through manual entry.
Uses CQRS: aggregates are persisted as current state; events are recorded
for audit and downstream consumers.
"""

from protean.domain import Domain

from dispatch.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

dispatch = Domain(name="dispatch")
