"""Mixed workload scenario.

Combines requisition and shipment journeys with weights that model a
realistic procurement day. This is the recommended scenario for load
baseline testing.
"""

from locust import HttpUser, between

from loadtests.scenarios.requisitions import (
    ApprovalChainJourney,
    DocumentPipelineJourney,
    RejectionJourney,
    SplitOrderJourney,
)
from loadtests.scenarios.shipping import AutomaticShipmentJourney, ManualShipmentJourney


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload across the requisition and shipment surfaces.

    Weight distribution:

    Requisitions (60%):
    - Approval chain: most common write path
    - Split orders: exercises the logical-order read path
    - Documents: GRNs and invoices attached after approval
    - Rejections: occasional

    Shipments (40%):
    - Manual entry: the default for most companies
    - Automatic booking: routed through the aggregator with fallback
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        # Requisitions (60%)
        ApprovalChainJourney: 6,
        SplitOrderJourney: 3,
        DocumentPipelineJourney: 2,
        RejectionJourney: 1,
        # Shipments (40%)
        ManualShipmentJourney: 5,
        AutomaticShipmentJourney: 3,
    }
