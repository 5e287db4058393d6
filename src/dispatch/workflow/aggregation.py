"""Order aggregation — fold vendor-split requisitions into logical orders.

A requisition spanning several vendors is stored as one order per vendor,
each pointing at the original through ``parent_order_id``. Readers see one
logical order per requisition:

- the parent itself is hidden whenever it has slices;
- the overall status is the slice that is furthest behind (lowest lattice rank);
- the display label is the most frequent slice label;
- items are concatenated in slice order and totals summed.

A slice whose parent is missing from the input and which has no sibling is
treated as a standalone order. Everything here is pure and never raises.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from dispatch.requisition.status import rank_of


@dataclass(frozen=True)
class OrderLine:
    product_id: str
    quantity: int
    product_name: str | None = None
    size: str | None = None
    price: float = 0.0


@dataclass(frozen=True)
class OrderRecord:
    """Read-side snapshot of one stored requisition."""

    id: str
    status: str
    requisition_number: str | None = None
    display_status: str | None = None
    parent_order_id: str | None = None
    vendor_id: str | None = None
    vendor_name: str | None = None
    employee_name: str | None = None
    dispatch_location: str | None = None
    items: tuple[OrderLine, ...] = ()
    po_numbers: tuple[str, ...] = ()
    total: float = 0.0
    order_date: datetime | None = None

    @classmethod
    def from_requisition(cls, req) -> "OrderRecord":
        return cls(
            id=str(req.id),
            status=req.status,
            requisition_number=req.requisition_number,
            display_status=req.display_status,
            parent_order_id=str(req.parent_order_id) if req.parent_order_id else None,
            vendor_id=str(req.vendor_id) if req.vendor_id else None,
            vendor_name=req.vendor_name,
            employee_name=req.employee_name,
            dispatch_location=req.dispatch_location,
            items=tuple(
                OrderLine(
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    product_name=item.product_name,
                    size=item.size,
                    price=item.price or 0.0,
                )
                for item in req.items
            ),
            po_numbers=tuple(req.po_number_list),
            total=req.total or 0.0,
            order_date=req.order_date,
        )


@dataclass(frozen=True)
class LogicalOrder:
    """One requisition as a reader sees it, whether or not it was split."""

    id: str
    status: str
    display_status: str | None
    orders: tuple[OrderRecord, ...]
    requisition_number: str | None = None
    requisition_numbers: tuple[str, ...] = ()
    items: tuple[OrderLine, ...] = ()
    total: float = 0.0
    po_numbers: tuple[str, ...] = ()
    vendor_ids: tuple[str, ...] = ()
    vendor_names: tuple[str, ...] = ()
    employee_name: str | None = None
    dispatch_location: str | None = None
    order_date: datetime | None = None
    is_split: bool = False
    pending_actions: tuple = field(default=())

    @property
    def member_ids(self) -> tuple[str, ...]:
        """Ids a document may reference to reach this logical order."""
        ids = [self.id]
        ids.extend(order.id for order in self.orders if order.id != self.id)
        return tuple(ids)

    def with_pending_actions(self, actions) -> "LogicalOrder":
        return replace(self, pending_actions=tuple(actions))


def _unique(values) -> tuple:
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return tuple(seen)


def _most_frequent(labels: list) -> str | None:
    """Most common label, ties broken by first occurrence."""
    present = [label for label in labels if label]
    if not present:
        return None
    counts = Counter(present)
    best = max(counts.values())
    return next(label for label in present if counts[label] == best)


def _single(order: OrderRecord) -> LogicalOrder:
    return LogicalOrder(
        id=order.id,
        status=order.status,
        display_status=order.display_status,
        orders=(order,),
        requisition_number=order.requisition_number,
        requisition_numbers=_unique([order.requisition_number]),
        items=order.items,
        total=order.total,
        po_numbers=order.po_numbers,
        vendor_ids=_unique([order.vendor_id]),
        vendor_names=_unique([order.vendor_name]),
        employee_name=order.employee_name,
        dispatch_location=order.dispatch_location,
        order_date=order.order_date,
    )


def _group(parent_id: str, children: list[OrderRecord], parent: OrderRecord | None) -> LogicalOrder:
    bottleneck = min(children, key=lambda child: rank_of(child.status))
    # The slice with the most lines speaks for the requisition's header fields
    primary = max(children, key=lambda child: len(child.items))
    items = tuple(line for child in children for line in child.items)
    requisition_number = parent.requisition_number if parent else primary.requisition_number
    return LogicalOrder(
        id=parent_id,
        status=bottleneck.status,
        display_status=_most_frequent([child.display_status for child in children]),
        orders=tuple(children),
        requisition_number=requisition_number,
        requisition_numbers=_unique(
            [requisition_number] + [child.requisition_number for child in children]
        ),
        items=items,
        total=round(sum(child.total or 0.0 for child in children), 2),
        po_numbers=_unique(po for child in children for po in child.po_numbers),
        vendor_ids=_unique(child.vendor_id for child in children),
        vendor_names=_unique(child.vendor_name for child in children),
        employee_name=primary.employee_name,
        dispatch_location=primary.dispatch_location,
        order_date=primary.order_date,
        is_split=True,
    )


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _newest_first(logical_order: LogicalOrder):
    if logical_order.order_date is None:
        return (1, 0.0)
    return (0, -_as_aware(logical_order.order_date).timestamp())


def aggregate(orders) -> list[LogicalOrder]:
    """Group orders into logical orders, newest first (undated last)."""
    orders = list(orders)
    present_ids = {order.id for order in orders}

    children_by_parent: dict[str, list[OrderRecord]] = defaultdict(list)
    for order in orders:
        if order.parent_order_id and order.parent_order_id != order.id:
            children_by_parent[order.parent_order_id].append(order)

    grouped = {
        parent_id
        for parent_id, children in children_by_parent.items()
        if len(children) >= 2 or parent_id in present_ids
    }
    parents = {order.id: order for order in orders if order.id in grouped}

    logical_orders = []
    emitted = set()
    for order in orders:
        if order.id in grouped:
            continue
        parent_id = order.parent_order_id
        if parent_id in grouped:
            if parent_id not in emitted:
                emitted.add(parent_id)
                logical_orders.append(_group(parent_id, children_by_parent[parent_id], parents.get(parent_id)))
        else:
            logical_orders.append(_single(order))

    return sorted(logical_orders, key=_newest_first)
