from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Dict, FrozenSet, Union

from orders.models import Order, OrderStatus

if TYPE_CHECKING:
    from store.repositories import OrderRepository


class OrderStateException(Exception):
    """Raised when an invalid state transition is attempted."""
    pass


# Forward-only lifecycle: Pending -> Assigned -> Out for Delivery -> Delivered.
# A pending order may go straight out for delivery; Delivered is terminal.
TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.ASSIGNED, OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.ASSIGNED: frozenset({OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
}


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return requested in TRANSITIONS[current]


def advance(order: Order, requested_status: Union[OrderStatus, str], orders: OrderRepository) -> Order:
    """
    Validate and apply one status transition.

    Issues exactly one update keyed by order_id that writes the status only.
    If the write fails the UpdateError propagates and the caller keeps the old
    order. The signature gate for Delivered is the session's job, not this one.
    """
    try:
        requested = OrderStatus(requested_status)
    except ValueError:
        raise OrderStateException(f"Unknown order status {requested_status!r}") from None

    if not can_transition(order.status, requested):
        raise OrderStateException(
            f"Cannot move order {order.order_id} from {order.status.value} to {requested.value}"
        )

    orders.update_status(order.order_id, requested)

    # Order is a frozen dataclass, so return a new instance via replace
    return replace(order, status=requested)
