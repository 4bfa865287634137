"""
Order status workflow.

Orders advance one step at a time along ``ORDER_STATUS_SEQUENCE``;
``cancelled`` is reachable from every non-terminal state.  Delivered and
cancelled orders never move again.

These helpers are pure: the endpoints lock the order row, call
``ensure_transition`` and append the tracking entry themselves.
"""

from __future__ import annotations

from app.core.exceptions import ConflictError
from app.models.order import OrderStatus

ORDER_STATUS_SEQUENCE: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY_FOR_PICKUP,
    OrderStatus.PICKED_UP,
    OrderStatus.ON_THE_WAY,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)

# Pending statuses as counted by the admin dashboard
OPEN_STATUSES: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
)

ORDER_PLACED_MESSAGE = "Order placed successfully"

_DEFAULT_MESSAGES: dict[OrderStatus, str] = {
    OrderStatus.PENDING: ORDER_PLACED_MESSAGE,
    OrderStatus.CONFIRMED: "Order confirmed by restaurant",
    OrderStatus.PREPARING: "Order is being prepared",
    OrderStatus.READY_FOR_PICKUP: "Order is ready for pickup",
    OrderStatus.PICKED_UP: "Order picked up by delivery driver",
    OrderStatus.ON_THE_WAY: "Order is on the way",
    OrderStatus.DELIVERED: "Order delivered successfully",
    OrderStatus.CANCELLED: "Order cancelled",
}


def is_terminal(status: OrderStatus | str) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def next_status(status: OrderStatus | str) -> OrderStatus | None:
    """Immediate successor of *status*, or ``None`` at the end of the line."""
    status = OrderStatus(status)
    if status not in ORDER_STATUS_SEQUENCE:
        return None
    idx = ORDER_STATUS_SEQUENCE.index(status)
    if idx + 1 >= len(ORDER_STATUS_SEQUENCE):
        return None
    return ORDER_STATUS_SEQUENCE[idx + 1]


def can_transition(current: OrderStatus | str, target: OrderStatus | str) -> bool:
    current, target = OrderStatus(current), OrderStatus(target)
    if current in TERMINAL_STATUSES:
        return False
    return target == OrderStatus.CANCELLED or target == next_status(current)


def ensure_transition(current: OrderStatus | str, target: OrderStatus | str) -> OrderStatus:
    """Return *target* as an ``OrderStatus`` or raise ``ConflictError``."""
    if not can_transition(current, target):
        current, target = OrderStatus(current), OrderStatus(target)
        if current in TERMINAL_STATUSES:
            detail = f"Order is already {current.value}"
        else:
            successor = next_status(current)
            allowed = ", ".join(s.value for s in (successor, OrderStatus.CANCELLED) if s)
            detail = f"Allowed next statuses: {allowed}"
        raise ConflictError(
            f"Cannot change order status from {current.value} to {target.value}",
            error=detail,
        )
    return OrderStatus(target)


def default_message(status: OrderStatus | str) -> str:
    return _DEFAULT_MESSAGES.get(OrderStatus(status), "Order status updated")
