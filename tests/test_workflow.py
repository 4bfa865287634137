"""Unit tests for the order status transition relation."""

import pytest

from app.core.exceptions import ConflictError
from app.core.workflow import (ORDER_STATUS_SEQUENCE, can_transition,
                               default_message, ensure_transition,
                               is_terminal, next_status)
from app.models.order import OrderStatus


def test_sequence_walks_forward_one_step_at_a_time():
    """Every status may move to its immediate successor."""
    for current, successor in zip(ORDER_STATUS_SEQUENCE, ORDER_STATUS_SEQUENCE[1:]):
        assert next_status(current) == successor
        assert can_transition(current, successor)


def test_skipping_a_step_is_rejected():
    assert not can_transition(OrderStatus.PENDING, OrderStatus.PREPARING)
    assert not can_transition("pending", "picked_up")


def test_backward_and_same_state_are_rejected():
    assert not can_transition(OrderStatus.PREPARING, OrderStatus.PENDING)
    assert not can_transition(OrderStatus.CONFIRMED, OrderStatus.CONFIRMED)


@pytest.mark.parametrize("status", [s for s in ORDER_STATUS_SEQUENCE if s != OrderStatus.DELIVERED])
def test_cancel_allowed_from_every_open_state(status):
    assert can_transition(status, OrderStatus.CANCELLED)


@pytest.mark.parametrize("terminal", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
def test_terminal_states_never_move(terminal):
    assert is_terminal(terminal)
    assert next_status(OrderStatus.CANCELLED) is None
    for target in OrderStatus:
        assert not can_transition(terminal, target)


def test_ensure_transition_returns_target():
    assert ensure_transition("confirmed", "preparing") is OrderStatus.PREPARING


def test_ensure_transition_raises_conflict():
    with pytest.raises(ConflictError) as exc_info:
        ensure_transition(OrderStatus.PENDING, OrderStatus.PICKED_UP)
    assert exc_info.value.status_code == 409
    assert "pending" in exc_info.value.message
    assert "confirmed" in exc_info.value.error


def test_ensure_transition_from_terminal_mentions_state():
    with pytest.raises(ConflictError) as exc_info:
        ensure_transition(OrderStatus.DELIVERED, OrderStatus.CANCELLED)
    assert exc_info.value.error == "Order is already delivered"


def test_default_messages():
    assert default_message(OrderStatus.PENDING) == "Order placed successfully"
    assert default_message("on_the_way") == "Order is on the way"
    assert default_message(OrderStatus.CANCELLED) == "Order cancelled"
