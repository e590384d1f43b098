"""Order status state machine.

    confirmed → preparing → ready → completed
    cancelled from any non-terminal state

``ready → ready`` is accepted so a repeated "ready" call can refresh the
timestamp and retry a notification that has not gone out yet. Entering
``ready`` is the only move that can owe the customer a message.
"""

from enum import Enum

from protean.exceptions import ValidationError


class OrderStatus(Enum):
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.READY, OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)


def parse_status(value) -> OrderStatus:
    """Coerce user input to an OrderStatus, rejecting anything unrecognised."""
    if isinstance(value, OrderStatus):
        return value
    if value is None or not str(value).strip():
        raise ValidationError({"status": ["Status is required"]})
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError({"status": [f"Unknown status '{value}'. Expected one of: {allowed}"]}) from None


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS.get(current, set())


def assert_can_transition(current: OrderStatus, target: OrderStatus) -> None:
    if not can_transition(current, target):
        raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})


def notification_owed(target: OrderStatus, notified_ready: bool) -> bool:
    """Whether moving into ``target`` should notify the customer."""
    return target is OrderStatus.READY and not notified_ready
