"""Domain events for the OnlineOrder aggregate.

All events are versioned, immutable facts representing state changes.
"""

from protean.fields import Boolean, DateTime, Float, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="OnlineOrder")
class OrderPlaced:
    """An order record was created from a payment capture or a direct submission."""

    __version__ = 1

    order_id = String(required=True, sanitize=False)
    source = String(required=True)
    revenue = Float(required=True)
    cost = Float(required=True)
    date = String(required=True)
    item_count = Integer()
    placed_at = DateTime(required=True)


@ordering.event(part_of="OnlineOrder")
class OrderStatusChanged:
    """The kitchen moved an order along its lifecycle."""

    __version__ = 1

    order_id = String(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    notification_owed = Boolean(default=False)
    changed_at = DateTime(required=True)


@ordering.event(part_of="OnlineOrder")
class ReadyNotificationSent:
    """The customer was told their order is ready. Raised at most once per order."""

    __version__ = 1

    order_id = String(required=True)
    message_id = String()
    notified_at = DateTime(required=True)


@ordering.event(part_of="OnlineOrder")
class CustomerContactRecorded:
    """Customer contact details were copied onto the order's flat lookup fields."""

    __version__ = 1

    order_id = String(required=True, sanitize=False)
    email = String(sanitize=False)
    name = String(sanitize=False)
    phone = String(sanitize=False)
    recorded_at = DateTime(required=True)
