"""OnlineOrder aggregate (CQRS) — the single source of truth for an order.

One record exists per external order id: a payment session handle for
card-paid orders, or a caller-chosen id for direct (cash on delivery,
counter) orders. The status envelope is held as typed fields, line
entities and value objects, validated once on write:

    status / status_updated_at / notified_ready
    items       → OrderLine entities
    customer    → CustomerContact
    fulfilment  → FulfilmentDetails

``customer_email``, ``customer_name`` and ``customer_phone`` are flat copies
kept for cheap lookups. They are filled the first time a value is seen and
never overwritten by later discoveries.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Integer,
    String,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import (
    CustomerContactRecorded,
    OrderPlaced,
    OrderStatusChanged,
    ReadyNotificationSent,
)
from ordering.order.lifecycle import OrderStatus, assert_can_transition, notification_owed


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderSource(Enum):
    PAYMENT_CAPTURE = "payment_capture"
    DIRECT = "direct"


class ContactSource(Enum):
    OVERRIDE = "override"
    CUSTOMER = "customer"
    FULFILMENT = "fulfilment"
    STORED = "stored"


@dataclass(frozen=True)
class EmailResolution:
    email: str
    source: ContactSource

    @property
    def from_envelope(self) -> bool:
        return self.source in (ContactSource.CUSTOMER, ContactSource.FULFILMENT)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="OnlineOrder")
class CustomerContact:
    """Who placed the order, as reported by the payment processor or the storefront."""

    name = String(max_length=255, sanitize=False)
    email = String(max_length=254, sanitize=False)
    phone = String(max_length=50, sanitize=False)


@ordering.value_object(part_of="OnlineOrder")
class FulfilmentDetails:
    """How the order reaches the customer: pickup, delivery or dine-in.

    The contact fields hold the details given for the hand-off, which can
    differ from the paying customer's.
    """

    method = String(max_length=50, sanitize=False)
    address = String(max_length=500, sanitize=False)
    scheduled_for = String(max_length=50, sanitize=False)
    note = String(max_length=1000, sanitize=False)
    contact_name = String(max_length=255, sanitize=False)
    contact_email = String(max_length=254, sanitize=False)
    contact_phone = String(max_length=50, sanitize=False)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="OnlineOrder")
class OrderLine:
    """One purchased line. ``line_total`` is authoritative when the source supplied it."""

    name = String(required=True, max_length=255, sanitize=False)
    qty = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)
    position = Integer(default=0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class OnlineOrder:
    order_id = String(required=True, max_length=255, unique=True, sanitize=False)
    source = String(choices=OrderSource, required=True)
    date = String(required=True, max_length=10)  # YYYY-MM-DD
    revenue = Float(required=True, min_value=0.0)
    cost = Float(required=True, min_value=0.0)
    currency = String(max_length=3)
    status = String(choices=OrderStatus, default=OrderStatus.CONFIRMED.value)
    status_updated_at = DateTime()
    notified_ready = Boolean(default=False)
    items = HasMany(OrderLine)
    customer = ValueObject(CustomerContact)
    fulfilment = ValueObject(FulfilmentDetails)
    customer_email = String(max_length=254, sanitize=False)
    customer_name = String(max_length=255, sanitize=False)
    customer_phone = String(max_length=50, sanitize=False)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_id,
        source,
        date,
        revenue,
        cost,
        items_data,
        customer=None,
        fulfilment=None,
        currency=None,
    ):
        """Build a new order in the ``confirmed`` state.

        Args:
            order_id: External order id (session handle or direct order id).
            source: An OrderSource.
            items_data: List of dicts with name, qty, unit_price, line_total.
            customer: Optional dict with name, email, phone.
            fulfilment: Optional dict with FulfilmentDetails fields.
        """
        now = datetime.now(UTC)
        customer = {key: value for key, value in (customer or {}).items() if value}
        fulfilment = {key: value for key, value in (fulfilment or {}).items() if value}

        order = cls(
            order_id=order_id,
            source=source.value,
            date=date,
            revenue=revenue,
            cost=cost,
            currency=currency,
            status=OrderStatus.CONFIRMED.value,
            status_updated_at=now,
            notified_ready=False,
            customer=CustomerContact(**customer) if customer else None,
            fulfilment=FulfilmentDetails(**fulfilment) if fulfilment else None,
            customer_email=customer.get("email"),
            customer_name=customer.get("name"),
            customer_phone=customer.get("phone"),
            created_at=now,
            updated_at=now,
        )
        for position, item in enumerate(items_data):
            order.add_items(OrderLine(position=position, **item))

        order.raise_(
            OrderPlaced(
                order_id=order_id,
                source=source.value,
                revenue=revenue,
                cost=cost,
                date=date,
                item_count=len(items_data),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def change_status(self, target: OrderStatus) -> bool:
        """Move to ``target``. Returns True when the move owes a ready notification."""
        current = OrderStatus(self.status)
        assert_can_transition(current, target)

        owed = notification_owed(target, self.notified_ready)
        now = datetime.now(UTC)
        self.status = target.value
        self.status_updated_at = now
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=self.order_id,
                previous_status=current.value,
                status=target.value,
                notification_owed=owed,
                changed_at=now,
            )
        )
        return owed

    def mark_ready_notified(self, message_id=None) -> bool:
        """Close the notify-once gate. Returns False if it was already closed."""
        if self.notified_ready:
            return False

        now = datetime.now(UTC)
        self.notified_ready = True
        self.updated_at = now
        self.raise_(
            ReadyNotificationSent(
                order_id=self.order_id,
                message_id=message_id,
                notified_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Customer contact
    # -------------------------------------------------------------------
    def resolve_customer_email(self, override=None) -> EmailResolution | None:
        """Pick the address a notification should go to.

        Precedence: explicit override, envelope customer, fulfilment contact,
        flat ``customer_email``.
        """
        candidates = (
            (override, ContactSource.OVERRIDE),
            (self.customer.email if self.customer else None, ContactSource.CUSTOMER),
            (self.fulfilment.contact_email if self.fulfilment else None, ContactSource.FULFILMENT),
            (self.customer_email, ContactSource.STORED),
        )
        for value, source in candidates:
            if value and value.strip():
                return EmailResolution(email=value.strip(), source=source)
        return None

    def needs_contact_backfill(self, resolution: EmailResolution | None) -> bool:
        return resolution is not None and resolution.from_envelope and not self.customer_email

    def record_contact(self, email=None, name=None, phone=None) -> bool:
        """Fill empty flat contact fields. Existing values are kept."""
        changes = {}
        if email and not self.customer_email:
            changes["customer_email"] = email
        if name and not self.customer_name:
            changes["customer_name"] = name
        if phone and not self.customer_phone:
            changes["customer_phone"] = phone
        if not changes:
            return False

        now = datetime.now(UTC)
        for field_name, value in changes.items():
            setattr(self, field_name, value)
        self.updated_at = now

        self.raise_(
            CustomerContactRecorded(
                order_id=self.order_id,
                email=changes.get("customer_email"),
                name=changes.get("customer_name"),
                phone=changes.get("customer_phone"),
                recorded_at=now,
            )
        )
        return True

    def update_contact_email(self, email):
        """Store an email the customer gave after ordering (envelope and flat copy)."""
        current = self.customer
        self.customer = CustomerContact(
            name=current.name if current else None,
            email=email,
            phone=current.phone if current else None,
        )
        now = datetime.now(UTC)
        self.customer_email = email
        self.updated_at = now

        self.raise_(
            CustomerContactRecorded(
                order_id=self.order_id,
                email=email,
                recorded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    def ordered_items(self):
        """Line items in the order they were submitted."""
        return sorted(self.items, key=lambda line: line.position or 0)
