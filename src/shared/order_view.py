"""Canonical, transient order representation handed between contexts.

A ``NormalizedOrder`` is rebuilt from the stored record on every
confirmation, receipt or status request. Receipts and notifications only
ever see this shape, never the aggregate.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LineItem:
    name: str
    qty: int
    unit_price: float
    line_total: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "qty": self.qty,
            "unitPrice": self.unit_price,
            "lineTotal": self.line_total,
        }


@dataclass(frozen=True)
class CustomerInfo:
    name: str | None = None
    email: str | None = None
    phone: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.email or self.phone)

    def to_dict(self) -> dict:
        return {"name": self.name, "email": self.email, "phone": self.phone}


@dataclass(frozen=True)
class FulfilmentInfo:
    """How the order reaches the customer, plus the contact given for it."""

    method: str | None = None
    address: str | None = None
    scheduled_for: str | None = None
    note: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "address": self.address,
            "scheduledFor": self.scheduled_for,
            "note": self.note,
            "contact": {
                "name": self.contact_name,
                "email": self.contact_email,
                "phone": self.contact_phone,
            },
        }


@dataclass(frozen=True)
class NormalizedOrder:
    order_id: str
    status: str
    revenue: float
    cost: float
    date: str
    items: tuple[LineItem, ...] = field(default_factory=tuple)
    customer: CustomerInfo = field(default_factory=CustomerInfo)
    fulfilment: FulfilmentInfo | None = None
    tracking_url: str | None = None
    currency: str | None = None
    source: str | None = None

    @property
    def items_subtotal(self) -> float:
        return sum(item.line_total for item in self.items)

    def to_dict(self) -> dict:
        return {
            "orderId": self.order_id,
            "status": self.status,
            "revenue": self.revenue,
            "cost": self.cost,
            "date": self.date,
            "currency": self.currency,
            "source": self.source,
            "items": [item.to_dict() for item in self.items],
            "customer": self.customer.to_dict(),
            "fulfilment": self.fulfilment.to_dict() if self.fulfilment else None,
            "trackingUrl": self.tracking_url,
        }
