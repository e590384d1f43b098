"""Mapping every order origin onto one ``NormalizedOrder``.

Two inputs create orders and one rebuilds them:

- ``from_payment_capture``: a paid checkout session, already converted to
  major units by ``payments.capture``.
- ``from_direct_submission``: JSON posted by the storefront or the till for
  orders paid outside the processor (cash on delivery, counter sales).
  Older clients send ``title``/``quantity``/``price``/``total`` and split
  customer names; those spellings are accepted here and nowhere else.
- ``from_record``: the stored aggregate, read back for confirmation,
  receipts and notifications.
"""

import json
import math
from datetime import UTC, date, datetime

from protean.exceptions import ValidationError

from ordering.order.lifecycle import OrderStatus
from ordering.order.order import OnlineOrder, OrderSource
from payments.capture import CapturedPayment
from receipts.tracking import TrackingTokenProvider
from shared.money import round_half_up
from shared.order_view import CustomerInfo, FulfilmentInfo, LineItem, NormalizedOrder

DEFAULT_ITEM_NAME = "Item"


def today() -> str:
    return datetime.now(UTC).date().isoformat()


def _pick(data: dict, *keys, default=None):
    """First present, non-blank value among ``keys``."""
    for key in keys:
        value = data.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return default


def _amount(value, field_name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError({field_name: ["Must be a number"]})
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError({field_name: ["Must be a number"]}) from None
    if not math.isfinite(number):
        raise ValidationError({field_name: ["Must be a finite number"]})
    if number < 0:
        raise ValidationError({field_name: ["Must be greater than or equal to 0"]})
    return number


def _quantity(value, field_name: str) -> int:
    try:
        qty = int(value)
    except (TypeError, ValueError):
        raise ValidationError({field_name: ["Must be a whole number"]}) from None
    if qty != float(value) or qty < 1:
        raise ValidationError({field_name: ["Must be a whole number of at least 1"]})
    return qty


def _iso_day(value) -> str:
    if value is None:
        return today()
    try:
        return date.fromisoformat(str(value)[:10]).isoformat()
    except ValueError:
        raise ValidationError({"date": ["Must be a calendar day in YYYY-MM-DD form"]}) from None


# ---------------------------------------------------------------------------
# Payment capture path
# ---------------------------------------------------------------------------
def from_payment_capture(
    captured: CapturedPayment,
    tracking: TrackingTokenProvider,
    cost_ratio: float = 0.6,
    on_day: str | None = None,
) -> NormalizedOrder:
    revenue = captured.amount_major
    fulfilment = None
    if captured.shipping_address:
        fulfilment = FulfilmentInfo(
            method="delivery",
            address=captured.shipping_address,
            contact_name=captured.customer.name,
            contact_phone=captured.customer.phone,
        )

    return NormalizedOrder(
        order_id=captured.session_handle,
        status=OrderStatus.CONFIRMED.value,
        revenue=revenue,
        cost=float(round_half_up(revenue * cost_ratio)),
        date=on_day or today(),
        items=captured.items,
        customer=captured.customer,
        fulfilment=fulfilment,
        tracking_url=tracking.build_tracking_url(captured.session_handle),
        currency=captured.currency,
        source=OrderSource.PAYMENT_CAPTURE.value,
    )


# ---------------------------------------------------------------------------
# Direct submission path
# ---------------------------------------------------------------------------
def _line_from_submission(index: int, raw) -> LineItem:
    if not isinstance(raw, dict):
        raise ValidationError({"items": [f"Item {index + 1} must be an object"]})

    qty = _quantity(_pick(raw, "qty", "quantity", default=1), f"items[{index}].qty")
    unit_price = _amount(_pick(raw, "unit_price", "unitPrice", "price", default=0), f"items[{index}].unit_price")
    line_total = _pick(raw, "line_total", "lineTotal", "total")
    line_total = (
        _amount(line_total, f"items[{index}].line_total") if line_total is not None else unit_price * qty
    )
    return LineItem(
        name=str(_pick(raw, "name", "title", default=DEFAULT_ITEM_NAME)),
        qty=qty,
        unit_price=unit_price,
        line_total=line_total,
    )


def _contact_name(data: dict) -> str | None:
    name = _pick(data, "name")
    if name:
        return str(name)
    parts = [_pick(data, "first_name", "firstName"), _pick(data, "last_name", "lastName")]
    joined = " ".join(str(part) for part in parts if part)
    return joined or None


def _customer_from_submission(raw) -> CustomerInfo:
    if not isinstance(raw, dict):
        return CustomerInfo()
    return CustomerInfo(
        name=_contact_name(raw),
        email=_pick(raw, "email"),
        phone=_pick(raw, "phone"),
    )


def _fulfilment_from_submission(raw) -> FulfilmentInfo | None:
    if not isinstance(raw, dict) or not raw:
        return None
    contact = _pick(raw, "contact", "customer", default={})
    contact = contact if isinstance(contact, dict) else {}
    return FulfilmentInfo(
        method=_pick(raw, "method", "type"),
        address=_pick(raw, "address"),
        scheduled_for=_pick(raw, "scheduled_for", "scheduledFor"),
        note=_pick(raw, "note"),
        contact_name=_contact_name(contact),
        contact_email=_pick(contact, "email"),
        contact_phone=_pick(contact, "phone"),
    )


def from_direct_submission(submission: dict, tracking: TrackingTokenProvider) -> NormalizedOrder:
    """Validate and normalize an order that did not go through the processor."""
    if not isinstance(submission, dict):
        raise ValidationError({"order": ["Order submission must be an object"]})

    order_id = _pick(submission, "order_id", "orderId")
    if not order_id:
        raise ValidationError({"order_id": ["Order id is required"]})
    order_id = str(order_id).strip()

    if _pick(submission, "revenue") is None:
        raise ValidationError({"revenue": ["Revenue is required"]})
    revenue = _amount(submission["revenue"], "revenue")
    cost = _amount(_pick(submission, "cost", default=0), "cost")

    raw_items = submission.get("items") or []
    if not isinstance(raw_items, list):
        raise ValidationError({"items": ["Items must be a list"]})

    currency = _pick(submission, "currency")
    return NormalizedOrder(
        order_id=order_id,
        status=OrderStatus.CONFIRMED.value,
        revenue=revenue,
        cost=cost,
        date=_iso_day(_pick(submission, "date")),
        items=tuple(_line_from_submission(index, raw) for index, raw in enumerate(raw_items)),
        customer=_customer_from_submission(submission.get("customer")),
        fulfilment=_fulfilment_from_submission(submission.get("fulfilment") or submission.get("fulfillment")),
        tracking_url=tracking.build_tracking_url(order_id),
        currency=str(currency).lower() if currency else None,
        source=OrderSource.DIRECT.value,
    )


# ---------------------------------------------------------------------------
# Stored record
# ---------------------------------------------------------------------------
def from_record(order: OnlineOrder, tracking: TrackingTokenProvider) -> NormalizedOrder:
    envelope_customer = order.customer
    customer = CustomerInfo(
        name=(envelope_customer.name if envelope_customer else None) or order.customer_name,
        email=(envelope_customer.email if envelope_customer else None) or order.customer_email,
        phone=(envelope_customer.phone if envelope_customer else None) or order.customer_phone,
    )

    fulfilment = None
    if order.fulfilment:
        details = order.fulfilment
        fulfilment = FulfilmentInfo(
            method=details.method,
            address=details.address,
            scheduled_for=details.scheduled_for,
            note=details.note,
            contact_name=details.contact_name,
            contact_email=details.contact_email,
            contact_phone=details.contact_phone,
        )

    return NormalizedOrder(
        order_id=order.order_id,
        status=order.status,
        revenue=order.revenue,
        cost=order.cost,
        date=order.date,
        items=tuple(
            LineItem(name=line.name, qty=line.qty, unit_price=line.unit_price, line_total=line.line_total)
            for line in order.ordered_items()
        ),
        customer=customer,
        fulfilment=fulfilment,
        tracking_url=tracking.build_tracking_url(order.order_id),
        currency=order.currency,
        source=order.source,
    )


# ---------------------------------------------------------------------------
# Command payloads
# ---------------------------------------------------------------------------
def placement_payload(normalized: NormalizedOrder) -> dict:
    """Fields for a ``PlaceOrder`` command, nested parts serialized as JSON."""
    fulfilment = normalized.fulfilment
    return {
        "order_id": normalized.order_id,
        "source": normalized.source,
        "date": normalized.date,
        "revenue": normalized.revenue,
        "cost": normalized.cost,
        "currency": normalized.currency,
        "items": json.dumps(
            [
                {"name": item.name, "qty": item.qty, "unit_price": item.unit_price, "line_total": item.line_total}
                for item in normalized.items
            ]
        ),
        "customer": json.dumps(
            {
                "name": normalized.customer.name,
                "email": normalized.customer.email,
                "phone": normalized.customer.phone,
            }
        ),
        "fulfilment": json.dumps(
            {
                "method": fulfilment.method,
                "address": fulfilment.address,
                "scheduled_for": fulfilment.scheduled_for,
                "note": fulfilment.note,
                "contact_name": fulfilment.contact_name,
                "contact_email": fulfilment.contact_email,
                "contact_phone": fulfilment.contact_phone,
            }
            if fulfilment
            else {}
        ),
    }
