"""Payment capture lookup: the entry point of the card-paid order path.

``fetch_paid_capture`` asks the gateway for a checkout session, refuses it
unless the payment completed, and converts every amount from the
processor's minor units into major units. Nothing is written anywhere.
"""

from dataclasses import dataclass, field

import structlog
from protean.exceptions import ValidationError

from payments.gateway import get_gateway
from payments.gateway.port import CaptureLineItem, PaymentGateway
from shared.money import minor_to_major
from shared.order_view import CustomerInfo, LineItem

logger = structlog.get_logger(__name__)

DEFAULT_ITEM_NAME = "Item"


@dataclass(frozen=True)
class CapturedPayment:
    session_handle: str
    amount_major: float
    currency: str | None
    items: tuple[LineItem, ...] = field(default_factory=tuple)
    customer: CustomerInfo = field(default_factory=CustomerInfo)
    shipping_address: str | None = None


def _to_line_item(line: CaptureLineItem, currency: str | None) -> LineItem:
    qty = line.quantity or 1
    unit_price = minor_to_major(line.unit_amount, currency) or 0.0
    line_total = minor_to_major(line.amount_total, currency)
    if line_total is None:
        line_total = unit_price * qty
    return LineItem(
        name=line.description or line.product or DEFAULT_ITEM_NAME,
        qty=qty,
        unit_price=unit_price,
        line_total=line_total,
    )


def fetch_paid_capture(session_handle: str, gateway: PaymentGateway | None = None) -> CapturedPayment:
    """Retrieve a checkout session and extract what an order needs from it.

    Raises ValidationError if the handle is blank or the payment has not
    completed.
    """
    if not session_handle or not str(session_handle).strip():
        raise ValidationError({"session_id": ["Session handle is required"]})

    gateway = gateway or get_gateway()
    session = gateway.retrieve_capture(session_handle)

    if not session.is_paid:
        logger.info("capture_not_paid", session_handle=session_handle, payment_status=session.payment_status)
        raise ValidationError({"session_id": ["Payment not completed"]})

    currency = session.currency.lower() if session.currency else None
    return CapturedPayment(
        session_handle=session.session_handle,
        amount_major=minor_to_major(session.amount_total, currency) or 0.0,
        currency=currency,
        items=tuple(_to_line_item(line, currency) for line in session.line_items),
        customer=CustomerInfo(
            name=session.customer.name,
            email=session.customer.email,
            phone=session.customer.phone,
        ),
        shipping_address=session.shipping_address,
    )
