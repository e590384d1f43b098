"""Order confirmation: creating orders and reading them back.

Both entry paths end in the same idempotent ``PlaceOrder`` command. A
repeated webhook delivery, a refreshed success page or a re-submitted till
order all land on the record created the first time.
"""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.domain import logger
from ordering.order.contact import SaveOrderContact
from ordering.order.normalizer import (
    from_direct_submission,
    from_payment_capture,
    from_record,
    placement_payload,
)
from ordering.order.order import OnlineOrder
from ordering.order.placement import PlaceOrder
from ordering.pipeline.components import store_errors, tracking_provider
from payments.capture import fetch_paid_capture
from shared.config import get_settings
from shared.order_view import NormalizedOrder


def _place(normalized: NormalizedOrder) -> bool:
    """Create the order if absent. Returns True when this call created it."""
    command = PlaceOrder(**placement_payload(normalized))
    with store_errors("place_order"):
        try:
            result = current_domain.process(command, asynchronous=False)
        except ValidationError as exc:
            # Lost an insert race: the unique order_id constraint rejected the duplicate
            repo = current_domain.repository_for(OnlineOrder)
            if "order_id" in exc.messages and repo.exists(normalized.order_id):
                logger.info("order_already_exists", order_id=normalized.order_id)
                return False
            raise
    return result["created"]


def load_order(order_id: str) -> NormalizedOrder:
    """Rebuild the normalized view of a stored order. Raises ObjectNotFoundError."""
    if not order_id or not str(order_id).strip():
        raise ValidationError({"order_id": ["Order id is required"]})

    with store_errors("load_order"):
        repo = current_domain.repository_for(OnlineOrder)
        order = repo.find_by_order_id(str(order_id).strip())
    return from_record(order, tracking_provider())


def submit_direct_order(submission: dict) -> tuple[NormalizedOrder, bool]:
    """Create an offline order (cash on delivery, counter sale) if it is new."""
    normalized = from_direct_submission(submission, tracking_provider())
    created = _place(normalized)
    return load_order(normalized.order_id), created


def confirm_order(session_handle: str | None = None, order_id: str | None = None) -> NormalizedOrder:
    """Confirm an order by payment session handle or by order id (exactly one).

    The session path creates the order on first sight of a paid capture. The
    order id path only reads.
    """
    session_handle = (session_handle or "").strip() or None
    order_id = (order_id or "").strip() or None

    if session_handle and order_id:
        raise ValidationError({"order": ["Supply either a session handle or an order id, not both"]})
    if not session_handle and not order_id:
        raise ValidationError({"order": ["A session handle or an order id is required"]})

    if order_id:
        return load_order(order_id)

    settings = get_settings()
    captured = fetch_paid_capture(session_handle)
    normalized = from_payment_capture(captured, tracking_provider(), cost_ratio=settings.cost_ratio)
    created = _place(normalized)
    logger.info("order_confirmed", order_id=normalized.order_id, created=created)
    return load_order(normalized.order_id)


def public_status(order_id: str) -> dict:
    order = load_order(order_id)
    return {
        "order_id": order.order_id,
        "status": order.status,
        "revenue": order.revenue,
        "cost": order.cost,
        "date": order.date,
    }


def list_orders(date_from: str | None = None, date_to: str | None = None) -> list[NormalizedOrder]:
    tracking = tracking_provider()
    with store_errors("list_orders"):
        repo = current_domain.repository_for(OnlineOrder)
        orders = repo.list_between(date_from, date_to)
    return [from_record(order, tracking) for order in orders]


def save_order_contact(order_id: str, email: str) -> dict:
    if not order_id:
        raise ValidationError({"order_id": ["Order id is required"]})
    with store_errors("save_contact"):
        return current_domain.process(SaveOrderContact(order_id=order_id, email=email or ""), asynchronous=False)
