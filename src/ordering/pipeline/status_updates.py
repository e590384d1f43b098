"""Kitchen status updates and the "order ready" notification.

    persist status → render receipt ┐
                   → encode QR      ┴→ dispatch → close notify-once gate

The status change is committed before anything is rendered or sent, and
the gate is closed in a second write only after a successful send. A
failed or unsendable notification leaves the gate open, so calling
``update_order_status(id, "ready")`` again (or ``resend_ready_notification``)
retries it. The notification outcome never changes the result of the
status update.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from notifications.outcome import DispatchOutcome
from ordering.domain import logger
from ordering.order.contact import BackfillCustomerContact, validate_email_address
from ordering.order.lifecycle import OrderStatus, parse_status
from ordering.order.normalizer import from_record
from ordering.order.order import EmailResolution, OnlineOrder
from ordering.order.status import RecordReadyNotified, UpdateOrderStatus
from ordering.pipeline.components import notification_dispatcher, receipt_renderer, store_errors, tracking_provider
from receipts.layout import total_paid
from receipts.renderer import ReceiptDocument
from receipts.tracking import TrackingTokenProvider
from shared.errors import NotificationError
from shared.order_view import NormalizedOrder


@dataclass(frozen=True)
class StatusUpdateResult:
    order_id: str
    status: str
    notification: DispatchOutcome | None = None


def update_order_status(order_id: str, status: str, email_override: str | None = None) -> StatusUpdateResult:
    if not order_id or not str(order_id).strip():
        raise ValidationError({"order_id": ["Order id is required"]})
    target = parse_status(status)
    if email_override:
        email_override = validate_email_address(email_override)

    with store_errors("update_status"):
        result = current_domain.process(
            UpdateOrderStatus(order_id=str(order_id).strip(), status=target.value),
            asynchronous=False,
        )

    notification = None
    if result["notification_owed"]:
        notification = notify_ready(result["order_id"], email_override)

    return StatusUpdateResult(order_id=result["order_id"], status=result["status"], notification=notification)


def resend_ready_notification(order_id: str, email_override: str | None = None) -> DispatchOutcome:
    """Operator retry for a ready notification that did not go out."""
    if email_override:
        email_override = validate_email_address(email_override)

    with store_errors("resend_notification"):
        order = current_domain.repository_for(OnlineOrder).find_by_order_id(order_id)

    if order.current_status is not OrderStatus.READY:
        raise ValidationError({"status": [f"Order is {order.status}; only ready orders can be re-notified"]})
    if order.notified_ready:
        raise ValidationError({"notified_ready": ["Customer has already been notified"]})

    return notify_ready(order.order_id, email_override)


def notify_ready(order_id: str, email_override: str | None = None) -> DispatchOutcome:
    with store_errors("notify_ready"):
        order = current_domain.repository_for(OnlineOrder).find_by_order_id(order_id)

    tracking = tracking_provider()
    normalized = from_record(order, tracking)
    resolution = order.resolve_customer_email(email_override)
    if order.needs_contact_backfill(resolution):
        _backfill_contact(order, resolution)

    try:
        receipt, tracking_image = _render_attachments(normalized, tracking)
    except NotificationError as exc:
        logger.warning("notification_failed", order_id=order_id, error=exc.message)
        return DispatchOutcome.failed(exc.message, recipient=resolution.email if resolution else None)

    outcome = notification_dispatcher().send(
        normalized,
        tracking_image,
        receipt,
        recipient=resolution.email if resolution else None,
        total_paid=total_paid(normalized),
    )
    logger.info(
        "ready_notification_dispatched",
        order_id=order_id,
        outcome=outcome.status.value,
        recipient_source=resolution.source.value if resolution else None,
        reason=outcome.reason,
    )

    if outcome.delivered:
        _close_gate(order_id, outcome.message_id)
    return outcome


def _render_attachments(
    normalized: NormalizedOrder, tracking: TrackingTokenProvider
) -> tuple[ReceiptDocument, bytes | None]:
    """Render the receipt and the QR image side by side."""
    renderer = receipt_renderer(tracking)
    try:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="ready-attachments") as pool:
            receipt_future = pool.submit(renderer.render, normalized)
            image_future = pool.submit(tracking.encode_as_image, normalized.tracking_url)
            return receipt_future.result(), image_future.result()
    except Exception as exc:
        raise NotificationError(f"Could not build notification attachments: {exc}") from exc


def _backfill_contact(order: OnlineOrder, resolution: EmailResolution) -> None:
    """Copy envelope contact details onto the flat fields, best-effort."""
    customer = order.customer
    fulfilment = order.fulfilment
    command = BackfillCustomerContact(
        order_id=order.order_id,
        email=resolution.email,
        name=(customer.name if customer else None) or (fulfilment.contact_name if fulfilment else None),
        phone=(customer.phone if customer else None) or (fulfilment.contact_phone if fulfilment else None),
    )
    try:
        current_domain.process(command, asynchronous=False)
    except Exception as exc:
        logger.warning("customer_contact_backfill_failed", order_id=order.order_id, error=str(exc))


def _close_gate(order_id: str, message_id: str | None) -> None:
    try:
        current_domain.process(RecordReadyNotified(order_id=order_id, message_id=message_id), asynchronous=False)
    except Exception as exc:
        logger.error("ready_notification_not_recorded", order_id=order_id, message_id=message_id, error=str(exc))
