"""Customer notification dispatch.

``NotificationDispatcher.send`` composes the "order ready" email (text and
HTML bodies, the tracking QR embedded inline, the receipt PDF attached) and
hands it to the configured email channel. It never raises: every outcome,
including transport failures, comes back as a ``DispatchOutcome``.
"""

import structlog

from notifications.channel.email_port import Attachment, EmailPort, InlineImage
from notifications.outcome import DispatchOutcome, NotificationType
from notifications.templates import get_template
from receipts.renderer import ReceiptDocument
from shared.errors import NotificationError
from shared.money import format_amount
from shared.order_view import NormalizedOrder

logger = structlog.get_logger(__name__)

QR_CONTENT_ID = "tracking-qr"


class NotificationDispatcher:
    def __init__(self, channel: EmailPort | None, store_name: str, currency_label: str = "Rs"):
        self.channel = channel
        self.store_name = store_name
        self.currency_label = currency_label

    def send(
        self,
        order: NormalizedOrder,
        tracking_image: bytes | None,
        receipt: ReceiptDocument | None,
        recipient: str | None,
        total_paid: float | None = None,
    ) -> DispatchOutcome:
        if self.channel is None:
            logger.info("notification_unsendable", order_id=order.order_id, reason="no_transport")
            return DispatchOutcome.unsendable("No email transport configured", recipient=recipient)

        if not recipient:
            logger.info("notification_unsendable", order_id=order.order_id, reason="no_recipient")
            return DispatchOutcome.unsendable("No customer email on record")

        try:
            message = self._compose(order, tracking_image, receipt, total_paid)
            result = self.channel.send(
                to=recipient,
                subject=message["subject"],
                body=message["body"],
                html_body=message["html_body"],
                inline_images=message["inline_images"],
                attachments=message["attachments"],
            )
        except NotificationError as exc:
            logger.warning("notification_failed", order_id=order.order_id, recipient=recipient, error=exc.message)
            return DispatchOutcome.failed(exc.message, recipient=recipient)
        except Exception as exc:
            logger.exception("notification_failed", order_id=order.order_id, recipient=recipient)
            return DispatchOutcome.failed(str(exc) or type(exc).__name__, recipient=recipient)

        if result.get("status") != "sent":
            reason = result.get("error") or "Delivery failed"
            logger.warning("notification_failed", order_id=order.order_id, recipient=recipient, error=reason)
            return DispatchOutcome.failed(reason, recipient=recipient)

        logger.info(
            "notification_sent",
            order_id=order.order_id,
            recipient=recipient,
            message_id=result.get("message_id"),
        )
        return DispatchOutcome.sent(recipient, result.get("message_id"))

    def _compose(
        self,
        order: NormalizedOrder,
        tracking_image: bytes | None,
        receipt: ReceiptDocument | None,
        total_paid: float | None,
    ) -> dict:
        template = get_template(NotificationType.ORDER_READY.value)
        total = total_paid if total_paid is not None else max(order.items_subtotal, order.revenue or 0)
        fulfilment = order.fulfilment

        rendered = template.render(
            {
                "order_id": order.order_id,
                "store_name": self.store_name,
                "customer_name": order.customer.name or (fulfilment.contact_name if fulfilment else None),
                "items": [
                    {
                        "name": item.name,
                        "qty": item.qty,
                        "amount": format_amount(item.line_total, self.currency_label),
                    }
                    for item in order.items
                ],
                "total": format_amount(total, self.currency_label),
                "tracking_url": order.tracking_url,
                "qr_content_id": QR_CONTENT_ID if tracking_image else None,
            }
        )

        rendered["inline_images"] = [InlineImage(QR_CONTENT_ID, tracking_image)] if tracking_image else []
        rendered["attachments"] = (
            [Attachment(receipt.filename, receipt.content, receipt.media_type)] if receipt is not None else []
        )
        return rendered
