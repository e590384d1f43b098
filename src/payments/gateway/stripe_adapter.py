"""Stripe payment gateway adapter.

Reads hosted Checkout Sessions through stripe-python and verifies webhook
deliveries with the endpoint signing secret. The API key is passed per
request so several gateways can coexist in one process (tests, tenants).
"""

import structlog
import stripe
from protean.exceptions import ObjectNotFoundError

from payments.gateway.port import (
    CaptureCustomer,
    CaptureLineItem,
    CaptureSession,
    InvalidWebhookSignature,
    PaymentGateway,
    WebhookEvent,
)
from shared.errors import UpstreamError

logger = structlog.get_logger(__name__)

LINE_ITEM_PAGE_SIZE = 100


def _attr(obj, *path, default=None):
    """Walk nested Stripe objects, tolerating missing keys at any level."""
    for name in path:
        if obj is None:
            return default
        obj = getattr(obj, name, None)
    return default if obj is None else obj


def _format_address(address) -> str | None:
    if address is None:
        return None
    parts = [
        _attr(address, "line1"),
        _attr(address, "line2"),
        _attr(address, "city"),
        _attr(address, "postal_code"),
        _attr(address, "country"),
    ]
    formatted = ", ".join(part for part in parts if part)
    return formatted or None


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str, webhook_secret: str | None = None) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def retrieve_capture(self, session_handle: str) -> CaptureSession:
        try:
            session = stripe.checkout.Session.retrieve(session_handle, api_key=self.api_key)
            # An expanded line_items field holds only the first page.
            line_items = stripe.checkout.Session.list_line_items(
                session_handle,
                api_key=self.api_key,
                limit=LINE_ITEM_PAGE_SIZE,
                expand=["data.price.product"],
            )
            items = tuple(self._line_item(item) for item in line_items.auto_paging_iter())
        except stripe.InvalidRequestError as exc:
            if exc.code == "resource_missing":
                raise ObjectNotFoundError(f"Checkout session `{session_handle}` does not exist") from exc
            logger.error("stripe_session_lookup_failed", session_handle=session_handle, error=str(exc))
            message = f"Stripe rejected the session lookup: {exc.user_message or exc}"
            raise UpstreamError(message, source="stripe") from exc
        except stripe.StripeError as exc:
            logger.error("stripe_unreachable", session_handle=session_handle, error=str(exc))
            raise UpstreamError("Payment processor unavailable", source="stripe") from exc

        return CaptureSession(
            session_handle=session.id,
            payment_status=_attr(session, "payment_status", default="unpaid"),
            amount_total=_attr(session, "amount_total"),
            currency=_attr(session, "currency"),
            line_items=items,
            customer=CaptureCustomer(
                name=_attr(session, "customer_details", "name"),
                email=_attr(session, "customer_details", "email"),
                phone=_attr(session, "customer_details", "phone"),
            ),
            shipping_address=_format_address(
                _attr(session, "collected_information", "shipping_details", "address")
                or _attr(session, "shipping_details", "address")
            ),
        )

    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent:
        if not self.webhook_secret:
            raise InvalidWebhookSignature("Webhook signing secret is not configured")

        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            logger.warning("webhook_signature_invalid", error=str(exc))
            raise InvalidWebhookSignature("Invalid webhook signature") from exc
        except ValueError as exc:
            logger.warning("webhook_payload_invalid", error=str(exc))
            raise InvalidWebhookSignature("Malformed webhook payload") from exc

        return WebhookEvent(
            event_id=event.id,
            event_type=event.type,
            session_handle=_attr(event, "data", "object", "id"),
        )

    @staticmethod
    def _line_item(item) -> CaptureLineItem:
        product = _attr(item, "price", "product")
        if product is not None and not isinstance(product, str):
            product = _attr(product, "name")
        return CaptureLineItem(
            description=_attr(item, "description"),
            product=product,
            quantity=_attr(item, "quantity"),
            unit_amount=_attr(item, "price", "unit_amount"),
            amount_total=_attr(item, "amount_total"),
        )
