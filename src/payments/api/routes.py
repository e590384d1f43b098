"""FastAPI routes for the Payments domain — processor webhooks."""

import structlog
from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from protean.exceptions import ValidationError

from ordering.pipeline.confirmation import confirm_order
from payments.api.schemas import WebhookAckResponse
from payments.gateway import get_gateway
from payments.gateway.port import InvalidWebhookSignature

logger = structlog.get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"

payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/webhook", response_model=WebhookAckResponse)
async def process_webhook(
    request: Request,
    stripe_signature: str = Header(default="", alias="Stripe-Signature"),
) -> WebhookAckResponse:
    """Confirm the order for a completed checkout session.

    Deliveries are at-least-once; a repeat confirms the same stored order.
    """
    payload = await request.body()
    try:
        event = get_gateway().construct_webhook_event(payload, stripe_signature)
    except InvalidWebhookSignature as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    if event.event_type != CHECKOUT_COMPLETED or not event.session_handle:
        return WebhookAckResponse(
            status="ignored",
            event_id=event.event_id,
            reason=f"Unhandled event {event.event_type}",
        )

    try:
        order = await run_in_threadpool(confirm_order, session_handle=event.session_handle)
    except ValidationError as exc:
        logger.info("webhook_capture_not_confirmed", event_id=event.event_id, errors=exc.messages)
        return WebhookAckResponse(status="ignored", event_id=event.event_id, reason="Payment not completed")

    logger.info("webhook_processed", event_id=event.event_id, order_id=order.order_id)
    return WebhookAckResponse(status="processed", event_id=event.event_id, order_id=order.order_id)
