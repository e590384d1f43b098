"""FastAPI routes for the Ordering domain — confirmation, status, receipts."""

from fastapi import APIRouter, Query
from fastapi.responses import Response

from notifications.outcome import DispatchOutcome
from ordering.api.schemas import (
    ConfirmOrderResponse,
    NotificationResponse,
    OkResponse,
    OrderListResponse,
    OrderResponse,
    PublicStatusResponse,
    ResendNotificationRequest,
    SaveContactRequest,
    StatusUpdateResponse,
    SubmitOrderRequest,
    SubmitOrderResponse,
    UpdateStatusRequest,
)
from ordering.pipeline.confirmation import (
    confirm_order,
    list_orders,
    public_status,
    save_order_contact,
    submit_direct_order,
)
from ordering.pipeline.receipts import render_receipt
from ordering.pipeline.status_updates import resend_ready_notification, update_order_status


def _notification_response(outcome: DispatchOutcome | None) -> NotificationResponse | None:
    if outcome is None:
        return None
    return NotificationResponse(status=outcome.status.value, recipient=outcome.recipient, reason=outcome.reason)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=SubmitOrderResponse)
def submit_order(body: SubmitOrderRequest) -> SubmitOrderResponse:
    """Record an order paid outside the payment processor (cash on delivery, counter)."""
    order, created = submit_direct_order(body.model_dump(exclude_none=True))
    return SubmitOrderResponse(order=OrderResponse.from_normalized(order), created=created)


@order_router.get("", response_model=OrderListResponse)
def get_orders(
    date_from: str | None = Query(default=None, alias="from"),
    date_to: str | None = Query(default=None, alias="to"),
) -> OrderListResponse:
    """List orders in an inclusive date range, newest first."""
    orders = list_orders(date_from, date_to)
    return OrderListResponse(orders=[OrderResponse.from_normalized(order) for order in orders])


@order_router.get("/confirm", response_model=ConfirmOrderResponse)
def confirm(
    session_id: str | None = Query(default=None),
    order_id: str | None = Query(default=None, alias="orderId"),
) -> ConfirmOrderResponse:
    """Confirm an order after checkout, by payment session or by order id."""
    order = confirm_order(session_handle=session_id, order_id=order_id)
    return ConfirmOrderResponse(order=OrderResponse.from_normalized(order))


@order_router.get("/track", response_model=ConfirmOrderResponse)
def track(
    order_id: str | None = Query(default=None, alias="orderId"),
    session_id: str | None = Query(default=None),
    session_id_camel: str | None = Query(default=None, alias="sessionId"),
) -> ConfirmOrderResponse:
    """Public tracking page lookup; accepts either identifier spelling."""
    order = confirm_order(session_handle=session_id or session_id_camel, order_id=order_id)
    return ConfirmOrderResponse(order=OrderResponse.from_normalized(order))


@order_router.post("/update-status", response_model=StatusUpdateResponse)
def update_status(body: UpdateStatusRequest) -> StatusUpdateResponse:
    """Move an order along its lifecycle; entering ready notifies the customer once."""
    result = update_order_status(body.order_id, body.status, email_override=body.email)
    return StatusUpdateResponse(
        order_id=result.order_id,
        status=result.status,
        notification=_notification_response(result.notification),
    )


@order_router.post("/save-contact", response_model=OkResponse)
def save_contact(body: SaveContactRequest) -> OkResponse:
    """Attach a customer email given after checkout."""
    save_order_contact(body.order_id, body.email)
    return OkResponse()


@order_router.get("/{order_id}/receipt.pdf")
def receipt(order_id: str) -> Response:
    """Download the printable receipt."""
    document = render_receipt(order_id)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={
            "Content-Disposition": f'inline; filename="{document.filename}"',
            "Cache-Control": "no-store",
        },
    )


@order_router.get("/{order_id}/public-status", response_model=PublicStatusResponse)
def get_public_status(order_id: str) -> PublicStatusResponse:
    return PublicStatusResponse(**public_status(order_id))


@order_router.post("/{order_id}/notifications/ready", response_model=NotificationResponse)
def resend_ready(order_id: str, body: ResendNotificationRequest | None = None) -> NotificationResponse:
    """Retry a ready notification that was not delivered."""
    outcome = resend_ready_notification(order_id, email_override=body.email if body else None)
    return _notification_response(outcome)
