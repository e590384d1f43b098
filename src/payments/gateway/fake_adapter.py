"""Configurable fake payment gateway for development and testing.

This adapter simulates hosted checkout sessions without any external calls.
Sessions are registered up front, then looked up exactly as the real
gateway would return them. It can be switched to an "unreachable" mode to
exercise retry paths.
"""

import json
from uuid import uuid4

from protean.exceptions import ObjectNotFoundError

from payments.gateway.port import (
    PAID,
    CaptureCustomer,
    CaptureLineItem,
    CaptureSession,
    InvalidWebhookSignature,
    PaymentGateway,
    WebhookEvent,
)
from shared.errors import UpstreamError

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.sessions: dict[str, CaptureSession] = {}
        self.reachable: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, reachable: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.reachable = reachable
        self.failure_reason = failure_reason

    def register_session(
        self,
        session_handle: str | None = None,
        amount_total: int | None = None,
        currency: str = "lkr",
        payment_status: str = PAID,
        line_items: list[dict] | None = None,
        customer: dict | None = None,
        shipping_address: str | None = None,
    ) -> CaptureSession:
        """Store a checkout session for later retrieval. Amounts are minor units."""
        session = CaptureSession(
            session_handle=session_handle or f"cs_test_{uuid4().hex[:16]}",
            payment_status=payment_status,
            amount_total=amount_total,
            currency=currency,
            line_items=tuple(CaptureLineItem(**item) for item in (line_items or [])),
            customer=CaptureCustomer(**(customer or {})),
            shipping_address=shipping_address,
        )
        self.sessions[session.session_handle] = session
        return session

    def retrieve_capture(self, session_handle: str) -> CaptureSession:
        self.calls.append({"method": "retrieve_capture", "session_handle": session_handle})

        if not self.reachable:
            raise UpstreamError(self.failure_reason, source="payment_gateway")

        session = self.sessions.get(session_handle)
        if session is None:
            raise ObjectNotFoundError(f"Checkout session `{session_handle}` does not exist")
        return session

    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent:
        if signature != TEST_SIGNATURE:
            raise InvalidWebhookSignature("Invalid webhook signature")

        event = json.loads(payload)
        session = event.get("data", {}).get("object", {})
        return WebhookEvent(
            event_id=event.get("id") or f"evt_{uuid4().hex[:12]}",
            event_type=event.get("type", "unknown"),
            session_handle=session.get("id"),
        )
