"""Pydantic response schemas for the Payments API."""

from pydantic import BaseModel


class WebhookAckResponse(BaseModel):
    status: str  # "processed" or "ignored"
    event_id: str
    order_id: str | None = None
    reason: str | None = None
