"""Ordering bounded context — online order confirmation and fulfilment status.

Owns the OnlineOrder aggregate (CQRS): idempotent creation from a payment
capture or a direct submission, kitchen status updates, and the notify-once
gate for "order ready" emails.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
