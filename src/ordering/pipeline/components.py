"""Collaborators for the order pipeline, built from current settings.

Each call builds fresh, stateless objects; the only shared state is the
email channel singleton and the store connection owned by the domain.
"""

from contextlib import contextmanager

import structlog
from sqlalchemy.exc import InterfaceError, OperationalError

from notifications.channel import get_email_channel
from notifications.dispatch import NotificationDispatcher
from receipts.layout import StoreIdentity
from receipts.renderer import ReceiptRenderer
from receipts.tracking import TrackingTokenProvider
from shared.config import get_settings
from shared.errors import UpstreamError

logger = structlog.get_logger(__name__)


def tracking_provider() -> TrackingTokenProvider:
    return TrackingTokenProvider(get_settings().public_host)


def receipt_renderer(tracking: TrackingTokenProvider | None = None) -> ReceiptRenderer:
    settings = get_settings()
    return ReceiptRenderer(
        store=StoreIdentity.from_settings(settings),
        currency_label=settings.currency_label,
        tracking=tracking or tracking_provider(),
    )


def notification_dispatcher() -> NotificationDispatcher:
    settings = get_settings()
    return NotificationDispatcher(
        channel=get_email_channel(),
        store_name=settings.store_name,
        currency_label=settings.currency_label,
    )


@contextmanager
def store_errors(operation: str):
    """Report an unreachable order store as UpstreamError."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.error("order_store_unavailable", operation=operation, error=str(exc))
        raise UpstreamError("Order store unavailable", source="order_store") from exc
