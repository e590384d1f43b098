"""Template registry — maps NotificationType to template classes."""

from notifications.outcome import NotificationType
from notifications.templates.order_ready import OrderReadyTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_READY.value: OrderReadyTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
