"""Status updates and the notify-once gate — commands and handlers."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from ordering.domain import logger, ordering
from ordering.order.lifecycle import parse_status
from ordering.order.order import OnlineOrder


@ordering.command(part_of="OnlineOrder")
class UpdateOrderStatus:
    order_id = String(required=True, max_length=255, sanitize=False)
    status = String(required=True, max_length=20)


@ordering.command(part_of="OnlineOrder")
class RecordReadyNotified:
    order_id = String(required=True, max_length=255, sanitize=False)
    message_id = String(max_length=255)


@ordering.command_handler(part_of=OnlineOrder)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        target = parse_status(command.status)

        repo = current_domain.repository_for(OnlineOrder)
        order = repo.find_by_order_id(command.order_id)
        previous = order.status
        owed = order.change_status(target)
        repo.add(order)

        logger.info(
            "order_status_changed",
            order_id=order.order_id,
            previous_status=previous,
            status=order.status,
            notification_owed=owed,
        )
        return {"order_id": order.order_id, "status": order.status, "notification_owed": owed}

    @handle(RecordReadyNotified)
    def record_ready_notified(self, command):
        repo = current_domain.repository_for(OnlineOrder)
        order = repo.find_by_order_id(command.order_id)
        if not order.mark_ready_notified(message_id=command.message_id):
            logger.info("ready_notification_already_recorded", order_id=order.order_id)
            return False

        repo.add(order)
        return True
