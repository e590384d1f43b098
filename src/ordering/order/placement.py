"""Order placement — command and handler.

Creation is idempotent per external ``order_id``: placing an order that is
already stored returns the stored record and changes nothing.
"""

import json

from protean import handle
from protean.fields import Float, String, Text
from protean.utils.globals import current_domain

from ordering.domain import logger, ordering
from ordering.order.order import OnlineOrder, OrderSource


@ordering.command(part_of="OnlineOrder")
class PlaceOrder:
    order_id = String(required=True, max_length=255, sanitize=False)
    source = String(required=True)
    date = String(required=True, max_length=10)
    revenue = Float(required=True, min_value=0.0)
    cost = Float(required=True, min_value=0.0)
    currency = String(max_length=3)
    items = Text(required=True, sanitize=False)  # JSON list of line dicts
    customer = Text(sanitize=False)  # JSON dict
    fulfilment = Text(sanitize=False)  # JSON dict


@ordering.command_handler(part_of=OnlineOrder)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = OnlineOrder.place(
            order_id=command.order_id,
            source=OrderSource(command.source),
            date=command.date,
            revenue=command.revenue,
            cost=command.cost,
            currency=command.currency,
            items_data=json.loads(command.items),
            customer=json.loads(command.customer) if command.customer else None,
            fulfilment=json.loads(command.fulfilment) if command.fulfilment else None,
        )

        repo = current_domain.repository_for(OnlineOrder)
        stored, created = repo.create_if_absent(order)
        if created:
            logger.info("order_placed", order_id=stored.order_id, source=stored.source, revenue=stored.revenue)
        return {"order_id": stored.order_id, "created": created}
