"""Order store: lookups and idempotent creation for OnlineOrder."""

import structlog
from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.order.order import OnlineOrder

logger = structlog.get_logger(__name__)


@ordering.repository(part_of=OnlineOrder)
class OnlineOrderRepository:
    """Repository for the OnlineOrder aggregate.

    ``order_id`` carries a unique constraint, so a second insert for the same
    external id fails at the store even when two deliveries race past
    ``create_if_absent``'s lookup.
    """

    def find_by_order_id(self, order_id: str) -> OnlineOrder:
        """Load by external order id, falling back to the internal identity.

        Raises ObjectNotFoundError when neither matches.
        """
        matches = self._dao.query.filter(order_id=order_id).all().items
        if matches:
            return matches[0]
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError(f"Order `{order_id}` does not exist") from None

    def exists(self, order_id: str) -> bool:
        return bool(self._dao.query.filter(order_id=order_id).all().items)

    def create_if_absent(self, order: OnlineOrder) -> tuple[OnlineOrder, bool]:
        """Insert ``order`` unless one with the same ``order_id`` is stored.

        Returns the stored order and whether this call created it. An existing
        record is returned untouched.
        """
        matches = self._dao.query.filter(order_id=order.order_id).all().items
        if matches:
            logger.info("order_already_exists", order_id=order.order_id)
            return matches[0], False

        self.add(order)
        return order, True

    def list_between(
        self, date_from: str | None = None, date_to: str | None = None, limit: int = 500
    ) -> list[OnlineOrder]:
        """Orders whose ``date`` falls in the inclusive range, newest first."""
        query = self._dao.query
        if date_from:
            query = query.filter(date__gte=date_from)
        if date_to:
            query = query.filter(date__lte=date_to)
        orders = query.limit(limit).all().items
        return sorted(orders, key=lambda order: (order.date, order.created_at), reverse=True)
