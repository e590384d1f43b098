"""Receipt download for a stored order."""

from ordering.pipeline.components import receipt_renderer, tracking_provider
from ordering.pipeline.confirmation import load_order
from receipts.renderer import ReceiptDocument


def render_receipt(order_id: str) -> ReceiptDocument:
    tracking = tracking_provider()
    order = load_order(order_id)
    return receipt_renderer(tracking).render(order)
