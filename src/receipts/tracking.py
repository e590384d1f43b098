"""Tracking links and their QR encodings.

The tracking token is the order id itself: anyone holding an order id can
open its tracking page. Receipts and ready notifications carry the same
link, so it must stay stable for the life of the order.
"""

import io
from urllib.parse import quote

import segno

QR_TARGET_WIDTH = 320
QR_BORDER = 1
QR_ERROR_LEVEL = "m"


class TrackingTokenProvider:
    """Builds the customer-facing tracking URL and encodes it as a QR code."""

    def __init__(self, public_host: str):
        self.public_host = public_host.rstrip("/")

    def build_tracking_url(self, order_id: str) -> str:
        return f"{self.public_host}/order/track?orderId={quote(str(order_id), safe='')}"

    def encode_as_image(self, url: str) -> bytes:
        """Return a PNG of the QR code for ``url``, roughly 320px wide."""
        qr = self._make(url)
        width, _ = qr.symbol_size(scale=1, border=QR_BORDER)
        scale = max(1, QR_TARGET_WIDTH // width)

        buffer = io.BytesIO()
        qr.save(buffer, kind="png", scale=scale, border=QR_BORDER)
        return buffer.getvalue()

    def module_matrix(self, url: str) -> list[list[bool]]:
        """Dark/light modules of the QR code, border included, top row first."""
        qr = self._make(url)
        return [[bool(module) for module in row] for row in qr.matrix_iter(scale=1, border=QR_BORDER)]

    @staticmethod
    def _make(url: str):
        if not url:
            raise ValueError("Cannot encode an empty tracking URL")
        # Regular QR only: Micro QR is not readable by most phone cameras
        return segno.make_qr(url, error=QR_ERROR_LEVEL)
