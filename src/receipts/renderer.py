"""Thermal-roll PDF receipts.

Renders a ``NormalizedOrder`` as a single 80mm-wide page whose height grows
with the number of line items. The canvas runs in reportlab's invariant
mode (fixed creation date and document id), so the same order always
produces byte-identical output.
"""

import io
from dataclasses import dataclass

import structlog
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from receipts.layout import TRACKING_CAPTION, ReceiptLayout, StoreIdentity, build_receipt_layout
from receipts.tracking import TrackingTokenProvider
from shared.order_view import NormalizedOrder

logger = structlog.get_logger(__name__)

PAGE_WIDTH = 226  # 80mm thermal roll, in points
MARGIN = 14
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
QR_SIZE = 96

REGULAR = "Helvetica"
BOLD = "Helvetica-Bold"


@dataclass(frozen=True)
class ReceiptDocument:
    filename: str
    content: bytes
    media_type: str = "application/pdf"


# ---------------------------------------------------------------------------
# Drawing blocks
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class _Text:
    text: str
    font: str = REGULAR
    size: float = 9
    align: str = "left"
    right_text: str | None = None
    space_after: float = 0

    @property
    def height(self) -> float:
        return self.size + 3 + self.space_after

    def draw(self, pdf, y: float) -> None:
        baseline = y + self.space_after + 2
        pdf.setFont(self.font, self.size)
        if self.align == "centre":
            pdf.drawCentredString(PAGE_WIDTH / 2, baseline, self.text)
        else:
            pdf.drawString(MARGIN, baseline, self.text)
        if self.right_text is not None:
            pdf.drawRightString(PAGE_WIDTH - MARGIN, baseline, self.right_text)


@dataclass(frozen=True)
class _Rule:
    height: float = 10

    def draw(self, pdf, y: float) -> None:
        pdf.setLineWidth(0.5)
        pdf.setDash(2, 2)
        pdf.line(MARGIN, y + self.height / 2, PAGE_WIDTH - MARGIN, y + self.height / 2)
        pdf.setDash()


@dataclass(frozen=True)
class _QRCode:
    matrix: tuple[tuple[bool, ...], ...]
    size: float = QR_SIZE

    @property
    def height(self) -> float:
        return self.size + 6

    def draw(self, pdf, y: float) -> None:
        module = self.size / len(self.matrix)
        left = (PAGE_WIDTH - self.size) / 2
        top = y + self.height
        pdf.setFillGray(0)
        for row_index, row in enumerate(self.matrix):
            for col_index, dark in enumerate(row):
                if dark:
                    pdf.rect(
                        left + col_index * module,
                        top - (row_index + 1) * module,
                        module,
                        module,
                        stroke=0,
                        fill=1,
                    )


class ReceiptRenderer:
    """Pure transform from a ``NormalizedOrder`` to a printable receipt."""

    def __init__(
        self,
        store: StoreIdentity,
        currency_label: str = "Rs",
        tracking: TrackingTokenProvider | None = None,
    ):
        self.store = store
        self.currency_label = currency_label
        self.tracking = tracking

    def render(self, order: NormalizedOrder) -> ReceiptDocument:
        layout = build_receipt_layout(order, self.store, self.currency_label)
        blocks = self._compose(layout)
        page_height = sum(block.height for block in blocks) + 2 * MARGIN

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(PAGE_WIDTH, page_height), invariant=1)
        pdf.setTitle(layout.title)
        pdf.setAuthor(self.store.name)
        pdf.setCreator(self.store.name)

        y = page_height - MARGIN
        for block in blocks:
            y -= block.height
            block.draw(pdf, y)

        pdf.showPage()
        pdf.save()

        content = buffer.getvalue()
        logger.debug("receipt_rendered", order_id=order.order_id, items=len(layout.rows), size=len(content))
        return ReceiptDocument(filename=layout.filename, content=content)

    def _compose(self, layout: ReceiptLayout) -> list:
        blocks: list = []

        # Header
        name, *rest = layout.header or (self.store.name,)
        blocks.append(_Text(name, font=BOLD, size=12, align="centre", space_after=2))
        blocks.extend(_Text(line, size=8, align="centre") for line in rest)
        blocks.append(_Rule())

        # Meta
        blocks.extend(_Text(f"{label}: {value}", size=9) for label, value in layout.meta)
        blocks.append(_Rule())

        # Items
        blocks.append(_Text("Items", font=BOLD, size=10, space_after=2))
        for row in layout.rows:
            for fragment in simpleSplit(row.name, REGULAR, 9, CONTENT_WIDTH):
                blocks.append(_Text(fragment, size=9))
            blocks.append(_Text(row.detail, size=8, right_text=row.amount, space_after=3))
        blocks.append(_Rule())

        # Totals
        blocks.append(_Text("Subtotal", size=9, right_text=layout.subtotal_text))
        blocks.append(_Text("Total Paid", font=BOLD, size=11, right_text=layout.total_paid_text, space_after=4))

        if layout.tracking_url and self.tracking is not None:
            matrix = tuple(tuple(row) for row in self.tracking.module_matrix(layout.tracking_url))
            blocks.append(_Rule())
            blocks.append(_QRCode(matrix))
            blocks.append(_Text(TRACKING_CAPTION, size=7, align="centre"))

        blocks.append(_Rule())
        blocks.append(_Text(layout.footer, size=9, align="centre"))
        return blocks
