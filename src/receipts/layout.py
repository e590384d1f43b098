"""Receipt content, independent of how it is drawn.

``build_receipt_layout`` decides every string and amount printed on a
receipt. The PDF renderer only positions them, so totals and wording can be
checked without parsing a PDF.
"""

from dataclasses import dataclass

from shared.money import format_amount
from shared.order_view import NormalizedOrder

FOOTER_NOTE = "Thank you for your order!"
TRACKING_CAPTION = "Scan to track your order"


@dataclass(frozen=True)
class StoreIdentity:
    name: str
    address_line1: str | None = None
    address_line2: str | None = None
    phone: str | None = None
    email: str | None = None

    @classmethod
    def from_settings(cls, settings) -> "StoreIdentity":
        return cls(
            name=settings.store_name,
            address_line1=settings.store_address_line1,
            address_line2=settings.store_address_line2,
            phone=settings.store_phone,
            email=settings.store_email,
        )

    def header_lines(self) -> tuple[str, ...]:
        lines = [self.name, self.address_line1, self.address_line2]
        if self.phone:
            lines.append(f"Tel: {self.phone}")
        lines.append(self.email)
        return tuple(line for line in lines if line)


@dataclass(frozen=True)
class ReceiptRow:
    name: str
    detail: str  # "x2  @  Rs 500"
    amount: str


@dataclass(frozen=True)
class ReceiptLayout:
    filename: str
    title: str
    header: tuple[str, ...]
    meta: tuple[tuple[str, str], ...]
    rows: tuple[ReceiptRow, ...]
    subtotal: float
    total_paid: float
    subtotal_text: str
    total_paid_text: str
    footer: str
    tracking_url: str | None = None


def total_paid(order: NormalizedOrder) -> float:
    """The captured amount, unless the item lines add up to more."""
    return max(order.items_subtotal, order.revenue or 0)


def build_receipt_layout(order: NormalizedOrder, store: StoreIdentity, currency_label: str = "Rs") -> ReceiptLayout:
    meta = [("Order", order.order_id), ("Date", order.date)]

    fulfilment = order.fulfilment
    customer_name = order.customer.name or (fulfilment.contact_name if fulfilment else None)
    customer_phone = order.customer.phone or (fulfilment.contact_phone if fulfilment else None)
    if customer_name:
        meta.append(("Customer", customer_name))
    if customer_phone:
        meta.append(("Phone", customer_phone))

    rows = tuple(
        ReceiptRow(
            name=item.name,
            detail=f"x{item.qty}  @  {format_amount(item.unit_price, currency_label)}",
            amount=format_amount(item.line_total, currency_label),
        )
        for item in order.items
    )

    subtotal = order.items_subtotal
    paid = total_paid(order)

    return ReceiptLayout(
        filename=f"{order.order_id}.pdf",
        title=f"Receipt {order.order_id}",
        header=store.header_lines(),
        meta=tuple(meta),
        rows=rows,
        subtotal=subtotal,
        total_paid=paid,
        subtotal_text=format_amount(subtotal, currency_label),
        total_paid_text=format_amount(paid, currency_label),
        footer=FOOTER_NOTE,
        tracking_url=order.tracking_url,
    )
