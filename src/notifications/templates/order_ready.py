"""Order ready template — sent when the kitchen marks an order ready."""

from html import escape

from notifications.outcome import NotificationType


class OrderReadyTemplate:
    notification_type = NotificationType.ORDER_READY.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        store_name = context.get("store_name", "")
        customer_name = context.get("customer_name")
        items = context.get("items", [])
        total = context.get("total", "")
        tracking_url = context.get("tracking_url")
        qr_content_id = context.get("qr_content_id")

        greeting = f"Hi {customer_name}," if customer_name else "Hi,"
        item_lines = "\n".join(f"- {item['name']} x{item['qty']}  {item['amount']}" for item in items)
        tracking_line = f"Track your order: {tracking_url}\n\n" if tracking_url else ""

        body = (
            f"{greeting}\n\n"
            f"Your order {order_id} is ready.\n\n"
            f"{item_lines}\n"
            f"Total: {total}\n\n"
            f"{tracking_line}"
            "Your receipt is attached.\n\n"
            f"Thank you for ordering from {store_name}!"
        )

        rows = "".join(
            "<tr>"
            f'<td style="padding:4px 8px">{escape(item["name"])}</td>'
            f'<td style="padding:4px 8px;text-align:center">{item["qty"]}</td>'
            f'<td style="padding:4px 8px;text-align:right">{escape(item["amount"])}</td>'
            "</tr>"
            for item in items
        )
        qr_block = ""
        if qr_content_id and tracking_url:
            qr_block = (
                f'<p><a href="{escape(tracking_url, quote=True)}">Track your order</a></p>'
                f'<p><img src="cid:{escape(qr_content_id, quote=True)}" alt="Tracking QR code" '
                'width="160" height="160"/></p>'
            )
        elif tracking_url:
            qr_block = f'<p><a href="{escape(tracking_url, quote=True)}">Track your order</a></p>'

        html_body = (
            '<div style="font-family:Arial,Helvetica,sans-serif;font-size:14px;color:#222">'
            f"<p>{escape(greeting)}</p>"
            f"<p>Your order <strong>{escape(order_id)}</strong> is ready.</p>"
            '<table style="border-collapse:collapse">'
            "<thead><tr>"
            '<th style="padding:4px 8px;text-align:left">Item</th>'
            '<th style="padding:4px 8px">Qty</th>'
            '<th style="padding:4px 8px;text-align:right">Amount</th>'
            "</tr></thead>"
            f"<tbody>{rows}</tbody>"
            "</table>"
            f"<p><strong>Total: {escape(total)}</strong></p>"
            f"{qr_block}"
            "<p>Your receipt is attached.</p>"
            f"<p>Thank you for ordering from {escape(store_name)}!</p>"
            "</div>"
        )

        return {
            "subject": f"Your order {order_id} is ready",
            "body": body,
            "html_body": html_body,
        }
