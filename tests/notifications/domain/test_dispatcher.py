"""Tests for NotificationDispatcher — composition and explicit outcomes."""

import pytest
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.dispatch import QR_CONTENT_ID, NotificationDispatcher
from notifications.outcome import DispatchStatus
from receipts.renderer import ReceiptDocument
from shared.order_view import CustomerInfo, LineItem, NormalizedOrder

RECEIPT = ReceiptDocument(filename="COD-1.pdf", content=b"%PDF-1.4 receipt")
QR_PNG = b"\x89PNG\r\n\x1a\nqr"


def _order(**overrides):
    defaults = {
        "order_id": "COD-1",
        "status": "ready",
        "revenue": 950.0,
        "cost": 570.0,
        "date": "2026-03-14",
        "items": (
            LineItem(name="Kottu", qty=1, unit_price=600.0, line_total=600.0),
            LineItem(name="Lime Juice", qty=1, unit_price=400.0, line_total=400.0),
        ),
        "customer": CustomerInfo(name="Nimal", email="c@z.com"),
        "tracking_url": "https://shop.test/order/track?orderId=COD-1",
    }
    defaults.update(overrides)
    return NormalizedOrder(**defaults)


@pytest.fixture()
def adapter():
    return FakeEmailAdapter()


@pytest.fixture()
def dispatcher(adapter):
    return NotificationDispatcher(channel=adapter, store_name="Ralahami.lk")


class TestDispatchSent:
    def test_sends_to_recipient(self, dispatcher, adapter):
        outcome = dispatcher.send(_order(), QR_PNG, RECEIPT, recipient="c@z.com")

        assert outcome.status is DispatchStatus.SENT
        assert outcome.delivered
        assert outcome.recipient == "c@z.com"
        assert outcome.message_id == adapter.sent_emails[0]["message_id"]

    def test_message_carries_qr_and_receipt(self, dispatcher, adapter):
        dispatcher.send(_order(), QR_PNG, RECEIPT, recipient="c@z.com")

        sent = adapter.sent_emails[0]
        assert sent["subject"] == "Your order COD-1 is ready"
        (image,) = sent["inline_images"]
        assert image.content_id == QR_CONTENT_ID
        assert image.content == QR_PNG
        (attachment,) = sent["attachments"]
        assert attachment.filename == "COD-1.pdf"
        assert attachment.media_type == "application/pdf"

    def test_total_reconciles_with_items(self, dispatcher, adapter):
        dispatcher.send(_order(), QR_PNG, RECEIPT, recipient="c@z.com")
        assert "Total: Rs 1,000" in adapter.sent_emails[0]["body"]

    def test_explicit_total_is_used(self, dispatcher, adapter):
        dispatcher.send(_order(), QR_PNG, RECEIPT, recipient="c@z.com", total_paid=1200.0)
        assert "Total: Rs 1,200" in adapter.sent_emails[0]["body"]

    def test_sends_without_qr_image(self, dispatcher, adapter):
        outcome = dispatcher.send(_order(), None, RECEIPT, recipient="c@z.com")
        assert outcome.delivered
        assert adapter.sent_emails[0]["inline_images"] == []


class TestDispatchUnsendable:
    def test_no_channel(self):
        outcome = NotificationDispatcher(channel=None, store_name="Ralahami.lk").send(
            _order(), QR_PNG, RECEIPT, recipient="c@z.com"
        )
        assert outcome.status is DispatchStatus.UNSENDABLE
        assert outcome.reason == "No email transport configured"

    def test_no_recipient(self, dispatcher, adapter):
        outcome = dispatcher.send(_order(), QR_PNG, RECEIPT, recipient=None)
        assert outcome.status is DispatchStatus.UNSENDABLE
        assert adapter.sent_emails == []


class TestDispatchFailed:
    def test_reported_failure(self, dispatcher, adapter):
        adapter.configure(should_succeed=False, failure_reason="Mailbox full")
        outcome = dispatcher.send(_order(), QR_PNG, RECEIPT, recipient="c@z.com")
        assert outcome.status is DispatchStatus.FAILED
        assert outcome.reason == "Mailbox full"
        assert not outcome.delivered

    def test_transport_exception_does_not_escape(self, dispatcher, adapter):
        adapter.configure(raise_on_send=True, failure_reason="Connection refused")
        outcome = dispatcher.send(_order(), QR_PNG, RECEIPT, recipient="c@z.com")
        assert outcome.status is DispatchStatus.FAILED
        assert outcome.reason == "Connection refused"

    def test_unexpected_exception_does_not_escape(self, dispatcher, adapter, monkeypatch):
        def explode(**kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(adapter, "send", explode)
        outcome = dispatcher.send(_order(), QR_PNG, RECEIPT, recipient="c@z.com")
        assert outcome.status is DispatchStatus.FAILED
        assert outcome.reason == "boom"
