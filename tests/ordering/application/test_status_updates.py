"""Application tests for kitchen status updates and the ready notification."""

import pytest
from notifications.channel import set_email_channel
from notifications.outcome import DispatchStatus
from ordering.domain import ordering
from ordering.order.order import OnlineOrder
from ordering.pipeline.confirmation import load_order, submit_direct_order
from ordering.pipeline.status_updates import notify_ready, resend_ready_notification, update_order_status
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.config import override_settings


def _submit(order_id="COD-1", **overrides):
    submission = {
        "orderId": order_id,
        "revenue": 2500,
        "cost": 1500,
        "date": "2026-03-14",
        "items": [{"name": "Rice & Curry", "qty": 1, "unitPrice": 2500, "lineTotal": 2500}],
        "customer": {"email": "c@z.com"},
    }
    submission.update(overrides)
    order, _ = submit_direct_order(submission)
    return order


def _stored(order_id="COD-1"):
    return current_domain.repository_for(OnlineOrder).find_by_order_id(order_id)


def _to_preparing(order_id="COD-1"):
    update_order_status(order_id, "preparing")


class TestStatusTransitions:
    def test_update_persists_status(self):
        _submit()

        result = update_order_status("COD-1", "preparing")

        assert result.status == "preparing"
        assert result.notification is None
        assert _stored().status == "preparing"

    def test_cancel_from_confirmed(self):
        _submit()
        assert update_order_status("COD-1", "cancelled").status == "cancelled"

    def test_invalid_transition_is_rejected(self):
        _submit()
        with pytest.raises(ValidationError) as exc:
            update_order_status("COD-1", "completed")
        assert exc.value.messages == {"status": ["Cannot transition from confirmed to completed"]}
        assert _stored().status == "confirmed"

    def test_terminal_state_is_final(self):
        _submit()
        update_order_status("COD-1", "cancelled")
        with pytest.raises(ValidationError):
            update_order_status("COD-1", "preparing")

    def test_unknown_status(self):
        _submit()
        with pytest.raises(ValidationError):
            update_order_status("COD-1", "shipped")

    def test_missing_order_id(self):
        with pytest.raises(ValidationError):
            update_order_status("", "ready")

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            update_order_status("COD-404", "preparing")

    def test_invalid_override_is_rejected_before_any_change(self):
        _submit()
        _to_preparing()
        with pytest.raises(ValidationError):
            update_order_status("COD-1", "ready", email_override="not-an-email")
        assert _stored().status == "preparing"


class TestReadyNotification:
    def test_entering_ready_notifies_once(self, email_channel):
        _submit()
        _to_preparing()

        first = update_order_status("COD-1", "ready")
        second = update_order_status("COD-1", "ready")

        assert first.notification.status is DispatchStatus.SENT
        assert first.notification.recipient == "c@z.com"
        assert second.notification is None
        assert len(email_channel.sent_emails) == 1
        assert _stored().notified_ready is True

    def test_message_carries_receipt_and_qr(self, email_channel):
        _submit()
        _to_preparing()

        update_order_status("COD-1", "ready")

        sent = email_channel.sent_emails[0]
        assert sent["subject"] == "Your order COD-1 is ready"
        (attachment,) = sent["attachments"]
        assert attachment.filename == "COD-1.pdf"
        assert attachment.content.startswith(b"%PDF")
        (image,) = sent["inline_images"]
        assert image.content.startswith(b"\x89PNG")

    def test_other_transitions_never_notify(self, email_channel):
        _submit()
        _to_preparing()
        update_order_status("COD-1", "cancelled")
        assert email_channel.sent_emails == []

    def test_failed_send_keeps_status_and_allows_retry(self, email_channel):
        _submit()
        _to_preparing()
        email_channel.configure(should_succeed=False, failure_reason="Mailbox unavailable")

        failed = update_order_status("COD-1", "ready")

        assert failed.status == "ready"
        assert failed.notification.status is DispatchStatus.FAILED
        assert failed.notification.reason == "Mailbox unavailable"
        assert _stored().status == "ready"
        assert _stored().notified_ready is False

        email_channel.configure(should_succeed=True)
        retried = update_order_status("COD-1", "ready")

        assert retried.notification.status is DispatchStatus.SENT
        assert _stored().notified_ready is True
        assert len(email_channel.sent_emails) == 1

    def test_transport_exception_is_an_outcome(self, email_channel):
        _submit()
        _to_preparing()
        email_channel.configure(raise_on_send=True)

        result = update_order_status("COD-1", "ready")

        assert result.status == "ready"
        assert result.notification.status is DispatchStatus.FAILED

    def test_override_wins_over_stored_email(self, email_channel):
        _submit(customer={"email": "a@x.com"})
        _to_preparing()

        result = update_order_status("COD-1", "ready", email_override="b@y.com")

        assert result.notification.recipient == "b@y.com"
        assert email_channel.sent_emails[0]["to"] == "b@y.com"

    def test_fulfilment_contact_is_used_and_backfilled(self, email_channel):
        _submit(customer=None, fulfilment={"method": "pickup", "contact": {"name": "Kamala", "email": "f@z.com"}})
        _to_preparing()

        result = update_order_status("COD-1", "ready")

        assert result.notification.recipient == "f@z.com"
        stored = _stored()
        assert stored.customer_email == "f@z.com"
        assert stored.customer_name == "Kamala"

    def test_no_recipient_is_unsendable(self, email_channel):
        _submit(customer=None)
        _to_preparing()

        result = update_order_status("COD-1", "ready")

        assert result.notification.status is DispatchStatus.UNSENDABLE
        assert _stored().notified_ready is False

    def test_no_transport_is_unsendable(self):
        override_settings(email_transport="none")
        set_email_channel(None)
        _submit()
        _to_preparing()

        result = update_order_status("COD-1", "ready")

        assert result.notification.status is DispatchStatus.UNSENDABLE
        assert result.notification.reason == "No email transport configured"
        assert _stored().notified_ready is False

    def test_attachment_failure_is_an_outcome(self, email_channel, monkeypatch):
        _submit()
        _to_preparing()

        def broken(self, url):
            raise RuntimeError("encoder crashed")

        monkeypatch.setattr("receipts.tracking.TrackingTokenProvider.encode_as_image", broken)

        result = update_order_status("COD-1", "ready")

        assert result.status == "ready"
        assert result.notification.status is DispatchStatus.FAILED
        assert "encoder crashed" in result.notification.reason
        assert email_channel.sent_emails == []

    def test_gate_write_failure_still_reports_sent(self, email_channel, monkeypatch):
        _submit("COD-2")
        _to_preparing("COD-2")
        original = ordering.process

        def failing_gate(command, asynchronous=True):
            if type(command).__name__ == "RecordReadyNotified":
                raise RuntimeError("store went away")
            return original(command, asynchronous=asynchronous)

        monkeypatch.setattr(ordering, "process", failing_gate)

        result = update_order_status("COD-2", "ready")

        assert result.notification.status is DispatchStatus.SENT
        assert len(email_channel.sent_emails) == 1
        assert _stored("COD-2").notified_ready is False


class TestResendReadyNotification:
    def test_retries_undelivered_notification(self, email_channel):
        _submit(customer=None)
        _to_preparing()
        update_order_status("COD-1", "ready")

        outcome = resend_ready_notification("COD-1", email_override="late@z.com")

        assert outcome.status is DispatchStatus.SENT
        assert email_channel.sent_emails[0]["to"] == "late@z.com"
        assert _stored().notified_ready is True

    def test_already_notified_is_rejected(self, email_channel):
        _submit()
        _to_preparing()
        update_order_status("COD-1", "ready")

        with pytest.raises(ValidationError) as exc:
            resend_ready_notification("COD-1")
        assert "notified_ready" in exc.value.messages

    def test_only_ready_orders(self):
        _submit()
        with pytest.raises(ValidationError) as exc:
            resend_ready_notification("COD-1")
        assert "status" in exc.value.messages


class TestNotifyReady:
    def test_uses_stored_order_snapshot(self, email_channel):
        _submit()
        outcome = notify_ready("COD-1")
        assert outcome.delivered
        assert "Rice &amp; Curry" in email_channel.sent_emails[0]["html_body"]
        assert "&amp;amp;" not in email_channel.sent_emails[0]["html_body"]
        assert load_order("COD-1").status == "confirmed"
