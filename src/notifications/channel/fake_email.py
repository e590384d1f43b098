"""In-memory email transport used by tests and local runs (EMAIL_TRANSPORT=fake)."""

from uuid import uuid4

from notifications.channel.email_port import Attachment, EmailPort, InlineImage
from shared.errors import NotificationError

DEFAULT_FAILURE = "Email delivery failed"


class FakeEmailAdapter(EmailPort):
    """Keeps every accepted message in ``sent_emails``, attachments included."""

    def __init__(self):
        self.sent_emails: list[dict] = []
        self.should_succeed = True
        self.failure_reason = DEFAULT_FAILURE
        self.raise_on_send = False

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = DEFAULT_FAILURE,
        raise_on_send: bool = False,
    ):
        """Configure the fake adapter behavior for testing.

        ``raise_on_send`` simulates a transport that blows up instead of
        reporting a failed status.
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_on_send = raise_on_send

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
        inline_images: list[InlineImage] | None = None,
        attachments: list[Attachment] | None = None,
    ) -> dict:
        if self.raise_on_send:
            raise NotificationError(self.failure_reason, recipient=to)

        if not self.should_succeed:
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"email-{uuid4().hex[:12]}"
        record = {
            "message_id": message_id,
            "to": to,
            "subject": subject,
            "body": body,
            "html_body": html_body,
            "inline_images": list(inline_images or []),
            "attachments": list(attachments or []),
        }
        self.sent_emails.append(record)

        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        """Forget recorded messages and go back to accepting everything."""
        self.sent_emails.clear()
        self.should_succeed = True
        self.failure_reason = DEFAULT_FAILURE
        self.raise_on_send = False
