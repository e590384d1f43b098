"""Notification types and dispatch outcomes."""

from dataclasses import dataclass
from enum import Enum


class NotificationType(Enum):
    ORDER_READY = "OrderReady"


class DispatchStatus(Enum):
    SENT = "sent"
    UNSENDABLE = "unsendable"  # no transport configured, or no recipient
    FAILED = "failed"  # transport or composition error


@dataclass(frozen=True)
class DispatchOutcome:
    """What happened to one notification attempt.

    Returned instead of raised: callers branch on ``status`` and never need a
    try/except around a send.
    """

    status: DispatchStatus
    recipient: str | None = None
    message_id: str | None = None
    reason: str | None = None

    @property
    def delivered(self) -> bool:
        return self.status is DispatchStatus.SENT

    @classmethod
    def sent(cls, recipient: str, message_id: str | None) -> "DispatchOutcome":
        return cls(DispatchStatus.SENT, recipient=recipient, message_id=message_id)

    @classmethod
    def unsendable(cls, reason: str, recipient: str | None = None) -> "DispatchOutcome":
        return cls(DispatchStatus.UNSENDABLE, recipient=recipient, reason=reason)

    @classmethod
    def failed(cls, reason: str, recipient: str | None = None) -> "DispatchOutcome":
        return cls(DispatchStatus.FAILED, recipient=recipient, reason=reason)
