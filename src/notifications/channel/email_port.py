"""Email channel port — abstract interface for email dispatch."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class InlineImage:
    """An image referenced from the HTML body as ``cid:<content_id>``."""

    content_id: str
    content: bytes
    subtype: str = "png"


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    media_type: str = "application/octet-stream"


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters."""

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
        inline_images: list[InlineImage] | None = None,
        attachments: list[Attachment] | None = None,
    ) -> dict:
        """Send an email message.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
