"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement:
looking up a hosted checkout session by its handle and authenticating
webhook deliveries. Amounts stay in the processor's minor units here;
conversion happens in ``payments.capture``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

PAID = "paid"


class InvalidWebhookSignature(Exception):
    """The webhook payload was not signed by the gateway."""


@dataclass(frozen=True)
class CaptureLineItem:
    description: str | None = None
    product: str | None = None
    quantity: int | None = None
    unit_amount: int | None = None  # minor units
    amount_total: int | None = None  # minor units


@dataclass(frozen=True)
class CaptureCustomer:
    name: str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class CaptureSession:
    """A checkout session as reported by the gateway."""

    session_handle: str
    payment_status: str
    amount_total: int | None = None  # minor units
    currency: str | None = None
    line_items: tuple[CaptureLineItem, ...] = field(default_factory=tuple)
    customer: CaptureCustomer = field(default_factory=CaptureCustomer)
    shipping_address: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAID


@dataclass(frozen=True)
class WebhookEvent:
    event_id: str
    event_type: str
    session_handle: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def retrieve_capture(self, session_handle: str) -> CaptureSession:
        """Fetch a checkout session with its line items and customer details.

        Raises ObjectNotFoundError for an unknown handle and UpstreamError when
        the gateway cannot be reached.
        """
        ...

    @abstractmethod
    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """Authenticate and parse a webhook delivery.

        Raises InvalidWebhookSignature when the signature does not match.
        """
        ...
