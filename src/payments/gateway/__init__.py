"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- StripeGateway when PAYMENT_GATEWAY=stripe
"""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway
from shared.config import get_settings

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, built from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        settings = get_settings()
        if settings.payment_gateway.lower() == "stripe":
            from payments.gateway.stripe_adapter import StripeGateway

            if not settings.stripe_secret_key:
                raise RuntimeError("PAYMENT_GATEWAY=stripe requires STRIPE_SECRET_KEY")
            _current_gateway = StripeGateway(settings.stripe_secret_key, settings.stripe_webhook_secret)
        else:
            _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
