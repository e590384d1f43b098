"""Email channel registry.

Provides singleton access to the configured email adapter. EMAIL_TRANSPORT
selects it: "fake" records messages in memory, "smtp" sends through SMTP_URL,
anything else (or an incomplete SMTP setup) means no transport at all.
"""

from notifications.channel.email_port import EmailPort
from shared.config import get_settings

_channel_instance: EmailPort | None = None


def get_email_channel() -> EmailPort | None:
    """Return the configured email adapter, or None when email is not set up."""
    global _channel_instance
    if _channel_instance is None:
        settings = get_settings()
        if not settings.email_configured:
            return None

        if settings.email_transport.lower() == "fake":
            from notifications.channel.fake_email import FakeEmailAdapter

            _channel_instance = FakeEmailAdapter()
        else:
            from notifications.channel.smtp_email import SMTPEmailAdapter

            _channel_instance = SMTPEmailAdapter(
                settings.smtp_url,
                settings.email_from,
                timeout=settings.smtp_timeout,
            )

    return _channel_instance


def set_email_channel(channel: EmailPort | None) -> None:
    """Override the active adapter (useful for tests)."""
    global _channel_instance
    _channel_instance = channel


def reset_channels():
    """Reset the channel singleton (useful for testing)."""
    global _channel_instance
    _channel_instance = None
