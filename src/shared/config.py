"""Runtime settings shared by every context.

Values come from the process environment (and an optional ``.env`` file).
The store connection string is not read here: Protean picks up
``DATABASE_URL`` through ``src/ordering/domain.toml``.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    protean_env: str = Field(default="development", alias="PROTEAN_ENV")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")
    # Rotating log file; console only when unset
    log_file: str | None = Field(default=None, alias="LOG_FILE")

    # Public host used to build customer-facing tracking links
    public_host: str = Field(default="http://localhost:3000", alias="PUBLIC_HOST")

    # Store identity printed on receipts and in emails
    store_name: str = Field(default="Ralahami.lk", alias="STORE_NAME")
    store_address_line1: str = Field(default="No. 123, Main Street", alias="STORE_ADDRESS_LINE1")
    store_address_line2: str = Field(default="Colombo, Sri Lanka", alias="STORE_ADDRESS_LINE2")
    store_phone: str = Field(default="+94 11 234 5678", alias="STORE_PHONE")
    store_email: str = Field(default="info@ralahami.lk", alias="STORE_EMAIL")
    currency_label: str = Field(default="Rs", alias="CURRENCY_LABEL")

    # Estimated direct cost as a share of revenue for processor-paid orders
    cost_ratio: float = Field(default=0.6, ge=0.0, le=1.0, alias="COST_RATIO")

    # Outbound email: "smtp", "fake" or "none"
    email_transport: str = Field(default="none", alias="EMAIL_TRANSPORT")
    smtp_url: str | None = Field(default=None, alias="SMTP_URL")
    smtp_timeout: float = Field(default=10.0, gt=0, alias="SMTP_TIMEOUT")
    email_from: str | None = Field(default=None, alias="EMAIL_FROM")

    # Payment processor: "fake" or "stripe"
    payment_gateway: str = Field(default="fake", alias="PAYMENT_GATEWAY")
    stripe_secret_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: str | None = Field(default=None, alias="STRIPE_WEBHOOK_SECRET")

    @property
    def is_production(self) -> bool:
        return self.protean_env.lower() == "production"

    @property
    def email_configured(self) -> bool:
        """True when a transport is selected and has what it needs to send."""
        transport = self.email_transport.lower()
        if transport == "fake":
            return True
        if transport == "smtp":
            return bool(self.smtp_url and self.email_from)
        return False


_overrides: dict = {}


@lru_cache(maxsize=1)
def _load_settings() -> Settings:
    return Settings()


def get_settings() -> Settings:
    """Return the process-wide settings, with any test overrides applied."""
    settings = _load_settings()
    if _overrides:
        return settings.model_copy(update=_overrides)
    return settings


def override_settings(**kwargs) -> None:
    """Override individual settings by field name (useful for tests)."""
    _overrides.update(kwargs)


def reset_settings() -> None:
    """Drop overrides and re-read the environment on next access."""
    _overrides.clear()
    _load_settings.cache_clear()
