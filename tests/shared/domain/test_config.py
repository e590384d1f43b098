"""Tests for runtime settings and test overrides."""

from shared.config import Settings, get_settings, override_settings, reset_settings


class TestEmailConfigured:
    def test_fake_transport_is_configured(self):
        settings = Settings(EMAIL_TRANSPORT="fake")
        assert settings.email_configured is True

    def test_smtp_needs_url_and_sender(self):
        assert Settings(EMAIL_TRANSPORT="smtp").email_configured is False
        assert Settings(EMAIL_TRANSPORT="smtp", SMTP_URL="smtp://mail.test").email_configured is False
        assert (
            Settings(EMAIL_TRANSPORT="smtp", SMTP_URL="smtp://mail.test", EMAIL_FROM="orders@shop.test").email_configured
            is True
        )

    def test_none_transport_is_not_configured(self):
        assert Settings(EMAIL_TRANSPORT="none").email_configured is False


class TestEnvironment:
    def test_production_flag(self):
        assert Settings(PROTEAN_ENV="production").is_production is True
        assert Settings(PROTEAN_ENV="test").is_production is False

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("STORE_NAME", "Curry Corner")
        reset_settings()
        assert get_settings().store_name == "Curry Corner"


class TestOverrides:
    def test_override_applies_on_top_of_environment(self):
        override_settings(public_host="https://override.test")
        assert get_settings().public_host == "https://override.test"

    def test_reset_drops_overrides(self):
        override_settings(store_name="Temporary")
        reset_settings()
        assert get_settings().store_name != "Temporary"
