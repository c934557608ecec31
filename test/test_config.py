"""Tests for settings loading."""

import pytest

from smssurvey.config import Settings, get_settings
from smssurvey.messaging.config import MessagingConfig, ProviderType


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("BUSINESS_NAME", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.business_name == "us"
        assert settings.seed_default_questions is True
        assert settings.log_level == "INFO"

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BUSINESS_NAME", "Acme Outfitters")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example.com, https://b.example.com,")

        settings = get_settings()

        assert settings.business_name == "Acme Outfitters"
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins_list == ["https://a.example.com", "https://b.example.com"]


class TestMessagingConfig:
    def test_defaults_to_mock(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MESSAGING_PROVIDER_TYPE", raising=False)

        config = MessagingConfig(_env_file=None)

        assert config.provider_type is ProviderType.MOCK
        assert config.validate_signatures is False

    def test_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MESSAGING_PROVIDER_TYPE", "twilio")
        monkeypatch.setenv("MESSAGING_TWILIO_FROM_NUMBER", "+14155550000")

        config = MessagingConfig(_env_file=None)

        assert config.provider_type is ProviderType.TWILIO
        assert config.twilio_from_number == "+14155550000"

    def test_webhook_url(self) -> None:
        config = MessagingConfig(_env_file=None, webhook_base_url="https://surveys.example.com/")

        assert config.get_webhook_url() == "https://surveys.example.com/webhooks/sms"
