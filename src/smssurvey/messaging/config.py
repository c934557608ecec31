"""
Messaging provider configuration.
"""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderType(str, Enum):
    """Supported messaging provider types."""

    TWILIO = "twilio"
    MOCK = "mock"


class MessagingConfig(BaseSettings):
    """Messaging provider configuration from environment."""

    model_config = SettingsConfigDict(
        env_prefix="MESSAGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider selection
    provider_type: ProviderType = Field(default=ProviderType.MOCK)

    # Provider credentials
    twilio_account_sid: str = Field(default="")
    twilio_auth_token: str = Field(default="")
    twilio_from_number: str = Field(default="")

    # Public base URL Twilio posts inbound SMS to; used to rebuild the signed URL
    webhook_base_url: str = Field(default="http://localhost:8000")
    validate_signatures: bool = Field(default=False)

    request_timeout_seconds: float = Field(default=30.0, gt=0, le=120)

    def get_webhook_url(self, path: str = "/webhooks/sms") -> str:
        base = self.webhook_base_url.rstrip("/")
        return f"{base}{path}"


def get_messaging_config() -> MessagingConfig:
    return MessagingConfig()
