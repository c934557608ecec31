"""
Messaging gateway factory.

Configuration comes from MessagingConfig (pydantic-settings, OS env + .env).
"""

from __future__ import annotations

from smssurvey.messaging.config import MessagingConfig, ProviderType, get_messaging_config
from smssurvey.messaging.interface import MessagingGateway
from smssurvey.messaging.mock_adapter import MockMessagingAdapter
from smssurvey.messaging.twilio_adapter import TwilioMessagingAdapter
from smssurvey.shared.logging import get_logger

logger = get_logger(__name__)


def _mask(s: str, keep: int = 6) -> str:
    if not s:
        return ""
    if len(s) <= keep:
        return "*" * len(s)
    return f"{s[:keep]}***"


def create_messaging_gateway(config: MessagingConfig | None = None) -> MessagingGateway:
    """Build the gateway selected by ``provider_type``."""
    cfg = config or get_messaging_config()

    logger.info(
        "Messaging config resolved",
        extra={
            "provider_type": cfg.provider_type.value,
            "twilio_account_sid": _mask(cfg.twilio_account_sid),
            "webhook_base_url": cfg.webhook_base_url,
            "validate_signatures": cfg.validate_signatures,
        },
    )

    if cfg.provider_type == ProviderType.TWILIO:
        return TwilioMessagingAdapter(cfg)

    if cfg.provider_type == ProviderType.MOCK:
        return MockMessagingAdapter()

    raise ValueError(f"Unsupported messaging provider_type: {cfg.provider_type}")
