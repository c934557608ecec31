"""
SMS messaging gateway: provider interface, adapters and inbound webhook.
"""

from smssurvey.messaging.interface import (
    InboundMessage,
    MessagingGateway,
    MessagingProviderError,
    SendResult,
    WebhookParseError,
)

__all__ = [
    "InboundMessage",
    "MessagingGateway",
    "MessagingProviderError",
    "SendResult",
    "WebhookParseError",
]
