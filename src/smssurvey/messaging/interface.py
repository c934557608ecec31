"""
Messaging gateway interface definition.

- ``send`` delivers one outbound SMS
- ``parse_inbound_message`` turns a provider webhook payload into an InboundMessage
- ``validate_webhook_signature`` authenticates the webhook caller
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import anyio


@dataclass(frozen=True)
class SendResult:
    """Result of one outbound send."""

    success: bool
    message_id: str | None = None
    status: str | None = None
    error: str | None = None
    error_code: str | None = None
    to: str | None = None

    @classmethod
    def failed(cls, to: str, error: str, error_code: str | None = None) -> "SendResult":
        return cls(success=False, status="failed", error=error, error_code=error_code, to=to)


@dataclass(frozen=True)
class InboundMessage:
    """Inbound SMS parsed from a provider webhook."""

    from_number: str
    body: str
    message_sid: str | None = None
    to_number: str | None = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    raw_payload: dict[str, Any] = field(default_factory=dict)


class MessagingProviderError(Exception):
    """Base exception for messaging provider errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        provider_response: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.provider_response = provider_response or {}


class WebhookParseError(MessagingProviderError):
    """Error parsing an inbound webhook payload."""


class MessagingGateway(ABC):
    """Abstract interface for SMS providers.

    ``send_sync`` is the source of truth; the async ``send`` runs it on a
    worker thread unless an adapter has a native async path.
    """

    async def send(self, to: str, body: str) -> SendResult:
        """Send an SMS. Raises DeliveryError when the provider rejects it."""
        return await anyio.to_thread.run_sync(self.send_sync, to, body)

    @abstractmethod
    def send_sync(self, to: str, body: str) -> SendResult:
        ...

    @abstractmethod
    def parse_inbound_message(self, payload: dict[str, Any]) -> InboundMessage:
        """Parse an inbound SMS webhook payload."""
        ...

    @abstractmethod
    def validate_webhook_signature(
        self,
        params: dict[str, str],
        signature: str,
        url: str,
    ) -> bool:
        """Validate webhook signature for authenticity."""
        ...

    def close(self) -> None:
        """Release transport resources."""
