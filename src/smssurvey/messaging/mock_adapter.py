"""
Mock messaging adapter for testing and local runs.
"""

from dataclasses import dataclass
from typing import Any

from smssurvey.messaging.interface import (
    InboundMessage,
    MessagingGateway,
    SendResult,
    WebhookParseError,
)
from smssurvey.shared.exceptions import DeliveryError
from smssurvey.shared.logging import get_logger, mask_phone

logger = get_logger(__name__)


@dataclass(frozen=True)
class SentMessage:
    """An outbound SMS recorded by the mock."""

    to: str
    body: str
    message_id: str


class MockMessagingAdapter(MessagingGateway):
    """Records every send; can be told to fail."""

    def __init__(self) -> None:
        self._sent: list[SentMessage] = []
        self._next_message_id: int = 1
        self._should_fail: bool = False
        self._fail_error: str = "Mock failure"
        self._fail_code: str = "MOCK_ERROR"

    def reset(self) -> None:
        self._sent.clear()
        self._next_message_id = 1
        self._should_fail = False
        self._fail_error = "Mock failure"
        self._fail_code = "MOCK_ERROR"

    def configure_failure(
        self,
        should_fail: bool = True,
        error_message: str = "Mock failure",
        error_code: str = "MOCK_ERROR",
    ) -> None:
        self._should_fail = should_fail
        self._fail_error = error_message
        self._fail_code = error_code

    @property
    def sent(self) -> list[SentMessage]:
        return self._sent.copy()

    def sent_to(self, phone: str) -> list[SentMessage]:
        return [m for m in self._sent if m.to == phone]

    def get_last_message(self) -> SentMessage | None:
        return self._sent[-1] if self._sent else None

    async def send(self, to: str, body: str) -> SendResult:
        # No worker thread: keeps test ordering deterministic.
        return self.send_sync(to, body)

    def send_sync(self, to: str, body: str) -> SendResult:
        logger.info("Mock: Sending SMS", extra={"to": mask_phone(to), "length": len(body)})

        if self._should_fail:
            raise DeliveryError(
                message=self._fail_error,
                error_code=self._fail_code,
                details={"to": to},
            )

        message_id = f"MOCK_MSG_{self._next_message_id:06d}"
        self._next_message_id += 1
        self._sent.append(SentMessage(to=to, body=body, message_id=message_id))

        return SendResult(success=True, message_id=message_id, status="queued", to=to)

    def parse_inbound_message(self, payload: dict[str, Any]) -> InboundMessage:
        from_number = payload.get("From") or payload.get("from_number")
        if not from_number:
            raise WebhookParseError(
                message="Missing From in payload",
                error_code="MISSING_FROM",
                provider_response=payload,
            )

        return InboundMessage(
            from_number=str(from_number),
            body=str(payload.get("Body") or payload.get("body") or ""),
            message_sid=payload.get("MessageSid") or payload.get("message_sid"),
            to_number=payload.get("To") or payload.get("to_number"),
            raw_payload=dict(payload),
        )

    def validate_webhook_signature(self, params: dict[str, str], signature: str, url: str) -> bool:
        return True

    def generate_inbound_payload(
        self,
        from_number: str,
        body: str,
        message_sid: str | None = None,
        to_number: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"From": from_number, "Body": body}
        if message_sid:
            payload["MessageSid"] = message_sid
        if to_number:
            payload["To"] = to_number
        return payload
