"""
Twilio SMS adapter.

Outbound messages go through the Messages REST resource with httpx; inbound
messages arrive as form-encoded webhooks signed with ``X-Twilio-Signature``.
"""

from __future__ import annotations

import hashlib
import hmac
from base64 import b64encode
from typing import Any

import httpx

from smssurvey.messaging.config import MessagingConfig, get_messaging_config
from smssurvey.messaging.interface import (
    InboundMessage,
    MessagingGateway,
    SendResult,
    WebhookParseError,
)
from smssurvey.shared.exceptions import DeliveryError
from smssurvey.shared.logging import get_logger, mask_phone

logger = get_logger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


def compute_signature(auth_token: str, url: str, params: dict[str, str]) -> str:
    """Twilio request signature: HMAC-SHA1 over the URL plus sorted key/value pairs."""
    data = url
    for key in sorted(params):
        data += key + params[key]
    digest = hmac.new(auth_token.encode("utf-8"), data.encode("utf-8"), hashlib.sha1).digest()
    return b64encode(digest).decode("utf-8")


class TwilioMessagingAdapter(MessagingGateway):
    """Twilio SMS provider adapter.

    Uses a sync httpx client; the async ``send`` inherited from the interface
    runs it on a worker thread.
    """

    def __init__(
        self,
        config: MessagingConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._config = config or get_messaging_config()
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(
                timeout=httpx.Timeout(self._config.request_timeout_seconds)
            )
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def _get_auth(self) -> tuple[str, str]:
        return (self._config.twilio_account_sid, self._config.twilio_auth_token)

    def _get_api_url(self, endpoint: str) -> str:
        account_sid = self._config.twilio_account_sid
        return f"{TWILIO_API_BASE}/Accounts/{account_sid}{endpoint}"

    def send_sync(self, to: str, body: str) -> SendResult:
        """Send an SMS via Twilio (sync)."""
        client = self._get_client()
        payload = {
            "To": to,
            "From": self._config.twilio_from_number,
            "Body": body,
        }

        logger.info("Sending Twilio SMS", extra={"to": mask_phone(to), "length": len(body)})

        try:
            response = client.post(
                self._get_api_url("/Messages.json"),
                data=payload,
                auth=self._get_auth(),
            )
        except httpx.HTTPError as e:
            logger.exception("HTTP error during Twilio send", extra={"to": mask_phone(to)})
            raise DeliveryError(
                message=f"HTTP error: {e!s}",
                error_code="HTTP_ERROR",
                details={"to": to},
            ) from e

        if response.status_code >= 400:
            error_data = _json_or_empty(response)
            logger.error(
                "Twilio send failed",
                extra={
                    "status_code": response.status_code,
                    "error": error_data,
                    "to": mask_phone(to),
                },
            )
            raise DeliveryError(
                message=error_data.get("message", "Message delivery failed"),
                error_code=str(error_data.get("code", response.status_code)),
                details={"to": to},
                provider_response=error_data,
            )

        data = _json_or_empty(response)
        return SendResult(
            success=True,
            message_id=data.get("sid"),
            status=data.get("status", "queued"),
            to=data.get("to", to),
        )

    def parse_inbound_message(self, payload: dict[str, Any]) -> InboundMessage:
        from_number = payload.get("From")
        if not from_number:
            raise WebhookParseError(
                message="Missing From in webhook payload",
                error_code="MISSING_FROM",
                provider_response=payload,
            )

        message_sid = payload.get("MessageSid") or payload.get("SmsSid")
        if not message_sid:
            logger.warning(
                "Twilio SMS webhook without MessageSid",
                extra={"payload_keys": sorted(payload.keys())},
            )

        return InboundMessage(
            from_number=str(from_number),
            body=str(payload.get("Body") or ""),
            message_sid=message_sid,
            to_number=payload.get("To"),
            raw_payload=dict(payload),
        )

    def validate_webhook_signature(self, params: dict[str, str], signature: str, url: str) -> bool:
        if not self._config.twilio_auth_token:
            logger.warning("No auth token configured, skipping signature validation")
            return True
        if not signature:
            return False

        expected = compute_signature(self._config.twilio_auth_token, url, params)
        return hmac.compare_digest(expected, signature)


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
