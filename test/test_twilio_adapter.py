"""Tests for the Twilio SMS adapter."""

from unittest.mock import MagicMock
from urllib.parse import parse_qs

import httpx
import pytest

from smssurvey.messaging.config import MessagingConfig, ProviderType
from smssurvey.messaging.interface import WebhookParseError
from smssurvey.messaging.twilio_adapter import TwilioMessagingAdapter, compute_signature
from smssurvey.shared.exceptions import DeliveryError


@pytest.fixture
def twilio_config() -> MessagingConfig:
    return MessagingConfig(
        provider_type=ProviderType.TWILIO,
        twilio_account_sid="AC_TEST_ACCOUNT_SID",
        twilio_auth_token="test_auth_token_12345",
        twilio_from_number="+14155550000",
        webhook_base_url="https://example.com",
    )


def _adapter(config: MessagingConfig, handler) -> TwilioMessagingAdapter:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TwilioMessagingAdapter(config=config, http_client=client)


class TestTwilioSend:
    def test_send_success(self, twilio_config: MessagingConfig) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                201,
                json={"sid": "SM_TEST_SID", "status": "queued", "to": "+14155551234"},
            )

        result = _adapter(twilio_config, handler).send_sync("+14155551234", "Q1/6: hi")

        assert result.success
        assert result.message_id == "SM_TEST_SID"
        assert result.status == "queued"

        [request] = seen
        assert request.method == "POST"
        assert request.url.path == "/2010-04-01/Accounts/AC_TEST_ACCOUNT_SID/Messages.json"
        form = parse_qs(request.content.decode())
        assert form == {"To": ["+14155551234"], "From": ["+14155550000"], "Body": ["Q1/6: hi"]}
        assert request.headers["authorization"].startswith("Basic ")

    def test_api_error_raises_delivery_error(self, twilio_config: MessagingConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To' Phone Number"})

        with pytest.raises(DeliveryError) as exc_info:
            _adapter(twilio_config, handler).send_sync("+1415", "hi")

        assert str(exc_info.value) == "Invalid 'To' Phone Number"
        assert exc_info.value.error_code == "21211"
        assert exc_info.value.provider_response["code"] == 21211

    def test_transport_error_raises_delivery_error(self, twilio_config: MessagingConfig) -> None:
        mock_client = MagicMock(spec=httpx.Client)
        mock_client.post.side_effect = httpx.ConnectError("connection refused")
        adapter = TwilioMessagingAdapter(config=twilio_config, http_client=mock_client)

        with pytest.raises(DeliveryError) as exc_info:
            adapter.send_sync("+14155551234", "hi")

        assert exc_info.value.error_code == "HTTP_ERROR"

    @pytest.mark.asyncio
    async def test_async_send_runs_sync_path(self, twilio_config: MessagingConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"sid": "SM_ASYNC", "status": "queued"})

        result = await _adapter(twilio_config, handler).send("+14155551234", "hi")

        assert result.message_id == "SM_ASYNC"


class TestTwilioInbound:
    def test_parse_inbound(self, twilio_config: MessagingConfig) -> None:
        adapter = TwilioMessagingAdapter(config=twilio_config, http_client=MagicMock())

        message = adapter.parse_inbound_message(
            {"From": "+14155551234", "To": "+14155550000", "Body": "B\ncall me", "MessageSid": "SM1"}
        )

        assert message.from_number == "+14155551234"
        assert message.body == "B\ncall me"
        assert message.message_sid == "SM1"

    def test_missing_from(self, twilio_config: MessagingConfig) -> None:
        adapter = TwilioMessagingAdapter(config=twilio_config, http_client=MagicMock())

        with pytest.raises(WebhookParseError):
            adapter.parse_inbound_message({"Body": "hi"})


class TestTwilioSignature:
    URL = "https://example.com/webhooks/sms"
    PARAMS = {"From": "+14155551234", "Body": "5", "MessageSid": "SM1"}

    def test_valid_signature(self, twilio_config: MessagingConfig) -> None:
        adapter = TwilioMessagingAdapter(config=twilio_config, http_client=MagicMock())
        signature = compute_signature("test_auth_token_12345", self.URL, self.PARAMS)

        assert adapter.validate_webhook_signature(self.PARAMS, signature, self.URL)

    def test_tampered_body(self, twilio_config: MessagingConfig) -> None:
        adapter = TwilioMessagingAdapter(config=twilio_config, http_client=MagicMock())
        signature = compute_signature("test_auth_token_12345", self.URL, self.PARAMS)

        tampered = {**self.PARAMS, "Body": "1"}
        assert not adapter.validate_webhook_signature(tampered, signature, self.URL)

    def test_missing_signature(self, twilio_config: MessagingConfig) -> None:
        adapter = TwilioMessagingAdapter(config=twilio_config, http_client=MagicMock())

        assert not adapter.validate_webhook_signature(self.PARAMS, "", self.URL)

