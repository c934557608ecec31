"""Tests for the mock messaging adapter."""

import pytest

from smssurvey.messaging.interface import WebhookParseError
from smssurvey.messaging.mock_adapter import MockMessagingAdapter
from smssurvey.shared.exceptions import DeliveryError


@pytest.fixture
def mock_adapter() -> MockMessagingAdapter:
    return MockMessagingAdapter()


class TestMockAdapterSend:
    def test_send_success(self, mock_adapter: MockMessagingAdapter) -> None:
        result = mock_adapter.send_sync("+14155551234", "hello")

        assert result.success
        assert result.message_id == "MOCK_MSG_000001"
        assert result.status == "queued"

    def test_send_records_message(self, mock_adapter: MockMessagingAdapter) -> None:
        mock_adapter.send_sync("+14155551234", "one")
        mock_adapter.send_sync("+14155559999", "two")

        assert [m.body for m in mock_adapter.sent] == ["one", "two"]
        assert [m.body for m in mock_adapter.sent_to("+14155559999")] == ["two"]
        assert mock_adapter.get_last_message().message_id == "MOCK_MSG_000002"

    def test_configured_failure(self, mock_adapter: MockMessagingAdapter) -> None:
        mock_adapter.configure_failure(error_message="Test failure", error_code="TEST_ERROR")

        with pytest.raises(DeliveryError) as exc_info:
            mock_adapter.send_sync("+14155551234", "hello")

        assert str(exc_info.value) == "Test failure"
        assert exc_info.value.error_code == "TEST_ERROR"
        assert mock_adapter.sent == []

    def test_reset(self, mock_adapter: MockMessagingAdapter) -> None:
        mock_adapter.send_sync("+14155551234", "hello")
        mock_adapter.configure_failure()

        mock_adapter.reset()

        assert mock_adapter.sent == []
        assert mock_adapter.send_sync("+14155551234", "again").message_id == "MOCK_MSG_000001"

    @pytest.mark.asyncio
    async def test_async_send(self, mock_adapter: MockMessagingAdapter) -> None:
        result = await mock_adapter.send("+14155551234", "hello")

        assert result.success
        assert len(mock_adapter.sent) == 1


class TestMockAdapterInbound:
    def test_parse_twilio_fields(self, mock_adapter: MockMessagingAdapter) -> None:
        payload = mock_adapter.generate_inbound_payload(
            "+14155551234", "5", message_sid="SM123", to_number="+14155550000"
        )

        message = mock_adapter.parse_inbound_message(payload)

        assert message.from_number == "+14155551234"
        assert message.body == "5"
        assert message.message_sid == "SM123"
        assert message.to_number == "+14155550000"

    def test_missing_from(self, mock_adapter: MockMessagingAdapter) -> None:
        with pytest.raises(WebhookParseError) as exc_info:
            mock_adapter.parse_inbound_message({"Body": "5"})

        assert exc_info.value.error_code == "MISSING_FROM"

    def test_signature_always_valid(self, mock_adapter: MockMessagingAdapter) -> None:
        assert mock_adapter.validate_webhook_signature({}, "", "https://example.com")
