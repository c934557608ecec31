"""
Inbound SMS webhook tests.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from smssurvey.config import Settings
from smssurvey.main import create_app
from smssurvey.messaging.config import MessagingConfig, ProviderType
from smssurvey.messaging.mock_adapter import MockMessagingAdapter
from smssurvey.messaging.twilio_adapter import TwilioMessagingAdapter, compute_signature
from smssurvey.messaging.webhooks.router import EMPTY_TWIML
from smssurvey.questions.catalog import QuestionCatalog
from smssurvey.survey.models import CustomerSurvey, SurveyStatus
from smssurvey.survey.repository import CustomerRepository

PHONE = "+14155551234"
AUTH_TOKEN = "test_auth_token_12345"
WEBHOOK_URL = "https://surveys.example.com/webhooks/sms"


def _post_sms(client: TestClient, body: str, from_number: str = PHONE, **headers: str) -> httpx.Response:
    return client.post(
        "/webhooks/sms",
        data={"From": from_number, "To": "+14155550000", "Body": body, "MessageSid": "SM_TEST"},
        headers=headers,
    )


@pytest.fixture
def active_customer(client: TestClient, customers: CustomerRepository) -> CustomerSurvey:
    customers.add(CustomerSurvey(id="c1", first_name="Dana", phone_number=PHONE))
    client.post("/api/survey/start/c1")
    return customers.get("c1")


class TestMockProvider:
    def test_reply_advances_survey(
        self,
        client: TestClient,
        customers: CustomerRepository,
        gateway: MockMessagingAdapter,
        active_customer: CustomerSurvey,
    ) -> None:
        response = _post_sms(client, "5")

        assert response.status_code == 200
        assert response.text == EMPTY_TWIML
        assert response.headers["content-type"].startswith("application/xml")
        customer = customers.get("c1")
        assert customer.satisfaction_rating == 5
        assert customer.current_question_id == 2
        assert gateway.get_last_message().body.startswith("Q2/6:")

    def test_sender_matched_after_normalization(
        self,
        client: TestClient,
        customers: CustomerRepository,
        active_customer: CustomerSurvey,
    ) -> None:
        _post_sms(client, "4", from_number="(415) 555-1234")

        assert customers.get("c1").satisfaction_rating == 4

    def test_stop_opts_out(
        self,
        client: TestClient,
        customers: CustomerRepository,
        gateway: MockMessagingAdapter,
        active_customer: CustomerSurvey,
    ) -> None:
        _post_sms(client, "please STOP now")

        customer = customers.get("c1")
        assert customer.status is SurveyStatus.OPTED_OUT
        assert customer.opt_out_keyword == "STOP"
        assert gateway.get_last_message().body.startswith("You have been opted out")

    def test_unknown_sender_is_acknowledged(
        self,
        client: TestClient,
        gateway: MockMessagingAdapter,
    ) -> None:
        response = _post_sms(client, "5", from_number="+14155559999")

        assert response.status_code == 200
        assert gateway.sent == []

    def test_customer_without_active_survey_is_ignored(
        self,
        client: TestClient,
        customers: CustomerRepository,
        gateway: MockMessagingAdapter,
    ) -> None:
        customers.add(CustomerSurvey(id="c1", phone_number=PHONE))

        response = _post_sms(client, "5")

        assert response.status_code == 200
        assert customers.get("c1").status is SurveyStatus.PENDING
        assert gateway.sent == []

    def test_missing_from_is_acknowledged(self, client: TestClient) -> None:
        response = client.post("/webhooks/sms", data={"Body": "5"})

        assert response.status_code == 200
        assert response.text == EMPTY_TWIML


def _twilio_transport(request: httpx.Request) -> httpx.Response:
    return httpx.Response(201, json={"sid": "SM_OUTBOUND", "status": "queued"})


@pytest.fixture
def signed_client(settings: Settings, catalog: QuestionCatalog, customers: CustomerRepository) -> TestClient:
    config = MessagingConfig(
        provider_type=ProviderType.TWILIO,
        twilio_account_sid="AC_TEST",
        twilio_auth_token=AUTH_TOKEN,
        twilio_from_number="+14155550000",
        webhook_base_url="https://surveys.example.com",
        validate_signatures=True,
    )
    gateway = TwilioMessagingAdapter(
        config=config,
        http_client=httpx.Client(transport=httpx.MockTransport(_twilio_transport)),
    )
    app = create_app(
        settings=settings,
        messaging_config=config,
        gateway=gateway,
        catalog=catalog,
        customers=customers,
    )
    with TestClient(app) as test_client:
        customers.add(CustomerSurvey(id="c1", phone_number=PHONE))
        test_client.post("/api/survey/start/c1")
        yield test_client


class TestSignatureValidation:
    def test_invalid_signature_is_not_processed(
        self,
        signed_client: TestClient,
        customers: CustomerRepository,
    ) -> None:
        response = _post_sms(signed_client, "5", **{"X-Twilio-Signature": "bogus"})

        assert response.status_code == 200
        assert customers.get("c1").satisfaction_rating is None

    def test_valid_signature_is_processed(
        self,
        signed_client: TestClient,
        customers: CustomerRepository,
    ) -> None:
        params = {"From": PHONE, "To": "+14155550000", "Body": "3", "MessageSid": "SM_TEST"}
        signature = compute_signature(AUTH_TOKEN, WEBHOOK_URL, params)

        response = _post_sms(signed_client, "3", **{"X-Twilio-Signature": signature})

        assert response.status_code == 200
        assert customers.get("c1").satisfaction_rating == 3
