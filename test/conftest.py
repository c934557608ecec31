"""
Shared fixtures: an in-memory catalog, customer store, mock gateway and engine.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from smssurvey.config import Settings
from smssurvey.main import create_app
from smssurvey.messaging.config import MessagingConfig, ProviderType
from smssurvey.messaging.mock_adapter import MockMessagingAdapter
from smssurvey.questions.catalog import QuestionCatalog
from smssurvey.questions.defaults import default_questions
from smssurvey.survey.engine import ConversationEngine
from smssurvey.survey.models import CustomerSurvey
from smssurvey.survey.repository import CustomerRepository
from smssurvey.survey.schedules import ScheduleRepository

BUSINESS_NAME = "Acme Outfitters"
CUSTOMER_PHONE = "+14155551234"


@pytest.fixture
def catalog() -> QuestionCatalog:
    return QuestionCatalog(default_questions(BUSINESS_NAME))


@pytest.fixture
def customers() -> CustomerRepository:
    return CustomerRepository()


@pytest.fixture
def gateway() -> MockMessagingAdapter:
    return MockMessagingAdapter()


@pytest.fixture
def engine(
    catalog: QuestionCatalog,
    customers: CustomerRepository,
    gateway: MockMessagingAdapter,
) -> ConversationEngine:
    return ConversationEngine(
        catalog=catalog,
        customers=customers,
        gateway=gateway,
        business_name=BUSINESS_NAME,
    )


@pytest.fixture
def make_customer(customers: CustomerRepository) -> Callable[..., CustomerSurvey]:
    counter = {"n": 0}

    def _make(**fields) -> CustomerSurvey:
        counter["n"] += 1
        fields.setdefault("id", f"customer_{counter['n']}")
        fields.setdefault("first_name", "Dana")
        fields.setdefault("email", f"dana{counter['n']}@example.com")
        if "phone_number" not in fields:
            fields["phone_number"] = CUSTOMER_PHONE
        return customers.add(CustomerSurvey(**fields))

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(business_name=BUSINESS_NAME, seed_default_questions=True)


@pytest.fixture
def messaging_config() -> MessagingConfig:
    return MessagingConfig(
        provider_type=ProviderType.MOCK,
        webhook_base_url="https://surveys.example.com",
        validate_signatures=False,
    )


@pytest.fixture
def schedules() -> ScheduleRepository:
    return ScheduleRepository()


@pytest.fixture
def client(
    settings: Settings,
    messaging_config: MessagingConfig,
    gateway: MockMessagingAdapter,
    catalog: QuestionCatalog,
    customers: CustomerRepository,
    schedules: ScheduleRepository,
) -> TestClient:
    app = create_app(
        settings=settings,
        messaging_config=messaging_config,
        gateway=gateway,
        catalog=catalog,
        customers=customers,
        schedules=schedules,
    )
    with TestClient(app) as test_client:
        yield test_client
