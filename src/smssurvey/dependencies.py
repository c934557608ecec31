"""
FastAPI dependencies resolving the runtime objects built at start-up.

Everything lives on ``app.state``; nothing here is a module global.
"""

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from smssurvey.messaging.interface import MessagingGateway
    from smssurvey.messaging.config import MessagingConfig
    from smssurvey.questions.catalog import QuestionCatalog
    from smssurvey.survey.engine import ConversationEngine
    from smssurvey.survey.repository import CustomerRepository
    from smssurvey.survey.schedules import ScheduleRepository


def get_catalog(request: Request) -> "QuestionCatalog":
    return request.app.state.catalog


def get_customer_repository(request: Request) -> "CustomerRepository":
    return request.app.state.customers


def get_schedule_repository(request: Request) -> "ScheduleRepository":
    return request.app.state.schedules


def get_gateway(request: Request) -> "MessagingGateway":
    return request.app.state.gateway


def get_messaging_settings(request: Request) -> "MessagingConfig":
    return request.app.state.messaging_config


def get_engine(request: Request) -> "ConversationEngine":
    return request.app.state.engine
