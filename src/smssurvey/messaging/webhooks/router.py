"""
FastAPI router for the inbound SMS webhook.

The provider must always get a 200: unknown senders, customers without an
active survey and processing errors are logged and acknowledged.
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from smssurvey.dependencies import (
    get_customer_repository,
    get_engine,
    get_gateway,
    get_messaging_settings,
)
from smssurvey.messaging.config import MessagingConfig
from smssurvey.messaging.interface import MessagingGateway, WebhookParseError
from smssurvey.shared.exceptions import AppError
from smssurvey.shared.logging import correlation_scope, get_logger, mask_phone
from smssurvey.survey.engine import ConversationEngine
from smssurvey.survey.models import SurveyStatus
from smssurvey.survey.repository import CustomerRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?>\n<Response></Response>'


def _ack() -> Response:
    # Replies are sent through the REST API, never inline.
    return Response(content=EMPTY_TWIML, media_type="application/xml")


@router.post("/sms", status_code=status.HTTP_200_OK)
async def receive_sms(
    request: Request,
    gateway: Annotated[MessagingGateway, Depends(get_gateway)],
    config: Annotated[MessagingConfig, Depends(get_messaging_settings)],
    customers: Annotated[CustomerRepository, Depends(get_customer_repository)],
    engine: Annotated[ConversationEngine, Depends(get_engine)],
) -> Response:
    form = await request.form()
    payload = {key: str(value) for key, value in form.items()}

    if config.validate_signatures:
        signature = request.headers.get("X-Twilio-Signature", "")
        url = config.get_webhook_url(request.url.path)
        if not gateway.validate_webhook_signature(payload, signature, url):
            logger.warning("Rejected SMS webhook with invalid signature", extra={"url": url})
            return _ack()

    try:
        message = gateway.parse_inbound_message(payload)
    except WebhookParseError as e:
        logger.warning(
            "Unparseable SMS webhook",
            extra={"error": str(e), "error_code": e.error_code},
        )
        return _ack()

    with correlation_scope(message.message_sid or uuid.uuid4().hex):
        customer = customers.find_by_phone(message.from_number)
        if customer is None:
            logger.info(
                "SMS from unknown sender ignored",
                extra={"from": mask_phone(message.from_number)},
            )
            return _ack()

        if customer.status is not SurveyStatus.ACTIVE:
            logger.info(
                "SMS from customer without an active survey ignored",
                extra={"customer_id": customer.id, "status": customer.status.value},
            )
            return _ack()

        try:
            result = await engine.handle_inbound_text(customer.id, message.body)
        except AppError as e:
            logger.warning(
                "Inbound SMS not applied",
                extra={"customer_id": customer.id, "error": e.message},
            )
            return _ack()

        logger.info(
            "Inbound SMS processed",
            extra={
                "customer_id": customer.id,
                "message_sid": message.message_sid,
                "outcome": result.outcome.value,
            },
        )
        return _ack()
