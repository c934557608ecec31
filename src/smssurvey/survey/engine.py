"""
Conversation engine.

Drives one customer at a time through the catalog:

    NOT_STARTED (phone_needed | pending) -> ACTIVE(question) -> COMPLETED
    any non-terminal state               -> OPTED_OUT

Every operation on a customer runs under that customer's lock, including the
outbound sends, so a duplicated inbound reply is only processed after the
first one has moved the state on. A failed send is reported in the result
but never rolls the transition back.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from smssurvey.contacts.phone import normalize_phone_number
from smssurvey.messaging.interface import MessagingGateway, SendResult
from smssurvey.questions.catalog import QuestionCatalog
from smssurvey.questions.models import Question, QuestionRole
from smssurvey.shared.exceptions import DeliveryError, StateError
from smssurvey.shared.logging import get_logger, log_with_context, mask_phone
from smssurvey.survey import messages
from smssurvey.survey.interpreter import NpsAnswer, RatingAnswer, YesNoAnswer, interpret
from smssurvey.survey.models import CustomerSurvey, SurveyAnswer, SurveyStatus, utcnow
from smssurvey.survey.repository import CustomerRepository

logger = get_logger(__name__)

# Checked in this order; the first keyword found wins.
OPT_OUT_KEYWORDS = ("STOP", "UNSUBSCRIBE", "QUIT", "END", "CANCEL")

_OPT_OUT_PATTERNS = tuple(
    (keyword, re.compile(rf"\b{keyword}\b")) for keyword in OPT_OUT_KEYWORDS
)


def detect_opt_out(text: str | None) -> str | None:
    """Return the opt-out keyword contained in ``text`` as a whole word, if any."""
    cleaned = (text or "").strip().upper()
    if not cleaned:
        return None
    for keyword, pattern in _OPT_OUT_PATTERNS:
        if pattern.search(cleaned):
            return keyword
    return None


class EngineOutcome(str, Enum):
    """What an engine operation did."""

    STARTED = "started"
    ADVANCED = "advanced"
    RETRY = "retry"
    COMPLETED = "completed"
    OPTED_OUT = "opted_out"
    FAILED = "failed"


@dataclass(frozen=True)
class EngineResult:
    """Structured outcome of one engine operation."""

    outcome: EngineOutcome
    customer: CustomerSurvey
    next_question: Question | None = None
    question_number: int | None = None
    total_questions: int = 0
    error: str | None = None
    sends: tuple[SendResult, ...] = field(default_factory=tuple)

    @property
    def sent_message_ids(self) -> list[str]:
        return [s.message_id for s in self.sends if s.success and s.message_id]

    @property
    def delivery_errors(self) -> list[str]:
        return [s.error or "Message delivery failed" for s in self.sends if not s.success]

    @property
    def success(self) -> bool:
        return not self.delivery_errors


class ConversationEngine:
    """Per-customer survey state machine."""

    def __init__(
        self,
        catalog: QuestionCatalog,
        customers: CustomerRepository,
        gateway: MessagingGateway,
        business_name: str = "us",
    ) -> None:
        self._catalog = catalog
        self._customers = customers
        self._gateway = gateway
        self._business_name = business_name

    async def start(self, customer_id: str) -> EngineResult:
        """Send the first question and make the survey active."""
        async with self._customers.lock(customer_id):
            customer = self._customers.get(customer_id)

            if customer.status is SurveyStatus.ACTIVE:
                raise StateError(
                    "survey already in progress",
                    details={"customer_id": customer_id},
                )
            if customer.status.is_terminal:
                raise StateError(
                    f"survey already {customer.status.value}",
                    details={"customer_id": customer_id, "status": customer.status.value},
                )

            phone = normalize_phone_number(customer.phone_number)
            if phone is None:
                raise StateError(
                    "customer has no valid phone number",
                    details={"customer_id": customer_id, "status": customer.status.value},
                )

            questions = self._catalog.get_ordered()
            if not questions:
                raise StateError("catalog has no questions", details={"customer_id": customer_id})
            first = questions[0]

            customer.phone_number = phone
            customer.status = SurveyStatus.ACTIVE
            customer.current_question_id = first.id
            customer.survey_started_at = utcnow()

            log_with_context(
                logger,
                logging.INFO,
                "Survey started",
                customer_id=customer_id,
                question_id=first.id,
                phone=mask_phone(phone),
                total_questions=len(questions),
            )

            body = messages.question_message(customer, first, 1, len(questions), self._business_name)
            sends = (await self._deliver(customer, body),)

            return EngineResult(
                outcome=EngineOutcome.STARTED,
                customer=customer.snapshot(),
                next_question=first,
                question_number=1,
                total_questions=len(questions),
                sends=sends,
            )

    async def handle_inbound_text(self, customer_id: str, text: str) -> EngineResult:
        """Process one reply from a customer with an active survey."""
        async with self._customers.lock(customer_id):
            customer = self._customers.get(customer_id)

            if customer.status is not SurveyStatus.ACTIVE:
                raise StateError(
                    "no survey in progress",
                    details={"customer_id": customer_id, "status": customer.status.value},
                )

            keyword = detect_opt_out(text)
            if keyword is not None:
                return await self._opt_out_locked(customer, keyword)

            questions = self._catalog.get_ordered()
            current = self._find_current(customer, questions)
            if current is None:
                return await self._resume_locked(customer, questions)

            result = interpret(current.type, text, current.validation)
            if not result.valid:
                logger.info(
                    "Reply rejected",
                    extra={
                        "customer_id": customer_id,
                        "question_id": current.id,
                        "outcome": EngineOutcome.RETRY.value,
                        "error": result.error,
                    },
                )
                body = messages.retry_message(result.error or "", current.help_text)
                sends = (await self._deliver(customer, body),)
                return EngineResult(
                    outcome=EngineOutcome.RETRY,
                    customer=customer.snapshot(),
                    next_question=current,
                    question_number=_position(questions, current.id),
                    total_questions=len(questions),
                    error=result.error,
                    sends=sends,
                )

            if customer.has_answered(current.id):
                raise StateError(
                    "question already answered",
                    details={"customer_id": customer_id, "question_id": current.id},
                )

            customer.responses.append(
                SurveyAnswer(
                    question_id=current.id,
                    raw_answer=text,
                    processed_answer=result.value,
                )
            )
            self._apply_role(customer, current, result.answer)

            next_question = self._next_question(customer, questions, current.id)
            if next_question is None:
                return await self._complete_locked(customer, len(questions))

            customer.current_question_id = next_question.id
            position = _position(questions, next_question.id)

            logger.info(
                "Survey advanced",
                extra={
                    "customer_id": customer_id,
                    "question_id": current.id,
                    "next_question_id": next_question.id,
                    "outcome": EngineOutcome.ADVANCED.value,
                },
            )

            body = messages.question_message(
                customer, next_question, position, len(questions), self._business_name
            )
            sends = (await self._deliver(customer, body),)
            return EngineResult(
                outcome=EngineOutcome.ADVANCED,
                customer=customer.snapshot(),
                next_question=next_question,
                question_number=position,
                total_questions=len(questions),
                sends=sends,
            )

    async def opt_out(self, customer_id: str, keyword: str | None = None) -> EngineResult:
        """Opt a customer out from any non-terminal state."""
        async with self._customers.lock(customer_id):
            customer = self._customers.get(customer_id)
            if customer.status.is_terminal:
                raise StateError(
                    f"survey already {customer.status.value}",
                    details={"customer_id": customer_id, "status": customer.status.value},
                )
            return await self._opt_out_locked(customer, keyword)

    async def mark_failed(self, customer_id: str, reason: str) -> EngineResult:
        """Abandon a non-terminal conversation. Nothing is sent."""
        async with self._customers.lock(customer_id):
            customer = self._customers.get(customer_id)
            if customer.status.is_terminal:
                raise StateError(
                    f"survey already {customer.status.value}",
                    details={"customer_id": customer_id, "status": customer.status.value},
                )

            customer.status = SurveyStatus.FAILED
            customer.current_question_id = None
            customer.failure_reason = reason

            logger.warning(
                "Survey marked failed",
                extra={"customer_id": customer_id, "reason": reason},
            )
            return EngineResult(
                outcome=EngineOutcome.FAILED,
                customer=customer.snapshot(),
                total_questions=len(self._catalog),
            )

    async def _opt_out_locked(self, customer: CustomerSurvey, keyword: str | None) -> EngineResult:
        previous = customer.status
        customer.status = SurveyStatus.OPTED_OUT
        customer.current_question_id = None
        customer.opt_out_keyword = keyword
        customer.opted_out_at = utcnow()

        logger.info(
            "Customer opted out",
            extra={
                "customer_id": customer.id,
                "keyword": keyword,
                "previous_status": previous.value,
                "outcome": EngineOutcome.OPTED_OUT.value,
            },
        )

        sends: tuple[SendResult, ...] = ()
        if normalize_phone_number(customer.phone_number):
            body = messages.opt_out_confirmation(self._business_name)
            sends = (await self._deliver(customer, body),)

        return EngineResult(
            outcome=EngineOutcome.OPTED_OUT,
            customer=customer.snapshot(),
            total_questions=len(self._catalog),
            sends=sends,
        )

    async def _complete_locked(self, customer: CustomerSurvey, total: int) -> EngineResult:
        customer.status = SurveyStatus.COMPLETED
        customer.current_question_id = None
        customer.survey_completed_at = utcnow()

        logger.info(
            "Survey completed",
            extra={
                "customer_id": customer.id,
                "responses": customer.questions_answered,
                "manager_callback_requested": customer.manager_callback_requested,
                "outcome": EngineOutcome.COMPLETED.value,
            },
        )

        sends = [await self._deliver(customer, messages.thank_you_message(self._business_name))]
        if customer.manager_callback_requested:
            sends.append(
                await self._deliver(customer, messages.callback_confirmation(customer.callback_topic))
            )

        return EngineResult(
            outcome=EngineOutcome.COMPLETED,
            customer=customer.snapshot(),
            total_questions=total,
            sends=tuple(sends),
        )

    @staticmethod
    def _find_current(customer: CustomerSurvey, questions: tuple[Question, ...]) -> Question | None:
        for question in questions:
            if question.id == customer.current_question_id:
                return question
        return None

    async def _resume_locked(
        self, customer: CustomerSurvey, questions: tuple[Question, ...]
    ) -> EngineResult:
        """Move past a current question that was removed from the catalog.

        The reply is dropped; the customer gets the first question they have
        not answered yet, or the thank-you when none is left.
        """
        removed_id = customer.current_question_id
        pending = next((q for q in questions if not customer.has_answered(q.id)), None)

        logger.warning(
            "Current question removed from catalog",
            extra={
                "customer_id": customer.id,
                "question_id": removed_id,
                "next_question_id": pending.id if pending else None,
            },
        )

        if pending is None:
            return await self._complete_locked(customer, len(questions))

        customer.current_question_id = pending.id
        position = _position(questions, pending.id)
        body = messages.question_message(
            customer, pending, position, len(questions), self._business_name, greet=False
        )
        sends = (await self._deliver(customer, body),)
        return EngineResult(
            outcome=EngineOutcome.ADVANCED,
            customer=customer.snapshot(),
            next_question=pending,
            question_number=position,
            total_questions=len(questions),
            sends=sends,
        )

    @staticmethod
    def _next_question(
        customer: CustomerSurvey,
        questions: tuple[Question, ...],
        current_id: int,
    ) -> Question | None:
        ids = [q.id for q in questions]
        start = ids.index(current_id) + 1
        for question in questions[start:]:
            if not customer.has_answered(question.id):
                return question
        return None

    @staticmethod
    def _apply_role(customer: CustomerSurvey, question: Question, answer: object) -> None:
        if question.role is QuestionRole.RATING and isinstance(answer, RatingAnswer):
            if customer.satisfaction_rating is None:
                customer.satisfaction_rating = answer.value
        elif question.role is QuestionRole.NPS and isinstance(answer, NpsAnswer):
            if customer.nps_score is None:
                customer.nps_score = answer.score
        elif question.role is QuestionRole.CALLBACK and isinstance(answer, YesNoAnswer):
            if answer.affirmative and not customer.manager_callback_requested:
                customer.manager_callback_requested = True
                customer.callback_topic = answer.follow_up_text or messages.DEFAULT_CALLBACK_TOPIC

    async def _deliver(self, customer: CustomerSurvey, body: str) -> SendResult:
        to = customer.phone_number or ""
        try:
            return await self._gateway.send(to, body)
        except DeliveryError as e:
            logger.error(
                "Message delivery failed",
                extra={
                    "customer_id": customer.id,
                    "to": mask_phone(to),
                    "error": e.message,
                    "error_code": e.error_code,
                },
            )
            return SendResult.failed(to, e.message, e.error_code)


def _position(questions: tuple[Question, ...], question_id: int) -> int:
    for index, question in enumerate(questions, start=1):
        if question.id == question_id:
            return index
    return 0
