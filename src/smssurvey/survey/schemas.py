"""
Pydantic schemas for the survey conversation API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from smssurvey.questions.schemas import QuestionResponse
from smssurvey.survey.engine import EngineOutcome, EngineResult
from smssurvey.survey.models import CustomerSurvey, SurveyStatus
from smssurvey.survey.schedules import ScheduledSurvey


class SurveyAnswerResponse(BaseModel):
    """One accepted reply."""

    question_id: int
    raw_answer: str
    processed_answer: int | str
    answered_at: datetime


class CustomerResponse(BaseModel):
    """A customer and their survey state."""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    purchase_item: Optional[str] = None
    purchase_date: Optional[str] = None
    sales_associate: Optional[str] = None
    store_location: Optional[str] = None
    status: SurveyStatus
    current_question_id: Optional[int] = None
    questions_answered: int = Field(description="Number of accepted replies")
    completion_percentage: int = Field(description="Share of the survey answered", ge=0, le=100)
    responses: List[SurveyAnswerResponse] = Field(default_factory=list)
    satisfaction_rating: Optional[int] = None
    nps_score: Optional[int] = None
    manager_callback_requested: bool = False
    callback_topic: Optional[str] = None
    survey_started_at: Optional[datetime] = None
    survey_completed_at: Optional[datetime] = None
    opt_out_keyword: Optional[str] = None
    opted_out_at: Optional[datetime] = None
    failure_reason: Optional[str] = None

    @classmethod
    def from_customer(cls, customer: CustomerSurvey, total_questions: int) -> "CustomerResponse":
        return cls(
            id=customer.id,
            email=customer.email,
            first_name=customer.first_name,
            last_name=customer.last_name,
            phone_number=customer.phone_number,
            purchase_item=customer.purchase_item,
            purchase_date=customer.purchase_date,
            sales_associate=customer.sales_associate,
            store_location=customer.store_location,
            status=customer.status,
            current_question_id=customer.current_question_id,
            questions_answered=customer.questions_answered,
            completion_percentage=customer.completion_percentage(total_questions),
            responses=[
                SurveyAnswerResponse(
                    question_id=r.question_id,
                    raw_answer=r.raw_answer,
                    processed_answer=r.processed_answer,
                    answered_at=r.answered_at,
                )
                for r in customer.responses
            ],
            satisfaction_rating=customer.satisfaction_rating,
            nps_score=customer.nps_score,
            manager_callback_requested=customer.manager_callback_requested,
            callback_topic=customer.callback_topic,
            survey_started_at=customer.survey_started_at,
            survey_completed_at=customer.survey_completed_at,
            opt_out_keyword=customer.opt_out_keyword,
            opted_out_at=customer.opted_out_at,
            failure_reason=customer.failure_reason,
        )


class EngineResultResponse(BaseModel):
    """Outcome of a conversation operation."""

    outcome: EngineOutcome
    customer: CustomerResponse
    next_question: Optional[QuestionResponse] = None
    question_number: Optional[int] = None
    total_questions: int
    error: Optional[str] = Field(None, description="Why a reply was rejected")
    sent_message_ids: List[str] = Field(default_factory=list)
    delivery_errors: List[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: EngineResult) -> "EngineResultResponse":
        return cls(
            outcome=result.outcome,
            customer=CustomerResponse.from_customer(result.customer, result.total_questions),
            next_question=(
                QuestionResponse.from_question(result.next_question)
                if result.next_question is not None
                else None
            ),
            question_number=result.question_number,
            total_questions=result.total_questions,
            error=result.error,
            sent_message_ids=result.sent_message_ids,
            delivery_errors=result.delivery_errors,
        )


class RespondRequest(BaseModel):
    """A simulated inbound reply."""

    message: str = Field(..., max_length=1600, description="Reply text as the customer sent it")


class OptOutRequest(BaseModel):
    keyword: Optional[str] = Field(None, max_length=32, description="Keyword recorded with the opt-out")


class CallbackResponse(BaseModel):
    """A completed survey that asked for a manager callback."""

    customer_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    store_location: Optional[str] = None
    sales_associate: Optional[str] = None
    callback_topic: Optional[str] = None
    survey_completed_at: Optional[datetime] = None


class ScheduleCreate(BaseModel):
    """Request body for scheduling a survey batch."""

    group_name: str = Field(..., min_length=1, max_length=255)
    scheduled_at: datetime = Field(..., description="When the batch should be sent")
    customer_ids: List[str] = Field(..., min_length=1)


class ScheduleResponse(BaseModel):
    id: int
    group_name: str
    scheduled_at: datetime
    customer_ids: List[str]
    customer_count: int
    status: str
    created_at: datetime

    @classmethod
    def from_schedule(cls, schedule: ScheduledSurvey) -> "ScheduleResponse":
        return cls(
            id=schedule.id,
            group_name=schedule.group_name,
            scheduled_at=schedule.scheduled_at,
            customer_ids=list(schedule.customer_ids),
            customer_count=schedule.customer_count,
            status=schedule.status.value,
            created_at=schedule.created_at,
        )
