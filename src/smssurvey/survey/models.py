"""
Domain models for customer survey conversations.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SurveyStatus(str, Enum):
    """Customer survey lifecycle status."""

    PHONE_NEEDED = "phone_needed"
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    OPTED_OUT = "opted_out"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_not_started(self) -> bool:
        return self in (SurveyStatus.PHONE_NEEDED, SurveyStatus.PENDING)


TERMINAL_STATUSES = frozenset(
    {SurveyStatus.COMPLETED, SurveyStatus.OPTED_OUT, SurveyStatus.FAILED}
)


@dataclass(frozen=True)
class SurveyAnswer:
    """One accepted reply."""

    question_id: int
    raw_answer: str
    processed_answer: int | str
    answered_at: datetime = field(default_factory=utcnow)


@dataclass
class CustomerSurvey:
    """A customer and the state of their survey conversation."""

    id: str = field(default_factory=lambda: uuid4().hex)
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    purchase_item: str | None = None
    purchase_date: str | None = None
    sales_associate: str | None = None
    store_location: str | None = None

    status: SurveyStatus = SurveyStatus.PHONE_NEEDED
    current_question_id: int | None = None
    responses: list[SurveyAnswer] = field(default_factory=list)

    satisfaction_rating: int | None = None
    nps_score: int | None = None
    manager_callback_requested: bool = False
    callback_topic: str | None = None

    survey_started_at: datetime | None = None
    survey_completed_at: datetime | None = None
    opt_out_keyword: str | None = None
    opted_out_at: datetime | None = None
    failure_reason: str | None = None

    created_at: datetime = field(default_factory=utcnow)

    @property
    def questions_answered(self) -> int:
        return len(self.responses)

    def completion_percentage(self, total_questions: int) -> int:
        """Share of the survey answered, 100 once completed."""
        if self.status is SurveyStatus.COMPLETED:
            return 100
        if total_questions <= 0:
            return 0
        return min(100, round(self.questions_answered / total_questions * 100))

    def has_answered(self, question_id: int) -> bool:
        return any(r.question_id == question_id for r in self.responses)

    def snapshot(self) -> CustomerSurvey:
        """Detached copy safe to hand out of the customer lock."""
        return replace(self, responses=list(self.responses))
