"""
Pydantic schemas for the question catalog API.
"""

from dataclasses import replace

from pydantic import BaseModel, Field

from smssurvey.questions.models import (
    Question,
    QuestionDefinition,
    QuestionRole,
    QuestionType,
    QuestionValidation,
)


class ValidationRuleSchema(BaseModel):
    """Validation rule for a question."""

    min_value: int | None = Field(None, description="Lowest accepted number")
    max_value: int | None = Field(None, description="Highest accepted number")
    required: bool = Field(True, description="Whether an answer is required")
    max_length: int | None = Field(None, ge=1, description="Longest accepted free-text reply")


class QuestionBase(BaseModel):
    """Fields shared by create and update requests."""

    type: QuestionType = Field(..., description="Answer type of the question")
    prompt_text: str = Field(..., min_length=1, max_length=2000, description="Question wording")
    sms_text: str = Field(..., min_length=1, max_length=1600, description="Outbound SMS wording")
    options: list[str] = Field(default_factory=list, description="Labels for choice-like types")
    validation: ValidationRuleSchema = Field(default_factory=ValidationRuleSchema)
    help_text: str | None = Field(None, max_length=500, description="Appended to retry prompts")
    role: QuestionRole = Field(QuestionRole.NONE, description="Side effect of a valid answer")

    def to_definition(self) -> QuestionDefinition:
        return QuestionDefinition(
            type=self.type,
            prompt_text=self.prompt_text,
            sms_text=self.sms_text,
            options=tuple(self.options),
            validation=QuestionValidation(**self.validation.model_dump()),
            help_text=self.help_text,
            role=self.role,
        )


class QuestionCreate(QuestionBase):
    """Request body for adding a question; it is appended at the end."""


class QuestionUpdate(QuestionBase):
    """Request body replacing every field of a question except its id."""

    order: int | None = Field(None, description="New position; omitted keeps the current one")

    def to_definition(self) -> QuestionDefinition:
        return replace(super().to_definition(), order=self.order)


class QuestionResponse(BaseModel):
    """A catalog question."""

    id: int
    order: int
    type: QuestionType
    prompt_text: str
    sms_text: str
    options: list[str]
    validation: ValidationRuleSchema
    help_text: str | None
    role: QuestionRole

    @classmethod
    def from_question(cls, question: Question) -> "QuestionResponse":
        return cls(
            id=question.id,
            order=question.order,
            type=question.type,
            prompt_text=question.prompt_text,
            sms_text=question.sms_text,
            options=list(question.options),
            validation=ValidationRuleSchema(
                min_value=question.validation.min_value,
                max_value=question.validation.max_value,
                required=question.validation.required,
                max_length=question.validation.max_length,
            ),
            help_text=question.help_text,
            role=question.role,
        )
