"""
Domain models for survey questions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class QuestionType(str, Enum):
    """Answer type of a question; drives reply interpretation."""

    RATING = "rating"
    MULTIPLE_CHOICE = "multiple_choice"
    NPS_SCALE = "nps_scale"
    OPEN_TEXT = "open_text"
    YES_NO_WITH_TEXT = "yes_no_with_text"


class QuestionRole(str, Enum):
    """Side effect triggered by a valid answer to the question."""

    NONE = "none"
    RATING = "rating"
    NPS = "nps"
    CALLBACK = "callback"


# Each side effect reads a specific answer shape.
ROLE_REQUIRED_TYPE: dict[QuestionRole, QuestionType] = {
    QuestionRole.RATING: QuestionType.RATING,
    QuestionRole.NPS: QuestionType.NPS_SCALE,
    QuestionRole.CALLBACK: QuestionType.YES_NO_WITH_TEXT,
}

CHOICE_TYPES = frozenset({QuestionType.MULTIPLE_CHOICE, QuestionType.YES_NO_WITH_TEXT})

# Inclusive answer range of the numeric types; validation bounds must stay inside it.
ANSWER_RANGES: dict[QuestionType, tuple[int, int]] = {
    QuestionType.RATING: (1, 5),
    QuestionType.NPS_SCALE: (0, 10),
}


@dataclass(frozen=True)
class QuestionValidation:
    """Validation rule attached to a question."""

    min_value: int | None = None
    max_value: int | None = None
    required: bool = True
    max_length: int | None = None


@dataclass(frozen=True)
class QuestionDefinition:
    """Everything about a question except its id."""

    type: QuestionType
    prompt_text: str
    sms_text: str
    options: tuple[str, ...] = ()
    validation: QuestionValidation = field(default_factory=QuestionValidation)
    help_text: str | None = None
    role: QuestionRole = QuestionRole.NONE
    order: int | None = None


@dataclass(frozen=True)
class Question:
    """A catalog entry. Immutable; updates produce a new instance."""

    id: int
    order: int
    type: QuestionType
    prompt_text: str
    sms_text: str
    options: tuple[str, ...] = ()
    validation: QuestionValidation = field(default_factory=QuestionValidation)
    help_text: str | None = None
    role: QuestionRole = QuestionRole.NONE

    @classmethod
    def from_definition(cls, question_id: int, order: int, definition: QuestionDefinition) -> Question:
        return cls(
            id=question_id,
            order=order,
            type=definition.type,
            prompt_text=definition.prompt_text,
            sms_text=definition.sms_text,
            options=tuple(definition.options),
            validation=definition.validation,
            help_text=definition.help_text,
            role=definition.role,
        )
