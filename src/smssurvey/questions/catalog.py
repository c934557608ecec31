"""
Ordered, mutable catalog of survey questions.

Writers serialize on a catalog-wide lock and publish a new immutable tuple;
readers take the current tuple without locking, so a conversation that reads
``get_ordered()`` never sees a half-applied edit.
"""

from __future__ import annotations

import threading
from typing import Iterable

from smssurvey.questions.models import (
    ANSWER_RANGES,
    CHOICE_TYPES,
    ROLE_REQUIRED_TYPE,
    Question,
    QuestionDefinition,
    QuestionRole,
    QuestionType,
)
from smssurvey.shared.exceptions import NotFoundError, ValidationError
from smssurvey.shared.logging import get_logger

logger = get_logger(__name__)

MAX_CHOICE_OPTIONS = 5

LAST_QUESTION_ERROR = "catalog must have at least one question"


class QuestionCatalog:
    """Copy-on-write question catalog."""

    def __init__(self, definitions: Iterable[QuestionDefinition] = ()) -> None:
        self._lock = threading.RLock()
        self._questions: tuple[Question, ...] = ()
        self._last_id = 0
        for definition in definitions:
            self.add(definition)

    def get_ordered(self) -> tuple[Question, ...]:
        """Return an immutable snapshot sorted by ``order`` (ties by id)."""
        return self._questions

    def get_by_id(self, question_id: int) -> Question:
        for question in self._questions:
            if question.id == question_id:
                return question
        raise NotFoundError(
            f"Question not found: {question_id}",
            details={"question_id": question_id},
        )

    def __len__(self) -> int:
        return len(self._questions)

    def add(self, definition: QuestionDefinition) -> Question:
        """Append a question with the next free id at the end of the order."""
        with self._lock:
            current = self._questions
            self._validate(definition, current, exclude_id=None)

            # Past the highest id ever assigned, so a deleted id never comes back.
            next_id = max(self._last_id, max((q.id for q in current), default=0)) + 1
            next_order = max((q.order for q in current), default=0) + 1

            question = Question.from_definition(next_id, next_order, definition)
            self._publish(current + (question,))
            self._last_id = next_id

        logger.info(
            "Question added",
            extra={"question_id": question.id, "question_type": question.type.value},
        )
        return question

    def update(self, question_id: int, definition: QuestionDefinition) -> Question:
        """Replace every field of a question except its id.

        When ``definition.order`` is None the question keeps its position.
        """
        with self._lock:
            current = self._questions
            existing = self.get_by_id(question_id)
            self._validate(definition, current, exclude_id=question_id)

            order = definition.order if definition.order is not None else existing.order
            updated = Question.from_definition(question_id, order, definition)
            self._publish(tuple(updated if q.id == question_id else q for q in current))

        logger.info(
            "Question updated",
            extra={"question_id": question_id, "question_type": updated.type.value},
        )
        return updated

    def delete(self, question_id: int) -> Question:
        """Remove a question; the last remaining question cannot be removed."""
        with self._lock:
            current = self._questions
            existing = self.get_by_id(question_id)
            if len(current) == 1:
                raise ValidationError(
                    LAST_QUESTION_ERROR,
                    details={"question_id": question_id},
                )
            self._publish(tuple(q for q in current if q.id != question_id))

        if existing.role is not QuestionRole.NONE:
            logger.warning(
                "Deleted a role-bearing question; its side effect is no longer wired",
                extra={"question_id": question_id, "role": existing.role.value},
            )
        else:
            logger.info("Question deleted", extra={"question_id": question_id})
        return existing

    def _publish(self, questions: Iterable[Question]) -> None:
        self._questions = tuple(sorted(questions, key=lambda q: (q.order, q.id)))

    @staticmethod
    def _validate(
        definition: QuestionDefinition,
        current: tuple[Question, ...],
        exclude_id: int | None,
    ) -> None:
        errors: dict[str, str] = {}

        if not definition.prompt_text or not definition.prompt_text.strip():
            errors["prompt_text"] = "Prompt text is required"
        if not definition.sms_text or not definition.sms_text.strip():
            errors["sms_text"] = "SMS text is required"

        if definition.type is QuestionType.MULTIPLE_CHOICE and len(definition.options) > MAX_CHOICE_OPTIONS:
            errors["options"] = f"At most {MAX_CHOICE_OPTIONS} options (A-E) are supported"
        if definition.options and definition.type not in CHOICE_TYPES:
            errors["options"] = f"Options are not used by {definition.type.value} questions"

        rule = definition.validation
        if (
            rule.min_value is not None
            and rule.max_value is not None
            and rule.min_value > rule.max_value
        ):
            errors["validation"] = "min_value must not exceed max_value"
        answer_range = ANSWER_RANGES.get(definition.type)
        if answer_range is not None:
            low, high = answer_range
            for name, bound in (("min_value", rule.min_value), ("max_value", rule.max_value)):
                if bound is not None and not low <= bound <= high:
                    errors["validation"] = (
                        f"{name} must lie within {low}-{high} for {definition.type.value} questions"
                    )
        if rule.max_length is not None and rule.max_length < 1:
            errors["validation"] = "max_length must be positive"

        role = definition.role
        if role is not QuestionRole.NONE:
            required_type = ROLE_REQUIRED_TYPE[role]
            if definition.type is not required_type:
                errors["role"] = (
                    f"Role {role.value} requires a {required_type.value} question"
                )
            elif any(q.role is role and q.id != exclude_id for q in current):
                errors["role"] = f"Another question already carries role {role.value}"

        if errors:
            raise ValidationError("Invalid question definition", details=errors)
