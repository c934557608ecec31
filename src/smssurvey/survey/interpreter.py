"""
Reply interpretation.

Turns a raw SMS reply into a typed answer for the question type that is
currently pending, or an error phrase used to build the retry prompt.
Opt-out keywords are handled by the engine before anything reaches here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Union

from smssurvey.questions.models import ANSWER_RANGES, QuestionType, QuestionValidation

RATING_MIN, RATING_MAX = ANSWER_RANGES[QuestionType.RATING]
NPS_MIN, NPS_MAX = ANSWER_RANGES[QuestionType.NPS_SCALE]

CHOICE_LETTERS = ("A", "B", "C", "D", "E")
YES_NO_TOKENS = frozenset({"A", "B", "YES", "Y", "NO", "N"})
AFFIRMATIVE_TOKENS = frozenset({"B", "YES", "Y"})

RATING_ERROR = "reply with a number from 1–5"
CHOICE_ERROR = "reply with A, B, C, D, or E"
NPS_ERROR = "reply with a number from 0–10"
YES_NO_ERROR = "reply with A, B, YES, or NO"
OPEN_TEXT_ERROR = "reply with a short message"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class RatingAnswer:
    value: int


@dataclass(frozen=True)
class ChoiceAnswer:
    letter: str


@dataclass(frozen=True)
class NpsAnswer:
    score: int


@dataclass(frozen=True)
class TextAnswer:
    text: str


@dataclass(frozen=True)
class YesNoAnswer:
    token: str
    affirmative: bool
    follow_up_text: str | None = None


Answer = Union[RatingAnswer, ChoiceAnswer, NpsAnswer, TextAnswer, YesNoAnswer]


@dataclass(frozen=True)
class InterpretResult:
    """Outcome of interpreting one reply."""

    valid: bool
    value: int | str | None = None
    error: str | None = None
    answer: Answer | None = None

    @classmethod
    def ok(cls, value: int | str, answer: Answer) -> InterpretResult:
        return cls(valid=True, value=value, answer=answer)

    @classmethod
    def invalid(cls, error: str) -> InterpretResult:
        return cls(valid=False, error=error)


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def _bounded_int(
    text: str,
    validation: QuestionValidation | None,
    default_min: int,
    default_max: int,
) -> tuple[int | None, int, int]:
    low = default_min
    high = default_max
    if validation is not None:
        if validation.min_value is not None:
            low = validation.min_value
        if validation.max_value is not None:
            high = validation.max_value
    return _leading_int(text), low, high


def _range_error(low: int, high: int) -> str:
    return f"reply with a number from {low}–{high}"


def _parse_rating(text: str, validation: QuestionValidation | None) -> InterpretResult:
    number, low, high = _bounded_int(text, validation, RATING_MIN, RATING_MAX)
    if number is None or not low <= number <= high:
        return InterpretResult.invalid(_range_error(low, high))
    return InterpretResult.ok(number, RatingAnswer(number))


def _parse_nps(text: str, validation: QuestionValidation | None) -> InterpretResult:
    number, low, high = _bounded_int(text, validation, NPS_MIN, NPS_MAX)
    if number is None or not low <= number <= high:
        return InterpretResult.invalid(_range_error(low, high))
    return InterpretResult.ok(number, NpsAnswer(number))


def _parse_choice(text: str, validation: QuestionValidation | None) -> InterpretResult:
    letter = text.strip().upper()
    if letter not in CHOICE_LETTERS:
        return InterpretResult.invalid(CHOICE_ERROR)
    return InterpretResult.ok(letter, ChoiceAnswer(letter))


def _parse_yes_no(text: str, validation: QuestionValidation | None) -> InterpretResult:
    first_line, _, rest = text.strip().partition("\n")
    token = first_line.strip().upper()
    if token not in YES_NO_TOKENS:
        return InterpretResult.invalid(YES_NO_ERROR)
    follow_up = rest.strip() or None
    return InterpretResult.ok(
        token,
        YesNoAnswer(token=token, affirmative=token in AFFIRMATIVE_TOKENS, follow_up_text=follow_up),
    )


def _parse_open_text(text: str, validation: QuestionValidation | None) -> InterpretResult:
    cleaned = text.strip()
    if not cleaned:
        return InterpretResult.invalid(OPEN_TEXT_ERROR)
    if validation is not None and validation.max_length is not None and len(cleaned) > validation.max_length:
        return InterpretResult.invalid(f"reply with at most {validation.max_length} characters")
    return InterpretResult.ok(cleaned, TextAnswer(cleaned))


_PARSERS: dict[QuestionType, Callable[[str, QuestionValidation | None], InterpretResult]] = {
    QuestionType.RATING: _parse_rating,
    QuestionType.MULTIPLE_CHOICE: _parse_choice,
    QuestionType.NPS_SCALE: _parse_nps,
    QuestionType.OPEN_TEXT: _parse_open_text,
    QuestionType.YES_NO_WITH_TEXT: _parse_yes_no,
}


def interpret(
    question_type: QuestionType,
    raw_text: str | None,
    validation: QuestionValidation | None = None,
) -> InterpretResult:
    """Interpret ``raw_text`` as an answer to a question of ``question_type``."""
    return _PARSERS[question_type](raw_text or "", validation)
