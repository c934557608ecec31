"""
Survey question catalog.
"""

from smssurvey.questions.catalog import QuestionCatalog
from smssurvey.questions.models import (
    Question,
    QuestionDefinition,
    QuestionRole,
    QuestionType,
    QuestionValidation,
)

__all__ = [
    "Question",
    "QuestionCatalog",
    "QuestionDefinition",
    "QuestionRole",
    "QuestionType",
    "QuestionValidation",
]
