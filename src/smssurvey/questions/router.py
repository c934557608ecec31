"""
Question catalog API router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from smssurvey.dependencies import get_catalog
from smssurvey.questions.catalog import QuestionCatalog
from smssurvey.questions.schemas import QuestionCreate, QuestionResponse, QuestionUpdate
from smssurvey.shared.schemas import ApiResult

router = APIRouter(prefix="/api/survey/questions", tags=["questions"])


@router.get("", response_model=ApiResult[list[QuestionResponse]])
async def list_questions(
    catalog: Annotated[QuestionCatalog, Depends(get_catalog)],
) -> ApiResult[list[QuestionResponse]]:
    """List catalog questions in survey order."""
    return ApiResult.ok([QuestionResponse.from_question(q) for q in catalog.get_ordered()])


@router.post(
    "",
    response_model=ApiResult[QuestionResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid question definition"}},
)
async def add_question(
    body: QuestionCreate,
    catalog: Annotated[QuestionCatalog, Depends(get_catalog)],
) -> ApiResult[QuestionResponse]:
    """Append a question to the end of the survey."""
    question = catalog.add(body.to_definition())
    return ApiResult.ok(QuestionResponse.from_question(question))


@router.put(
    "/{question_id}",
    response_model=ApiResult[QuestionResponse],
    responses={
        400: {"description": "Invalid question definition"},
        404: {"description": "Question not found"},
    },
)
async def update_question(
    question_id: int,
    body: QuestionUpdate,
    catalog: Annotated[QuestionCatalog, Depends(get_catalog)],
) -> ApiResult[QuestionResponse]:
    """Replace a question's fields; its id never changes."""
    question = catalog.update(question_id, body.to_definition())
    return ApiResult.ok(QuestionResponse.from_question(question))


@router.delete(
    "/{question_id}",
    response_model=ApiResult[QuestionResponse],
    responses={
        400: {"description": "Last remaining question"},
        404: {"description": "Question not found"},
    },
)
async def delete_question(
    question_id: int,
    catalog: Annotated[QuestionCatalog, Depends(get_catalog)],
) -> ApiResult[QuestionResponse]:
    """Remove a question from the survey."""
    question = catalog.delete(question_id)
    return ApiResult.ok(QuestionResponse.from_question(question))
