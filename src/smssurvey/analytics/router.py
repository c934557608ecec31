"""
Survey statistics API router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from smssurvey.analytics.schemas import SurveyStats
from smssurvey.analytics.service import get_stats
from smssurvey.dependencies import get_customer_repository
from smssurvey.shared.schemas import ApiResult
from smssurvey.survey.repository import CustomerRepository

router = APIRouter(prefix="/api/survey", tags=["analytics"])


@router.get("/stats", response_model=ApiResult[SurveyStats])
async def survey_stats(
    customers: Annotated[CustomerRepository, Depends(get_customer_repository)],
) -> ApiResult[SurveyStats]:
    """Company, store and associate satisfaction roll-up."""
    snapshot = [c.snapshot() for c in customers.list_customers()]
    return ApiResult.ok(get_stats(snapshot))
