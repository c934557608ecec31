"""
Survey conversation API router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from smssurvey.dependencies import (
    get_customer_repository,
    get_engine,
    get_schedule_repository,
)
from smssurvey.survey.engine import ConversationEngine, EngineResult
from smssurvey.survey.models import SurveyStatus
from smssurvey.survey.repository import CustomerRepository
from smssurvey.survey.schedules import ScheduleRepository
from smssurvey.survey.schemas import (
    CallbackResponse,
    EngineResultResponse,
    OptOutRequest,
    RespondRequest,
    ScheduleCreate,
    ScheduleResponse,
)
from smssurvey.shared.schemas import ApiResult

router = APIRouter(prefix="/api/survey", tags=["survey"])

_CONVERSATION_ERRORS = {
    404: {"description": "Customer or question not found"},
    409: {"description": "Illegal conversation transition"},
}


def _engine_result(result: EngineResult) -> ApiResult[EngineResultResponse]:
    data = EngineResultResponse.from_result(result)
    if result.success:
        return ApiResult.ok(data)
    # State already moved on; report the failed delivery alongside it.
    return ApiResult(
        success=False,
        data=data,
        error="Message delivery failed",
        details={"delivery_errors": data.delivery_errors},
    )


@router.post(
    "/start/{customer_id}",
    response_model=ApiResult[EngineResultResponse],
    responses=_CONVERSATION_ERRORS,
)
async def start_survey(
    customer_id: str,
    engine: Annotated[ConversationEngine, Depends(get_engine)],
) -> ApiResult[EngineResultResponse]:
    """Send the first question to a customer."""
    return _engine_result(await engine.start(customer_id))


@router.post(
    "/respond/{customer_id}",
    response_model=ApiResult[EngineResultResponse],
    responses=_CONVERSATION_ERRORS,
)
async def respond(
    customer_id: str,
    body: RespondRequest,
    engine: Annotated[ConversationEngine, Depends(get_engine)],
) -> ApiResult[EngineResultResponse]:
    """Feed a reply to the engine as if it had arrived by SMS."""
    return _engine_result(await engine.handle_inbound_text(customer_id, body.message))


@router.post(
    "/opt-out/{customer_id}",
    response_model=ApiResult[EngineResultResponse],
    responses=_CONVERSATION_ERRORS,
)
async def opt_out(
    customer_id: str,
    engine: Annotated[ConversationEngine, Depends(get_engine)],
    body: OptOutRequest | None = None,
) -> ApiResult[EngineResultResponse]:
    """Opt a customer out of surveys."""
    keyword = body.keyword if body is not None else None
    return _engine_result(await engine.opt_out(customer_id, keyword))


@router.get("/callbacks", response_model=ApiResult[list[CallbackResponse]])
async def list_callbacks(
    customers: Annotated[CustomerRepository, Depends(get_customer_repository)],
) -> ApiResult[list[CallbackResponse]]:
    """Completed surveys that asked for a manager callback."""
    requests = [
        CallbackResponse(
            customer_id=c.id,
            first_name=c.first_name,
            last_name=c.last_name,
            phone_number=c.phone_number,
            store_location=c.store_location,
            sales_associate=c.sales_associate,
            callback_topic=c.callback_topic,
            survey_completed_at=c.survey_completed_at,
        )
        for c in customers.list_customers(SurveyStatus.COMPLETED)
        if c.manager_callback_requested
    ]
    return ApiResult.ok(requests)


@router.post(
    "/schedule",
    response_model=ApiResult[ScheduleResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid schedule"}},
)
async def schedule_survey(
    body: ScheduleCreate,
    schedules: Annotated[ScheduleRepository, Depends(get_schedule_repository)],
) -> ApiResult[ScheduleResponse]:
    """Schedule a survey batch for a group of customers."""
    schedule = schedules.create(body.group_name, body.scheduled_at, body.customer_ids)
    return ApiResult.ok(ScheduleResponse.from_schedule(schedule))


@router.get("/scheduled", response_model=ApiResult[list[ScheduleResponse]])
async def list_scheduled(
    schedules: Annotated[ScheduleRepository, Depends(get_schedule_repository)],
) -> ApiResult[list[ScheduleResponse]]:
    """Scheduled batches, earliest first."""
    return ApiResult.ok([ScheduleResponse.from_schedule(s) for s in schedules.list_scheduled()])


@router.delete(
    "/scheduled/{schedule_id}",
    response_model=ApiResult[ScheduleResponse],
    responses={
        400: {"description": "Batch time already passed"},
        404: {"description": "Scheduled survey not found"},
    },
)
async def cancel_scheduled(
    schedule_id: int,
    schedules: Annotated[ScheduleRepository, Depends(get_schedule_repository)],
) -> ApiResult[ScheduleResponse]:
    """Cancel a batch that has not come due yet."""
    return ApiResult.ok(ScheduleResponse.from_schedule(schedules.cancel(schedule_id)))
