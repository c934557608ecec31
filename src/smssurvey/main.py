"""
FastAPI application entry point.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from smssurvey import __version__
from smssurvey.analytics.router import router as analytics_router
from smssurvey.config import Settings, get_settings
from smssurvey.contacts.router import router as contacts_router
from smssurvey.messaging.config import MessagingConfig, get_messaging_config
from smssurvey.messaging.factory import create_messaging_gateway
from smssurvey.messaging.interface import MessagingGateway
from smssurvey.messaging.webhooks.router import router as sms_webhooks_router
from smssurvey.questions.catalog import QuestionCatalog
from smssurvey.questions.defaults import default_questions
from smssurvey.questions.router import router as questions_router
from smssurvey.shared.exceptions import AppError, NotFoundError, StateError, ValidationError
from smssurvey.shared.logging import get_logger, setup_logging
from smssurvey.shared.schemas import ApiResult
from smssurvey.survey.engine import ConversationEngine
from smssurvey.survey.repository import CustomerRepository
from smssurvey.survey.router import router as survey_router
from smssurvey.survey.schedules import ScheduleRepository

logger = get_logger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (StateError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()
    settings: Settings = app.state.settings

    logger.info(
        "Application starting",
        extra={
            "env": settings.app_env,
            "questions": len(app.state.catalog),
            "messaging_provider": app.state.messaging_config.provider_type.value,
        },
    )

    yield

    logger.info("Shutting down application")
    app.state.gateway.close()
    logger.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    messaging_config: MessagingConfig | None = None,
    gateway: MessagingGateway | None = None,
    catalog: QuestionCatalog | None = None,
    customers: CustomerRepository | None = None,
    schedules: ScheduleRepository | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Runtime objects are built here once and kept on ``app.state``; callers
    may pass their own to wire tests or alternative stores.
    """
    settings = settings or get_settings()
    messaging_config = messaging_config or get_messaging_config()

    if catalog is None:
        catalog = QuestionCatalog(
            default_questions(settings.business_name) if settings.seed_default_questions else ()
        )
    customers = customers if customers is not None else CustomerRepository()
    schedules = schedules if schedules is not None else ScheduleRepository()
    gateway = gateway or create_messaging_gateway(messaging_config)

    app = FastAPI(
        title="SMS Survey API",
        description="Customer satisfaction surveys over SMS",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.messaging_config = messaging_config
    app.state.catalog = catalog
    app.state.customers = customers
    app.state.schedules = schedules
    app.state.gateway = gateway
    app.state.engine = ConversationEngine(
        catalog=catalog,
        customers=customers,
        gateway=gateway,
        business_name=settings.business_name,
    )

    # Map domain exceptions to HTTP responses
    @app.exception_handler(AppError)
    async def _app_error(_: Request, exc: AppError) -> JSONResponse:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        for error_type, code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                status_code = code
                break
        if status_code >= 500:
            logger.error("Unhandled application error", extra={"error": exc.message})
        return JSONResponse(
            status_code=status_code,
            content=ApiResult.fail(exc.message, exc.details).model_dump(mode="json"),
        )

    # Request validation (FastAPI/Pydantic) -> consistent 422 payload
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append(
                {
                    "field": field,
                    "message": error["msg"],
                    "type": error["type"],
                }
            )
        return JSONResponse(
            status_code=422,
            content=ApiResult.fail(
                "Request validation failed",
                {"errors": errors},
            ).model_dump(mode="json"),
        )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(questions_router)
    app.include_router(survey_router)
    app.include_router(analytics_router)
    app.include_router(contacts_router)
    app.include_router(sms_webhooks_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app


app = create_app()
