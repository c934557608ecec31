"""
Customer contacts API router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from smssurvey.contacts.csv_parser import CSVParser, export_customers_csv
from smssurvey.contacts.schemas import CSVDataImport, CSVImportResponse, PhoneUpdate
from smssurvey.dependencies import get_catalog, get_customer_repository
from smssurvey.questions.catalog import QuestionCatalog
from smssurvey.shared.exceptions import ValidationError
from smssurvey.shared.logging import get_logger
from smssurvey.shared.schemas import ApiResult
from smssurvey.survey.models import SurveyStatus
from smssurvey.survey.repository import CustomerRepository
from smssurvey.survey.schemas import CustomerResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api/customers", tags=["customers"])

EXPORT_FILENAME = "customers.csv"


@router.post(
    "/import",
    response_model=ApiResult[CSVImportResponse],
    responses={400: {"description": "Not a CSV file, or empty"}},
)
async def import_customers(
    file: Annotated[UploadFile, File(description="CSV export of customer purchases")],
    customers: Annotated[CustomerRepository, Depends(get_customer_repository)],
    catalog: Annotated[QuestionCatalog, Depends(get_catalog)],
) -> ApiResult[CSVImportResponse]:
    """Import customers from a CSV file."""
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise ValidationError("File must be a CSV file")

    content = await file.read()
    if not content:
        raise ValidationError("File is empty")

    return ApiResult.ok(_import_csv(content, customers, len(catalog), source=file.filename))


@router.post(
    "/import-data",
    response_model=ApiResult[CSVImportResponse],
    responses={400: {"description": "No CSV data provided"}},
)
async def import_customer_data(
    body: CSVDataImport,
    customers: Annotated[CustomerRepository, Depends(get_customer_repository)],
    catalog: Annotated[QuestionCatalog, Depends(get_catalog)],
) -> ApiResult[CSVImportResponse]:
    """Import customers from CSV text sent in the request body."""
    if not body.csv_data.strip():
        raise ValidationError("No CSV data provided")

    return ApiResult.ok(
        _import_csv(body.csv_data.encode("utf-8"), customers, len(catalog), source="request body")
    )


@router.get("/export", response_class=Response)
async def export_customers(
    customers: Annotated[CustomerRepository, Depends(get_customer_repository)],
    status: Annotated[SurveyStatus | None, Query(description="Only customers in this status")] = None,
) -> Response:
    """Download customers and their survey progress as CSV."""
    snapshot = [c.snapshot() for c in customers.list_customers(status)]
    logger.info("Customer CSV export", extra={"exported": len(snapshot)})
    return Response(
        content=export_customers_csv(snapshot),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


def _import_csv(
    content: bytes,
    customers: CustomerRepository,
    total_questions: int,
    source: str | None,
) -> CSVImportResponse:
    result = CSVParser().parse_all(content)
    for customer in result.customers:
        customers.add(customer)

    logger.info(
        "Customer CSV import completed",
        extra={
            "import_source": source,
            "imported": len(result.customers),
            "needs_phone": result.needs_phone,
            "rejected": len(result.errors),
        },
    )

    return CSVImportResponse(
        total_rows=result.total_rows,
        imported_count=len(result.customers),
        needs_phone_count=result.needs_phone,
        skipped_count=result.skipped,
        errors=result.errors,
        customers=[
            CustomerResponse.from_customer(c.snapshot(), total_questions)
            for c in result.customers
        ],
    )


@router.get("", response_model=ApiResult[list[CustomerResponse]])
async def list_customers(
    customers: Annotated[CustomerRepository, Depends(get_customer_repository)],
    catalog: Annotated[QuestionCatalog, Depends(get_catalog)],
    status: Annotated[SurveyStatus | None, Query(description="Only customers in this status")] = None,
) -> ApiResult[list[CustomerResponse]]:
    """List customers, optionally filtered by survey status."""
    total_questions = len(catalog)
    return ApiResult.ok(
        [
            CustomerResponse.from_customer(c.snapshot(), total_questions)
            for c in customers.list_customers(status)
        ]
    )


@router.put(
    "/{customer_id}/phone",
    response_model=ApiResult[CustomerResponse],
    responses={
        400: {"description": "Invalid phone number"},
        404: {"description": "Customer not found"},
        409: {"description": "Survey in progress"},
    },
)
async def update_phone(
    customer_id: str,
    body: PhoneUpdate,
    customers: Annotated[CustomerRepository, Depends(get_customer_repository)],
    catalog: Annotated[QuestionCatalog, Depends(get_catalog)],
) -> ApiResult[CustomerResponse]:
    """Set a customer's phone number; a waiting customer becomes pending."""
    customer = await customers.update_phone(customer_id, body.phone_number)
    return ApiResult.ok(CustomerResponse.from_customer(customer, len(catalog)))
