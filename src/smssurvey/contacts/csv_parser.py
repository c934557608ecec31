"""
CSV parsing for customer imports, and the matching export.

Accepts the purchase export layout (Email, FirstName, LastName, Phone,
CustomData1-4) as well as descriptive snake_case headers.
"""

import csv
import io
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generator, Iterable

from smssurvey.contacts.phone import normalize_phone_number
from smssurvey.contacts.schemas import CSVRowError
from smssurvey.shared.logging import get_logger
from smssurvey.survey.models import CustomerSurvey, SurveyStatus

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

REQUIRED_HEADERS = {"email"}
OPTIONAL_HEADERS = {
    "first_name",
    "last_name",
    "phone_number",
    "purchase_item",
    "purchase_date",
    "sales_associate",
    "store_location",
}
ALL_HEADERS = REQUIRED_HEADERS | OPTIONAL_HEADERS

# Header aliases for flexibility
HEADER_ALIASES: dict[str, str] = {
    "mail": "email",
    "e_mail": "email",
    "email_address": "email",
    "firstname": "first_name",
    "first": "first_name",
    "lastname": "last_name",
    "last": "last_name",
    "phone": "phone_number",
    "phonenumber": "phone_number",
    "mobile": "phone_number",
    "telephone": "phone_number",
    "customdata1": "purchase_item",
    "purchaseitem": "purchase_item",
    "item": "purchase_item",
    "product": "purchase_item",
    "customdata2": "purchase_date",
    "purchasedate": "purchase_date",
    "customdata3": "sales_associate",
    "salesassociate": "sales_associate",
    "associate": "sales_associate",
    "customdata4": "store_location",
    "storelocation": "store_location",
    "store": "store_location",
}


def normalize_header(header: str) -> str:
    """Normalize a CSV header to its field name."""
    h = header.strip().lower()
    h = h.replace(" ", "_").replace("-", "_")
    h = re.sub(r"__+", "_", h)
    return HEADER_ALIASES.get(h, h)


def validate_email(email: str) -> tuple[bool, str | None]:
    cleaned = email.strip().lower()
    if EMAIL_PATTERN.match(cleaned):
        return True, cleaned
    return False, None


@dataclass
class ImportResult:
    """Outcome of one CSV import."""

    total_rows: int = 0
    customers: list[CustomerSurvey] = field(default_factory=list)
    errors: list[CSVRowError] = field(default_factory=list)
    skipped: int = 0

    @property
    def needs_phone(self) -> int:
        return sum(1 for c in self.customers if c.status is SurveyStatus.PHONE_NEEDED)


class CSVParser:
    """Parser for customer CSV files."""

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8-sig") -> None:
        self.delimiter = delimiter
        self.encoding = encoding

    def parse(
        self,
        content: bytes,
    ) -> Generator[tuple[int, CustomerSurvey | None, CSVRowError | None], None, None]:
        """Parse CSV content and yield customers.

        Yields:
            Tuples of (line_number, customer or None, error or None). Rows
            without an email produce neither and are counted as skipped.
        """
        try:
            text = content.decode(self.encoding)
        except UnicodeDecodeError as e:
            yield 0, None, CSVRowError(line_number=0, error=f"File encoding error: {e}")
            return

        reader = csv.DictReader(io.StringIO(text), delimiter=self.delimiter)
        if reader.fieldnames is None:
            yield 0, None, CSVRowError(line_number=0, error="CSV file is empty or has no headers")
            return

        normalized_headers = {normalize_header(h): h for h in reader.fieldnames if h}
        missing_required = REQUIRED_HEADERS - set(normalized_headers)
        if missing_required:
            yield 0, None, CSVRowError(
                line_number=0,
                error=f"Missing required headers: {', '.join(sorted(missing_required))}",
            )
            return

        logger.debug(
            "CSV headers parsed",
            extra={
                "original_headers": list(reader.fieldnames),
                "normalized_headers": list(normalized_headers),
            },
        )

        for line_num, row in enumerate(reader, start=2):  # header is line 1
            normalized_row = {
                norm: (row.get(orig) or "").strip()
                for norm, orig in normalized_headers.items()
                if norm in ALL_HEADERS
            }
            customer, error = self._parse_row(line_num, normalized_row)
            yield line_num, customer, error

    def parse_all(self, content: bytes) -> ImportResult:
        result = ImportResult()
        for line_num, customer, error in self.parse(content):
            if line_num > 0:
                result.total_rows += 1
            if error is not None:
                result.errors.append(error)
            elif customer is not None:
                result.customers.append(customer)
            else:
                result.skipped += 1
        return result

    def _parse_row(
        self,
        line_number: int,
        row: dict[str, str],
    ) -> tuple[CustomerSurvey | None, CSVRowError | None]:
        email_raw = row.get("email", "")
        if not email_raw:
            return None, None

        email_valid, email = validate_email(email_raw)
        if not email_valid:
            return None, CSVRowError(
                line_number=line_number,
                field="email",
                error="Invalid email format",
                value=email_raw,
            )

        # An unusable phone is not an error: the customer waits for one.
        phone_raw = row.get("phone_number", "")
        phone = normalize_phone_number(phone_raw)

        customer = CustomerSurvey(
            email=email,
            first_name=row.get("first_name") or None,
            last_name=row.get("last_name") or None,
            phone_number=phone,
            purchase_item=row.get("purchase_item") or None,
            purchase_date=row.get("purchase_date") or None,
            sales_associate=row.get("sales_associate") or None,
            store_location=row.get("store_location") or None,
            status=SurveyStatus.PENDING if phone else SurveyStatus.PHONE_NEEDED,
        )
        if phone_raw and phone is None:
            logger.info(
                "Unusable phone number in CSV row",
                extra={"line_number": line_number},
            )
        return customer, None


EXPORT_HEADERS = [
    "Email",
    "FirstName",
    "LastName",
    "PhoneNumber",
    "Status",
    "PurchaseItem",
    "PurchaseDate",
    "SalesAssociate",
    "StoreLocation",
    "SurveyStarted",
    "SurveyCompleted",
    "ResponseCount",
]


def export_customers_csv(customers: Iterable[CustomerSurvey]) -> str:
    """Render customers and their survey progress as CSV.

    Column names follow the purchase export layout, so an export can be
    imported again.
    """
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_HEADERS, lineterminator="\n")
    writer.writeheader()
    for customer in customers:
        writer.writerow(
            {
                "Email": customer.email or "",
                "FirstName": customer.first_name or "",
                "LastName": customer.last_name or "",
                "PhoneNumber": customer.phone_number or "",
                "Status": customer.status.value,
                "PurchaseItem": customer.purchase_item or "",
                "PurchaseDate": customer.purchase_date or "",
                "SalesAssociate": customer.sales_associate or "",
                "StoreLocation": customer.store_location or "",
                "SurveyStarted": _iso(customer.survey_started_at),
                "SurveyCompleted": _iso(customer.survey_completed_at),
                "ResponseCount": customer.questions_answered,
            }
        )
    return buffer.getvalue()


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value is not None else ""
