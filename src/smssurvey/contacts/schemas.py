"""
Pydantic schemas for customer contacts.
"""

from typing import List

from pydantic import BaseModel, Field

from smssurvey.survey.schemas import CustomerResponse


class CSVRowError(BaseModel):
    """Schema for CSV row validation error."""

    line_number: int = Field(..., description="Line number in the CSV file (1-indexed)")
    field: str | None = Field(default=None, description="Field that caused the error")
    error: str = Field(..., description="Error description")
    value: str | None = Field(default=None, description="Invalid value")


class CSVImportResponse(BaseModel):
    """Schema for CSV import response."""

    total_rows: int = Field(..., description="Data rows read, blank rows included")
    imported_count: int = Field(..., description="Customers added")
    needs_phone_count: int = Field(..., description="Imported customers without a usable phone number")
    skipped_count: int = Field(..., description="Rows without an email address")
    errors: List[CSVRowError] = Field(default_factory=list)
    customers: List[CustomerResponse] = Field(default_factory=list)


class PhoneUpdate(BaseModel):
    phone_number: str = Field(..., min_length=1, max_length=50, description="Phone number in any common format")


class CSVDataImport(BaseModel):
    """CSV content pasted as text instead of uploaded as a file."""

    csv_data: str = Field(..., max_length=5_000_000, description="Raw CSV text, header row first")
