"""
Response envelope shared by every API operation.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResult(BaseModel, Generic[T]):
    """``{success, data|error}`` envelope."""

    success: bool = Field(..., description="Whether the operation succeeded")
    data: T | None = Field(default=None, description="Operation payload")
    error: str | None = Field(default=None, description="Error message when success is false")
    details: dict[str, Any] | None = Field(default=None, description="Optional error details")

    @classmethod
    def ok(cls, data: Any = None) -> "ApiResult[Any]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, details: dict[str, Any] | None = None) -> "ApiResult[Any]":
        return cls(success=False, error=error, details=details)
