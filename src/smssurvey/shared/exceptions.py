"""
Shared exceptions.

Every domain error carries a human-readable message and optional details;
routers map the concrete classes to HTTP status codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(eq=False)
class AppError(Exception):
    message: str = "Application error"
    details: Optional[dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    """Unknown customer, question or schedule id."""


class ValidationError(AppError):
    """Rejected input: catalog definitions, phone numbers, schedules."""


class StateError(AppError):
    """Illegal conversation transition; nothing was mutated."""


class DeliveryError(AppError):
    """Messaging gateway could not deliver an outbound message."""

    def __init__(
        self,
        message: str = "Message delivery failed",
        details: Optional[dict[str, Any]] = None,
        error_code: str | None = None,
        provider_response: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.error_code = error_code
        self.provider_response = provider_response or {}
