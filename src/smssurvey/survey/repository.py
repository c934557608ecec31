"""
In-memory customer store.

Records are keyed by id; each key has its own ``asyncio.Lock`` so operations
on one customer are serialized without blocking any other customer.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

from smssurvey.contacts.phone import normalize_phone_number
from smssurvey.shared.exceptions import NotFoundError, StateError, ValidationError
from smssurvey.shared.logging import get_logger, mask_phone
from smssurvey.survey.models import CustomerSurvey, SurveyStatus

logger = get_logger(__name__)


class CustomerRepository:
    """Arena of customer records with a lock per customer."""

    def __init__(self, customers: Iterable[CustomerSurvey] = ()) -> None:
        self._customers: dict[str, CustomerSurvey] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        for customer in customers:
            self.add(customer)

    def lock(self, customer_id: str) -> asyncio.Lock:
        """Lock serializing operations on one customer; unknown ids raise NotFoundError."""
        lock = self._locks.get(customer_id)
        if lock is None:
            raise NotFoundError(
                f"Customer not found: {customer_id}",
                details={"customer_id": customer_id},
            )
        return lock

    def add(self, customer: CustomerSurvey) -> CustomerSurvey:
        """Store a new customer, deriving ``pending`` from a valid phone."""
        if customer.id in self._customers:
            raise ValidationError(
                f"Customer already exists: {customer.id}",
                details={"customer_id": customer.id},
            )

        normalized = normalize_phone_number(customer.phone_number)
        if normalized:
            customer.phone_number = normalized
            if customer.status is SurveyStatus.PHONE_NEEDED:
                customer.status = SurveyStatus.PENDING

        self._customers[customer.id] = customer
        self._locks[customer.id] = asyncio.Lock()
        return customer

    def get(self, customer_id: str) -> CustomerSurvey:
        customer = self._customers.get(customer_id)
        if customer is None:
            raise NotFoundError(
                f"Customer not found: {customer_id}",
                details={"customer_id": customer_id},
            )
        return customer

    def find_by_phone(self, phone: str | None) -> CustomerSurvey | None:
        """Exact match on the normalized number.

        When several customers share a number the one with an active survey
        wins, then the most recently created.
        """
        normalized = normalize_phone_number(phone)
        if normalized is None:
            return None

        matches = [c for c in self._customers.values() if c.phone_number == normalized]
        if not matches:
            return None
        matches.sort(
            key=lambda c: (c.status is SurveyStatus.ACTIVE, c.created_at),
            reverse=True,
        )
        return matches[0]

    def list_customers(self, status: SurveyStatus | None = None) -> list[CustomerSurvey]:
        customers = list(self._customers.values())
        if status is not None:
            customers = [c for c in customers if c.status is status]
        return customers

    async def update_phone(self, customer_id: str, phone: str) -> CustomerSurvey:
        """Set a customer's phone number; ``phone_needed`` becomes ``pending``."""
        normalized = normalize_phone_number(phone)
        if normalized is None:
            raise ValidationError(
                "Invalid phone number",
                details={"customer_id": customer_id, "phone_number": phone},
            )

        async with self.lock(customer_id):
            customer = self.get(customer_id)
            if customer.status is SurveyStatus.ACTIVE:
                raise StateError(
                    "Cannot change the phone number during an active survey",
                    details={"customer_id": customer_id},
                )
            customer.phone_number = normalized
            if customer.status is SurveyStatus.PHONE_NEEDED:
                customer.status = SurveyStatus.PENDING

        logger.info(
            "Customer phone updated",
            extra={"customer_id": customer_id, "phone": mask_phone(normalized)},
        )
        return customer.snapshot()

    def __len__(self) -> int:
        return len(self._customers)
