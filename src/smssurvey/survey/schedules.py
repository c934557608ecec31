"""
Scheduled survey batches.

Only bookkeeping lives here; dispatching a batch when it comes due is the
job of whatever scheduler calls ``ConversationEngine.start``.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Sequence

from smssurvey.shared.exceptions import NotFoundError, ValidationError
from smssurvey.shared.logging import get_logger
from smssurvey.survey.models import utcnow

logger = get_logger(__name__)


class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"


@dataclass(frozen=True)
class ScheduledSurvey:
    """A group of customers to survey at a given time."""

    id: int
    group_name: str
    scheduled_at: datetime
    customer_ids: tuple[str, ...]
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    created_at: datetime = field(default_factory=utcnow)

    @property
    def customer_count(self) -> int:
        return len(self.customer_ids)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ScheduleRepository:
    """In-memory store of scheduled batches, created once per application."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._schedules: dict[int, ScheduledSurvey] = {}
        self._next_id = 1

    def create(
        self,
        group_name: str,
        scheduled_at: datetime,
        customer_ids: Sequence[str],
    ) -> ScheduledSurvey:
        """Schedule a batch; the time must lie in the future."""
        if not group_name or not group_name.strip():
            raise ValidationError("group_name is required")
        if not customer_ids:
            raise ValidationError("customer_ids must not be empty")

        when = _as_utc(scheduled_at)
        if when <= self._clock():
            raise ValidationError(
                "Scheduled date must be in the future",
                details={"scheduled_at": when.isoformat()},
            )

        with self._lock:
            schedule = ScheduledSurvey(
                id=self._next_id,
                group_name=group_name.strip(),
                scheduled_at=when,
                customer_ids=tuple(customer_ids),
                created_at=self._clock(),
            )
            self._schedules[schedule.id] = schedule
            self._next_id += 1

        logger.info(
            "Survey batch scheduled",
            extra={
                "schedule_id": schedule.id,
                "group_name": schedule.group_name,
                "customer_count": schedule.customer_count,
                "scheduled_at": when.isoformat(),
            },
        )
        return schedule

    def list_scheduled(self) -> list[ScheduledSurvey]:
        """All batches, earliest first."""
        with self._lock:
            schedules = list(self._schedules.values())
        return sorted(schedules, key=lambda s: (s.scheduled_at, s.id))

    def get(self, schedule_id: int) -> ScheduledSurvey:
        schedule = self._schedules.get(schedule_id)
        if schedule is None:
            raise NotFoundError(
                "Scheduled survey not found",
                details={"schedule_id": schedule_id},
            )
        return schedule

    def cancel(self, schedule_id: int) -> ScheduledSurvey:
        """Remove a batch that has not come due yet."""
        with self._lock:
            schedule = self.get(schedule_id)
            if schedule.scheduled_at <= self._clock():
                raise ValidationError(
                    "Cannot cancel past scheduled surveys",
                    details={"schedule_id": schedule_id},
                )
            del self._schedules[schedule_id]

        logger.info("Survey batch cancelled", extra={"schedule_id": schedule_id})
        return schedule
