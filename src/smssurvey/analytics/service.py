"""
Survey statistics.

Stateless: every call recomputes from the customer records it is given.
Only completed surveys feed ratings and NPS; a missing store or associate is
grouped under "Unknown".
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction

from smssurvey.analytics.schemas import (
    AssociateStats,
    NpsBreakdown,
    StoreStats,
    SurveyStats,
)
from smssurvey.shared.logging import get_logger
from smssurvey.survey.models import CustomerSurvey, SurveyStatus

logger = get_logger(__name__)

UNKNOWN_GROUP = "Unknown"

PROMOTER_MIN = 9
DETRACTOR_MAX = 6


def nps(scores: Iterable[int]) -> int:
    """Net Promoter Score: % promoters minus % detractors, rounded half up."""
    values = list(scores)
    if not values:
        return 0
    promoters = sum(1 for s in values if s >= PROMOTER_MIN)
    detractors = sum(1 for s in values if s <= DETRACTOR_MAX)
    exact = Fraction(100 * (promoters - detractors), len(values))
    return math.floor(exact + Fraction(1, 2))


def classify_nps(score: int) -> str:
    if score >= PROMOTER_MIN:
        return "promoter"
    if score <= DETRACTOR_MAX:
        return "detractor"
    return "passive"


def _mean_1dp(values: list[int]) -> float:
    if not values:
        return 0.0
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass
class _Group:
    count: int = 0
    ratings: list[int] = field(default_factory=list)
    scores: list[int] = field(default_factory=list)

    def add(self, customer: CustomerSurvey) -> None:
        self.count += 1
        if customer.satisfaction_rating is not None:
            self.ratings.append(customer.satisfaction_rating)
        if customer.nps_score is not None:
            self.scores.append(customer.nps_score)


def _associate_stats(group: _Group, store_location: str | None = None) -> AssociateStats:
    return AssociateStats(
        count=group.count,
        avg_rating=_mean_1dp(group.ratings),
        avg_nps=_mean_1dp(group.scores),
        associate_nps=nps(group.scores),
        store_location=store_location,
    )


def get_stats(customers: Iterable[CustomerSurvey]) -> SurveyStats:
    """Build the dashboard snapshot for ``customers``."""
    everyone = list(customers)
    completed = [c for c in everyone if c.status is SurveyStatus.COMPLETED]

    ratings = [c.satisfaction_rating for c in completed if c.satisfaction_rating is not None]
    scores = [c.nps_score for c in completed if c.nps_score is not None]

    stores: dict[str, _Group] = {}
    store_associates: dict[str, dict[str, _Group]] = {}
    associates: dict[str, _Group] = {}
    associate_store: dict[str, str] = {}

    for customer in completed:
        store = customer.store_location or UNKNOWN_GROUP
        associate = customer.sales_associate or UNKNOWN_GROUP

        stores.setdefault(store, _Group()).add(customer)
        store_associates.setdefault(store, {}).setdefault(associate, _Group()).add(customer)
        associates.setdefault(associate, _Group()).add(customer)
        associate_store.setdefault(associate, store)

    by_store = {
        store: StoreStats(
            count=group.count,
            avg_rating=_mean_1dp(group.ratings),
            avg_nps=_mean_1dp(group.scores),
            group_nps=nps(group.scores),
            associates={
                name: _associate_stats(assoc)
                for name, assoc in store_associates[store].items()
            },
        )
        for store, group in stores.items()
    }
    by_associate = {
        name: _associate_stats(group, associate_store[name])
        for name, group in associates.items()
    }

    total = len(everyone)
    stats = SurveyStats(
        total_customers=total,
        completed_surveys=len(completed),
        completion_rate=(len(completed) / total * 100) if total else 0.0,
        average_rating=_mean_1dp(ratings),
        average_nps=_mean_1dp(scores),
        company_nps=nps(scores),
        nps_breakdown=NpsBreakdown(
            promoters=sum(1 for s in scores if classify_nps(s) == "promoter"),
            passives=sum(1 for s in scores if classify_nps(s) == "passive"),
            detractors=sum(1 for s in scores if classify_nps(s) == "detractor"),
        ),
        by_store=by_store,
        by_associate=by_associate,
        manager_callbacks=sum(1 for c in completed if c.manager_callback_requested),
        opt_outs=sum(1 for c in everyone if c.status is SurveyStatus.OPTED_OUT),
        generated_at=datetime.now(timezone.utc),
    )

    logger.debug(
        "Survey stats computed",
        extra={"total_customers": total, "completed_surveys": len(completed)},
    )
    return stats
