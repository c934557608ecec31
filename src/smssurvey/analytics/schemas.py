"""
Pydantic schemas for the survey statistics API.
"""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel, Field


class NpsBreakdown(BaseModel):
    """NPS category counts over completed surveys with a score."""

    promoters: int = Field(description="Scores of 9-10")
    passives: int = Field(description="Scores of 7-8")
    detractors: int = Field(description="Scores of 0-6")


class AssociateStats(BaseModel):
    """Roll-up for one sales associate."""

    count: int = Field(description="Completed surveys attributed to the associate")
    avg_rating: float = Field(description="Mean satisfaction rating, one decimal")
    avg_nps: float = Field(description="Mean raw NPS score, one decimal")
    associate_nps: int = Field(description="Net Promoter Score for the associate")
    store_location: str | None = Field(
        default=None,
        description="Store of the associate's first completed survey (flat roll-up only)",
    )


class StoreStats(BaseModel):
    """Roll-up for one store, with its associates nested."""

    count: int = Field(description="Completed surveys at the store")
    avg_rating: float = Field(description="Mean satisfaction rating, one decimal")
    avg_nps: float = Field(description="Mean raw NPS score, one decimal")
    group_nps: int = Field(description="Net Promoter Score for the store")
    associates: Dict[str, AssociateStats] = Field(default_factory=dict)


class SurveyStats(BaseModel):
    """Dashboard snapshot of survey results."""

    total_customers: int = Field(description="All known customers")
    completed_surveys: int = Field(description="Customers with a completed survey")
    completion_rate: float = Field(
        description="completed / total x 100",
        ge=0.0,
        le=100.0,
    )
    average_rating: float = Field(description="Mean satisfaction rating, one decimal")
    average_nps: float = Field(description="Mean raw NPS score, one decimal")
    company_nps: int = Field(description="Company-wide Net Promoter Score")
    nps_breakdown: NpsBreakdown
    by_store: Dict[str, StoreStats] = Field(default_factory=dict)
    by_associate: Dict[str, AssociateStats] = Field(default_factory=dict)
    manager_callbacks: int = Field(description="Completed surveys asking for a manager callback")
    opt_outs: int = Field(description="Customers who opted out")
    generated_at: datetime = Field(description="Timestamp when stats were generated")
