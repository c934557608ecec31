"""Tests for survey statistics."""

import pytest

from smssurvey.analytics.service import classify_nps, get_stats, nps
from smssurvey.survey.models import CustomerSurvey, SurveyStatus


def _completed(
    rating: int | None = None,
    score: int | None = None,
    store: str | None = None,
    associate: str | None = None,
    callback: bool = False,
) -> CustomerSurvey:
    return CustomerSurvey(
        status=SurveyStatus.COMPLETED,
        satisfaction_rating=rating,
        nps_score=score,
        store_location=store,
        sales_associate=associate,
        manager_callback_requested=callback,
    )


class TestNps:
    def test_reference_value(self) -> None:
        assert nps([9, 9, 7, 3]) == 25

    def test_empty_is_zero(self) -> None:
        assert nps([]) == 0

    def test_bounds(self) -> None:
        assert nps([10, 9]) == 100
        assert nps([0, 6]) == -100
        assert nps([7, 8]) == 0

    def test_rounds_half_up(self) -> None:
        # 1 promoter of 8 -> 12.5
        assert nps([9, 7, 7, 7, 7, 7, 7, 7]) == 13
        # 1 detractor of 8 -> -12.5
        assert nps([3, 7, 7, 7, 7, 7, 7, 7]) == -12

    def test_thirds(self) -> None:
        assert nps([9, 7, 7]) == 33
        assert nps([9, 9, 7]) == 67

    @pytest.mark.parametrize("score,category", [(10, "promoter"), (9, "promoter"), (8, "passive"), (7, "passive"), (6, "detractor"), (0, "detractor")])
    def test_classify(self, score: int, category: str) -> None:
        assert classify_nps(score) == category


class TestGetStats:
    def test_empty(self) -> None:
        stats = get_stats([])

        assert stats.total_customers == 0
        assert stats.completion_rate == 0
        assert stats.average_rating == 0
        assert stats.company_nps == 0
        assert stats.by_store == {}

    def test_only_completed_surveys_count(self) -> None:
        customers = [
            _completed(rating=5, score=10),
            _completed(rating=4, score=6),
            CustomerSurvey(status=SurveyStatus.ACTIVE, satisfaction_rating=1, nps_score=0),
            CustomerSurvey(status=SurveyStatus.OPTED_OUT),
        ]

        stats = get_stats(customers)

        assert stats.total_customers == 4
        assert stats.completed_surveys == 2
        assert stats.completion_rate == 50.0
        assert stats.average_rating == 4.5
        assert stats.average_nps == 8.0
        assert stats.company_nps == 0
        assert stats.opt_outs == 1

    def test_completion_rate_is_not_rounded(self) -> None:
        customers = [_completed(), CustomerSurvey(), CustomerSurvey()]

        assert get_stats(customers).completion_rate == pytest.approx(100 / 3)

    def test_averages_round_half_up_to_one_decimal(self) -> None:
        # mean rating 4.25 -> 4.3; mean nps 8.25 -> 8.3
        customers = [
            _completed(rating=5, score=9),
            _completed(rating=4, score=8),
            _completed(rating=4, score=8),
            _completed(rating=4, score=8),
        ]

        stats = get_stats(customers)

        assert stats.average_rating == 4.3
        assert stats.average_nps == 8.3

    def test_missing_fields_are_skipped_not_zeroed(self) -> None:
        stats = get_stats([_completed(rating=4), _completed(score=10)])

        assert stats.average_rating == 4.0
        assert stats.average_nps == 10.0
        assert stats.nps_breakdown.promoters == 1

    def test_breakdown(self) -> None:
        stats = get_stats([_completed(score=s) for s in (10, 9, 8, 7, 6, 0)])

        assert stats.nps_breakdown.promoters == 2
        assert stats.nps_breakdown.passives == 2
        assert stats.nps_breakdown.detractors == 2

    def test_hierarchy(self) -> None:
        customers = [
            _completed(rating=5, score=10, store="Downtown", associate="Ann"),
            _completed(rating=3, score=5, store="Downtown", associate="Ann"),
            _completed(rating=4, score=9, store="Downtown", associate="Bo"),
            _completed(rating=2, score=3, store="Airport", associate="Cy"),
            _completed(rating=4, score=8),
        ]

        stats = get_stats(customers)

        downtown = stats.by_store["Downtown"]
        assert downtown.count == 3
        assert downtown.avg_rating == 4.0
        assert downtown.avg_nps == 8.0
        assert downtown.group_nps == 33
        assert downtown.associates["Ann"].count == 2
        assert downtown.associates["Ann"].associate_nps == 0
        assert downtown.associates["Bo"].associate_nps == 100

        assert stats.by_store["Airport"].group_nps == -100
        assert stats.by_store["Unknown"].associates["Unknown"].count == 1

        assert stats.by_associate["Ann"].store_location == "Downtown"
        assert stats.by_associate["Cy"].associate_nps == -100
        assert stats.by_associate["Unknown"].store_location == "Unknown"

    def test_same_formula_at_every_level(self) -> None:
        scores = [9, 9, 7, 3]
        customers = [_completed(score=s, store="Solo", associate="Only") for s in scores]

        stats = get_stats(customers)

        assert stats.company_nps == nps(scores)
        assert stats.by_store["Solo"].group_nps == nps(scores)
        assert stats.by_store["Solo"].associates["Only"].associate_nps == nps(scores)
        assert stats.by_associate["Only"].associate_nps == nps(scores)

    def test_manager_callbacks(self) -> None:
        customers = [
            _completed(callback=True),
            _completed(),
            CustomerSurvey(status=SurveyStatus.ACTIVE, manager_callback_requested=True),
        ]

        assert get_stats(customers).manager_callbacks == 1
