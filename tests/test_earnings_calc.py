"""Tests for earnings aggregation and tag helpers."""

from datetime import date
from decimal import Decimal

from services.calculators import earnings_calc
from services.models import Job
from services.tags import get_all_tags_from_jobs, get_most_used_tags

JOBS = [
    Job(amount=Decimal("50000"), tip_amount=Decimal("2000"), date=date(2025, 11, 8), tags=["Corte", "Color"]),
    Job(amount=Decimal("70000"), tip_amount=Decimal("0"), date=date(2025, 11, 10), tags=["Corte"]),
    Job(amount=Decimal("0"), tip_amount=Decimal("500"), date=date(2025, 11, 11), tags=[]),
]


class TestEarnings:

    def test_revenue_excludes_tips(self):
        assert earnings_calc.week_revenue(JOBS) == Decimal("120000")

    def test_tips(self):
        assert earnings_calc.week_tips(JOBS) == Decimal("2500")

    def test_empty_week(self):
        assert earnings_calc.week_revenue([]) == 0
        assert earnings_calc.week_tips([]) == 0

    def test_total_pocket(self):
        assert earnings_calc.total_pocket(Decimal("60000"), Decimal("10000"), Decimal("2500")) == Decimal("72500")

    def test_target(self):
        assert earnings_calc.is_target_met(150000, 150000)
        assert not earnings_calc.is_target_met(149999, 150000)
        assert earnings_calc.target_progress(75000, 150000) == Decimal("0.5")
        assert earnings_calc.target_progress(75000, 0) == 0


class TestTags:

    def test_all_tags_sorted_unique(self):
        assert get_all_tags_from_jobs(JOBS) == ["Color", "Corte"]

    def test_most_used(self):
        assert get_most_used_tags(JOBS) == [("Corte", 2), ("Color", 1)]
        assert get_most_used_tags(JOBS, limit=1) == [("Corte", 2)]
