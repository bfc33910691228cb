"""End-to-end weekly summary tests."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from conftest import LAST_WEEK, NEXT_WEEK, THIS_WEEK, TODAY
from services.exceptions import MissingSettings
from services.models import Shift


@pytest.fixture
def busy_week(configured_app):
    """Two met weeks in a row; this week has 120000 revenue and 3000 in tips."""
    configured_app.jobs.create_job(amount=120000, date=LAST_WEEK)
    configured_app.jobs.create_job(amount=70000, tip_amount=3000, date=THIS_WEEK, tags=["Color"])
    configured_app.jobs.create_job(amount=50000, date=TODAY, tags=["Corte"])
    return configured_app


class TestWeeklySummary:

    def test_end_to_end(self, busy_week):
        summary = busy_week.summary.build(TODAY)

        assert summary.week.start == datetime(2025, 11, 8, 0, 0)
        assert summary.week.end == datetime(2025, 11, 14, 23, 59, 59, 999999)
        assert summary.job_count == 2
        assert summary.revenue == Decimal("120000")
        assert summary.tips == Decimal("3000")
        assert summary.streak_length == 2
        assert summary.commission.base_commission == Decimal("48000")
        assert summary.commission.streak_bonus == Decimal("12000")
        assert summary.commission.total_commission == Decimal("60000")
        assert summary.fixed_bonus == Decimal("10000")
        assert summary.total_pocket == Decimal("73000")
        assert summary.next_bonus_tier is None
        assert summary.remaining_to_next_bonus is None
        assert summary.target_met is False
        assert summary.target_progress == Decimal("0.8")
        assert summary.shift == Shift.MORNING
        assert summary.commission.get_breakdown_string() == "60000.00 (48000.00 base + 12000.00 streak x2)"

    def test_uses_settings_of_that_week(self, busy_week):
        busy_week.settings.branch_next_week({"base_commission_rate": "0.50"})

        assert busy_week.summary.build(TODAY).commission.base_commission == Decimal("48000")
        assert busy_week.summary.build(NEXT_WEEK).settings.base_commission_rate == Decimal("0.50")

    def test_empty_week(self, configured_app):
        summary = configured_app.summary.build(NEXT_WEEK)

        assert summary.job_count == 0
        assert summary.revenue == 0
        assert summary.streak_length == 0
        assert summary.fixed_bonus == 0
        assert summary.next_bonus_tier.threshold == Decimal("100000")
        assert summary.remaining_to_next_bonus == Decimal("100000")
        assert summary.total_pocket == 0

    def test_is_read_only(self, configured_app):
        before = configured_app.settings.list_history()
        configured_app.summary.build(NEXT_WEEK)
        assert configured_app.settings.list_history() == before

    def test_rotation_without_override(self, configured_app):
        configured_app.settings.amend_current_week({"current_shift": None, "shift_pattern_start": "2025-11-01"})

        assert configured_app.summary.build(TODAY).shift == Shift.AFTERNOON
        assert configured_app.summary.build(NEXT_WEEK).shift == Shift.MORNING

    def test_shift_rotates_through_weeks_without_jobs(self, configured_app):
        week_after = NEXT_WEEK + timedelta(weeks=1)

        assert configured_app.summary.build(TODAY).shift == Shift.MORNING
        assert configured_app.summary.build(NEXT_WEEK).shift == Shift.AFTERNOON
        assert configured_app.summary.build(week_after).shift == Shift.MORNING

    def test_logging_a_job_keeps_the_rotation(self, configured_app):
        weeks = (NEXT_WEEK, NEXT_WEEK + timedelta(weeks=1))
        before = [configured_app.summary.build(w).shift for w in weeks]

        configured_app.jobs.create_job(amount=100, date=NEXT_WEEK)

        after = [configured_app.summary.build(w).shift for w in weeks]
        assert before == after == [Shift.AFTERNOON, Shift.MORNING]

    def test_branch_keeps_the_rotation(self, configured_app):
        configured_app.settings.branch_next_week({"weekly_target": 200000})

        assert configured_app.summary.build(TODAY).shift == Shift.MORNING
        assert configured_app.summary.build(NEXT_WEEK).shift == Shift.AFTERNOON

    def test_requires_settings(self, app):
        with pytest.raises(MissingSettings):
            app.summary.build(TODAY)
