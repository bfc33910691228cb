"""Tests for per-week threshold flags and streak length."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from conftest import LAST_WEEK, NEXT_WEEK, THIS_WEEK
from services.exceptions import MissingSettings
from services.streak_service import distinct_week_starts


def weeks_ago(n):
    return THIS_WEEK - timedelta(weeks=n)


def log_weeks(app, amounts):
    """Log one job per week; amounts[0] is the oldest week, amounts[-1] this week."""
    for i, amount in enumerate(amounts):
        app.jobs.create_job(amount=amount, date=weeks_ago(len(amounts) - 1 - i) + timedelta(days=2))


class TestDistinctWeekStarts:

    def test_groups_and_sorts(self):
        result = distinct_week_starts([date(2025, 11, 14), date(2025, 11, 1), date(2025, 11, 8), None])
        assert result == [LAST_WEEK, THIS_WEEK]


class TestMarkThreshold:

    def test_requires_history(self, app):
        with pytest.raises(MissingSettings):
            app.streak.mark_threshold_for_week(THIS_WEEK)

    def test_revenue_excludes_tips(self, configured_app):
        configured_app.jobs.create_job(amount=60000, tip_amount=50000, date=THIS_WEEK)
        assert configured_app.streak.revenue_for_week(THIS_WEEK) == Decimal("60000")
        assert configured_app.settings.resolve_settings_for_week(THIS_WEEK).streak_threshold_met is False

    def test_threshold_is_inclusive(self, configured_app):
        configured_app.jobs.create_job(amount=100000, date=THIS_WEEK)
        assert configured_app.settings.resolve_settings_for_week(THIS_WEEK).streak_threshold_met is True

    def test_flag_follows_revenue(self, configured_app):
        job = configured_app.jobs.create_job(amount=120000, date=THIS_WEEK)
        assert configured_app.streak.mark_threshold_for_week(THIS_WEEK) is True

        configured_app.jobs.delete_job(job.id)
        assert configured_app.settings.resolve_settings_for_week(THIS_WEEK).streak_threshold_met is False

    def test_marks_past_week_on_its_own_record(self, configured_app):
        configured_app.jobs.create_job(amount=120000, date=LAST_WEEK)

        record = configured_app.settings.resolve_settings_for_week(LAST_WEEK)
        assert record.effective_from == LAST_WEEK
        assert record.streak_threshold_met is True
        assert configured_app.settings.resolve_settings_for_week(THIS_WEEK).streak_threshold_met is False


class TestStreakLength:

    def test_broken_run(self, configured_app):
        log_weeks(configured_app, [120000, 120000, 50000, 120000, 120000])
        assert configured_app.streak.current_streak_length(THIS_WEEK) == 2

    def test_capped(self, configured_app):
        log_weeks(configured_app, [120000] * 6)
        assert configured_app.streak.current_streak_length(THIS_WEEK) == 4

    def test_unmet_current_week(self, configured_app):
        log_weeks(configured_app, [120000, 120000, 50000])
        assert configured_app.streak.current_streak_length(THIS_WEEK) == 0
        assert configured_app.streak.current_streak_length(weeks_ago(1)) == 2

    def test_week_without_record_breaks_streak(self, configured_app):
        configured_app.jobs.create_job(amount=120000, date=weeks_ago(2))
        configured_app.jobs.create_job(amount=120000, date=THIS_WEEK)

        assert configured_app.settings.store.find_covering(weeks_ago(1)) is None
        assert configured_app.streak.current_streak_length(THIS_WEEK) == 1

    def test_week_inside_longer_record_does_not_count(self, configured_app):
        configured_app.jobs.create_job(amount=120000, date=THIS_WEEK)

        # NEXT_WEEK is still covered by the record that starts THIS_WEEK
        assert configured_app.streak.current_streak_length(NEXT_WEEK) == 0

    def test_moving_job_recomputes_both_weeks(self, configured_app):
        log_weeks(configured_app, [120000])
        job = configured_app.jobs.create_job(amount=120000, date=LAST_WEEK)
        assert configured_app.streak.current_streak_length(THIS_WEEK) == 2

        configured_app.jobs.update_job(job.id, date=weeks_ago(3))

        assert configured_app.settings.resolve_settings_for_week(LAST_WEEK).streak_threshold_met is False
        assert configured_app.settings.resolve_settings_for_week(weeks_ago(3)).streak_threshold_met is True
        assert configured_app.streak.current_streak_length(THIS_WEEK) == 1
