"""Weekly summary: every number the dashboard shows for one business week."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from services.calculators import earnings_calc
from services.calculators.commission_calc import CommissionCalculator, CommissionResult
from services.exceptions import MissingSettings
from services.models import BonusTier, Job, Shift, SettingsSnapshot
from services.repositories.interfaces import JobStore
from services.settings_history_manager import SettingsHistoryManager
from services.shifts import resolve_shift, shift_after_weeks
from services.streak_service import StreakEvaluator
from time_utils import DateLike, WeekBounds, week_bounds, week_start, weeks_between

logger = logging.getLogger(__name__)


@dataclass
class WeeklySummary:
    week: WeekBounds
    jobs: List[Job]
    settings: SettingsSnapshot
    shift: Shift
    revenue: Decimal
    tips: Decimal
    streak_length: int
    commission: CommissionResult
    fixed_bonus: Decimal
    next_bonus_tier: Optional[BonusTier]
    remaining_to_next_bonus: Optional[Decimal]
    target_met: bool
    target_progress: Decimal
    total_pocket: Decimal

    @property
    def job_count(self) -> int:
        return len(self.jobs)


class WeeklySummaryService:
    """Read-only: resolves settings, streak and shift, then runs the calculators."""

    def __init__(
        self,
        jobs: JobStore,
        settings: SettingsHistoryManager,
        streak: Optional[StreakEvaluator] = None,
        calculator: Optional[CommissionCalculator] = None
    ):
        self.jobs = jobs
        self.settings = settings
        self.streak = streak or StreakEvaluator(jobs, settings)
        self.calculator = calculator or CommissionCalculator()

    def build(self, week: DateLike) -> WeeklySummary:
        """Summarize the week containing ``week``.

        Raises:
            MissingSettings: If the user has no settings history
        """
        ws = week_start(week)
        snapshot = self.settings.resolve_settings_for_week(ws)
        if snapshot is None:
            raise MissingSettings(f"No settings for user {self.jobs.user_id}; run first-time setup")

        jobs = self.jobs.list_for_range(ws, ws + timedelta(days=6))
        revenue = earnings_calc.week_revenue(jobs)
        tips = earnings_calc.week_tips(jobs)
        streak_length = self.streak.current_streak_length(ws)

        commission = self.calculator.calculate(revenue, snapshot, streak_length)
        tiers = snapshot.fixed_bonus_tiers
        fixed_bonus = self.calculator.calculate_fixed_bonus(revenue, tiers)

        summary = WeeklySummary(
            week=week_bounds(ws),
            jobs=jobs,
            settings=snapshot,
            shift=self.shift_for(ws, snapshot),
            revenue=revenue,
            tips=tips,
            streak_length=streak_length,
            commission=commission,
            fixed_bonus=fixed_bonus,
            next_bonus_tier=self.calculator.get_next_bonus_tier(revenue, tiers),
            remaining_to_next_bonus=self.calculator.get_remaining_to_next_bonus(revenue, tiers),
            target_met=earnings_calc.is_target_met(revenue, snapshot.weekly_target),
            target_progress=earnings_calc.target_progress(revenue, snapshot.weekly_target),
            total_pocket=earnings_calc.total_pocket(commission.total_commission, fixed_bonus, tips),
        )
        logger.debug(f"Week {ws}: revenue {revenue}, pocket {summary.total_pocket}, streak {streak_length}")
        return summary

    @staticmethod
    def shift_for(ws: date, snapshot: SettingsSnapshot) -> Shift:
        """Shift of the week.

        The override holds for the record's first week and keeps rotating
        for every later week the record covers. Without an override the
        rotation runs from the pattern start.
        """
        override = shift_after_weeks(snapshot.current_shift, weeks_between(snapshot.effective_from, ws))
        pattern_start = snapshot.shift_pattern_start or snapshot.effective_from
        return resolve_shift(ws, pattern_start, override)
