"""Streak evaluator.

The streak is never stored as a counter. Each week's settings record
carries a ``streak_threshold_met`` flag computed from that week's
revenue; the streak is the run of consecutive flagged weeks ending at
the week being looked at, capped at MAX_STREAK_WEEKS.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List

from config import Config
from services.calculators.earnings_calc import week_revenue
from services.exceptions import MissingSettings
from services.repositories.interfaces import JobStore
from services.settings_history_manager import SettingsHistoryManager
from time_utils import DateLike, week_start

logger = logging.getLogger(__name__)


def distinct_week_starts(dates: Iterable[DateLike]) -> List[date]:
    """Distinct week starts of ``dates`` in chronological order."""
    return sorted({week_start(d) for d in dates if d is not None})


class StreakEvaluator:
    """Writes per-week threshold flags and derives the streak length."""

    MAX_STREAK_WEEKS = Config.MAX_STREAK_WEEKS

    def __init__(self, jobs: JobStore, settings: SettingsHistoryManager):
        self.jobs = jobs
        self.settings = settings

    def revenue_for_week(self, week: DateLike) -> Decimal:
        ws = week_start(week)
        return week_revenue(self.jobs.list_for_range(ws, ws + timedelta(days=6)))

    def mark_threshold_for_week(self, week: DateLike) -> bool:
        """Recompute and store whether the week's revenue met the streak threshold.

        Args:
            week: Any date in the week

        Returns:
            True if revenue >= streak_bonus_threshold

        Raises:
            MissingSettings: If the user has no settings history
        """
        ws = week_start(week)
        if self.settings.resolve_settings_for_week(ws) is None:
            raise MissingSettings(f"No settings for user {self.jobs.user_id}; cannot evaluate week {ws}")

        record = self.settings.ensure_settings_for_week(ws)
        revenue = self.revenue_for_week(ws)
        met = revenue >= record.streak_bonus_threshold

        if record.streak_threshold_met != met:
            self.settings.store.update(record.id, {"streak_threshold_met": met})
            logger.info(
                f"Week {ws} streak threshold {'met' if met else 'missed'}: "
                f"revenue {revenue} vs threshold {record.streak_bonus_threshold}"
            )
        return met

    def current_streak_length(self, as_of_week: DateLike) -> int:
        """Count consecutive flagged weeks ending at ``as_of_week``.

        Walks back one week at a time, at most MAX_STREAK_WEEKS weeks. A
        week counts only if it has its own settings record with the flag
        set; a missing record breaks the streak like an unmet week.

        Returns:
            Streak length in [0, MAX_STREAK_WEEKS]
        """
        ws = week_start(as_of_week)
        oldest = ws - timedelta(weeks=self.MAX_STREAK_WEEKS - 1)
        by_week = {r.effective_from: r for r in self.settings.store.list_all(oldest, ws)}

        streak = 0
        for i in range(self.MAX_STREAK_WEEKS):
            record = by_week.get(ws - timedelta(weeks=i))
            if record is None or not record.streak_threshold_met:
                break
            streak += 1

        logger.debug(f"Streak as of {ws}: {streak}")
        return streak

    def recompute_for_dates(self, *dates: DateLike) -> Dict[date, bool]:
        """Re-mark every week touched by a job mutation.

        Pass the job's new date and, on edits that move a job, its old date.
        """
        return {ws: self.mark_threshold_for_week(ws) for ws in distinct_week_starts(dates)}
