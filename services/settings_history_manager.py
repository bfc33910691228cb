"""Settings history manager: which commission settings applied in which week.

Every user has a sequence of non-overlapping, week-aligned records
[effective_from, effective_to). At most one record is open
(effective_to = None): it covers the present and the future until the
next edit.

Two write modes:
    amend_current_week  - change the record in force this week in place
    branch_next_week    - close the current record at next week's start
                          and open a new record from there

Weeks that receive a job mutation always get a record of their own
(see ensure_settings_for_week), because the per-week streak flag is
stored on that record.
"""

import logging
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional

from config import Config
from services.exceptions import IntervalConflict, MissingSettings
from services.models import Shift, SettingsSnapshot
from services.repositories.interfaces import SettingsHistoryStore
from services.shifts import shift_after_weeks
from services.validators import normalize_settings_patch
from time_utils import DateLike, today_local, week_start, weeks_between

logger = logging.getLogger(__name__)

ONE_WEEK = timedelta(weeks=1)


def are_essential_settings_configured(snapshot: Optional[SettingsSnapshot]) -> bool:
    """Check that first-time setup has produced usable settings.

    Essential: a weekly target, a base commission rate and a shift.
    """
    if snapshot is None:
        return False
    return (
        snapshot.weekly_target > 0
        and snapshot.base_commission_rate > 0
        and snapshot.current_shift is not None
    )


class SettingsHistoryManager:
    """Resolves and versions settings_history records for one user."""

    def __init__(
        self,
        store: SettingsHistoryStore,
        today: Callable[[], date] = today_local
    ):
        """Initialize manager.

        Args:
            store: Settings history store bound to the user
            today: Returns the current local date (injectable for tests)
        """
        self.store = store
        self._today = today

    # ========== Reads ==========

    def resolve_settings_for_week(self, week: DateLike) -> Optional[SettingsSnapshot]:
        """Get the settings in force for the week containing ``week``.

        Falls back to the earliest record when no record covers the week,
        so a history with gaps still yields settings.

        Returns:
            SettingsSnapshot, or None if the user has no history at all
        """
        ws = week_start(week)
        record = self.store.find_covering(ws)
        if record is not None:
            return record

        fallback = self.store.find_earliest()
        if fallback is not None:
            logger.warning(
                f"No settings cover week {ws} for user {self.store.user_id}; "
                f"falling back to earliest record {fallback.id} ({fallback.effective_from})"
            )
        return fallback

    def get_current(self) -> Optional[SettingsSnapshot]:
        """Get the record for the present: the open one, else the one covering this week."""
        record = self.store.find_open()
        if record is not None:
            return record
        return self.resolve_settings_for_week(self._today())

    def list_history(self, from_date: Optional[date] = None, to_date: Optional[date] = None) -> List[SettingsSnapshot]:
        return self.store.list_all(from_date, to_date)

    # ========== Bootstrap ==========

    @staticmethod
    def default_snapshot(ws: date) -> SettingsSnapshot:
        """Settings used when a user has no history at all."""
        return SettingsSnapshot(
            effective_from=ws,
            effective_to=None,
            weekly_target=Config.DEFAULT_WEEKLY_TARGET,
            base_commission_rate=Config.DEFAULT_BASE_COMMISSION_RATE,
            streak_bonus_rate=Config.DEFAULT_STREAK_BONUS_RATE,
            streak_bonus_threshold=Config.DEFAULT_STREAK_BONUS_THRESHOLD,
            fixed_bonus_tiers=[],
            current_shift=None,
        )

    def ensure_settings_for_week(self, week: DateLike) -> SettingsSnapshot:
        """Make sure the week containing ``week`` has its own settings record.

        - Covering record that starts this week: returned as is.
        - Covering record that started in an earlier week: split at this
          week (closed here, continued by a copy from here to its old end)
          so this week gets its own record and streak flag.
        - No covering record: a one-week record is created from the most
          recent earlier record (or the earliest one), with the shift
          override flipped to continue the rotation.
        - Empty history: an open record with default settings is created.

        Returns:
            The record starting at the week
        """
        ws = week_start(week)

        record = self.store.find_covering(ws)
        if record is not None:
            if record.effective_from < ws:
                return self._split_record(record, ws)
            return record

        source = self.store.find_latest_before(ws) or self.store.find_earliest()
        if source is None:
            created = self.store.insert(self.default_snapshot(ws))
            logger.info(f"Created default settings {created.id} for user {self.store.user_id} from {ws}")
            return created

        snapshot = SettingsSnapshot(
            effective_from=ws,
            effective_to=ws + ONE_WEEK,
            streak_threshold_met=False,
            **self._copy_fields(source, flip_shift=True)
        )
        created = self.store.insert(snapshot)
        logger.info(
            f"Copied settings {source.id} ({source.effective_from}) forward to week {ws} "
            f"as {created.id}, shift {created.current_shift.value if created.current_shift else 'none'}"
        )
        return created

    def first_time_setup(
        self,
        weekly_target: Any,
        base_commission_rate: Any,
        current_shift: Optional[Any] = None,
        **extra: Any
    ) -> SettingsSnapshot:
        """Create the first settings record, open from the current week.

        Args:
            weekly_target: Weekly revenue target
            base_commission_rate: Decimal rate (0.40 = 40%)
            current_shift: Shift worked this week
            **extra: Any other settings field (streak_bonus_rate, tiers, ...)

        Raises:
            IntervalConflict: If the user already has settings
        """
        if self.store.find_earliest() is not None:
            raise IntervalConflict(f"User {self.store.user_id} already has settings; amend or branch instead")

        fields = normalize_settings_patch(dict(
            extra,
            weekly_target=weekly_target,
            base_commission_rate=base_commission_rate,
            current_shift=current_shift,
        ))
        snapshot = self.default_snapshot(week_start(self._today())).with_changes(**fields)
        created = self.store.insert(snapshot)
        logger.info(f"First-time settings {created.id} for user {self.store.user_id}")
        return created

    # ========== Writes ==========

    def amend_current_week(self, patch: Dict[str, Any]) -> SettingsSnapshot:
        """Apply ``patch`` to the settings in force this week, in place.

        Raises:
            MissingSettings: If the user has no settings history
            ValidationError: If the patch is malformed
        """
        changes = normalize_settings_patch(patch)
        current = self._current_week_record()

        if not changes:
            return current

        updated = self.store.update(current.id, changes)
        if updated is None:
            raise IntervalConflict(f"Settings record {current.id} disappeared during amend")

        logger.info(f"Amended settings {current.id} for week {current.effective_from}: {', '.join(changes)}")
        return updated

    def branch_next_week(self, patch: Dict[str, Any]) -> SettingsSnapshot:
        """Open a new record from next week with ``patch`` over the current fields.

        The current record is closed at next week's start. The close is a
        compare-and-swap on its effective_to, so a concurrent branch fails
        with IntervalConflict instead of producing overlapping intervals.
        The shift override is advanced to next week unless the patch sets it.

        When next week already has the open record from an earlier branch,
        ``patch`` is merged into that pending record instead.

        Raises:
            MissingSettings: If the user has no settings history
            IntervalConflict: If a record starts after next week, or the
                              current record changed concurrently
        """
        changes = normalize_settings_patch(patch)
        current = self._current_week_record()
        next_ws = week_start(self._today()) + ONE_WEEK

        later = [r for r in self.store.list_all(from_date=next_ws) if r.effective_from >= next_ws]
        if len(later) == 1 and later[0].effective_from == next_ws and later[0].is_open:
            return self._amend_pending(later[0], changes)
        if later:
            raise IntervalConflict(
                f"Settings already exist from {later[-1].effective_from}; cannot branch from {next_ws}"
            )

        fields = self._copy_fields(current, flip_shift=False)
        fields["current_shift"] = shift_after_weeks(
            current.current_shift, weeks_between(current.effective_from, next_ws)
        )
        fields.update(changes)
        successor = SettingsSnapshot(
            effective_from=next_ws,
            effective_to=None,
            streak_threshold_met=False,
            **fields
        )

        if current.effective_to is None or current.effective_to > next_ws:
            created = self.store.close_and_insert(current.id, current.effective_to, next_ws, successor)
        else:
            created = self.store.insert(successor)

        logger.info(
            f"Branched settings for user {self.store.user_id}: {current.id} ends {next_ws}, "
            f"{created.id} open from {next_ws} ({', '.join(changes) or 'no changes'})"
        )
        return created

    # ========== Internals ==========

    def _amend_pending(self, pending: SettingsSnapshot, changes: Dict[str, Any]) -> SettingsSnapshot:
        if not changes:
            return pending

        updated = self.store.update(pending.id, changes)
        if updated is None:
            raise IntervalConflict(f"Settings record {pending.id} disappeared during branch")

        logger.info(f"Updated pending settings {pending.id} from {pending.effective_from}: {', '.join(changes)}")
        return updated

    def _current_week_record(self) -> SettingsSnapshot:
        if self.store.find_earliest() is None:
            raise MissingSettings(
                f"User {self.store.user_id} has no settings; run first-time setup first"
            )
        return self.ensure_settings_for_week(self._today())

    def _split_record(self, record: SettingsSnapshot, ws: date) -> SettingsSnapshot:
        """Close ``record`` at ``ws`` and continue it with a copy from ``ws`` to its old end.

        The copy keeps the open/closed state of the original and advances
        the shift override by the number of weeks elapsed.
        """
        weeks = weeks_between(record.effective_from, ws)
        fields = self._copy_fields(record, flip_shift=False)
        fields["current_shift"] = shift_after_weeks(record.current_shift, weeks)
        successor = SettingsSnapshot(
            effective_from=ws,
            effective_to=record.effective_to,
            streak_threshold_met=False,
            **fields
        )

        try:
            created = self.store.close_and_insert(record.id, record.effective_to, ws, successor)
        except IntervalConflict:
            # Another session split first; use its record if it is the one we need
            current = self.store.find_covering(ws)
            if current is not None and current.effective_from == ws:
                logger.warning(f"Settings for week {ws} were split concurrently; using {current.id}")
                return current
            raise

        logger.info(
            f"Split settings {record.id} ({record.effective_from}) at {ws}: "
            f"{created.id} covers [{ws}, {created.effective_to or 'open'})"
        )
        return created

    @staticmethod
    def _copy_fields(source: SettingsSnapshot, flip_shift: bool) -> Dict[str, Any]:
        fields = source.settings_fields()
        fields["fixed_bonus_tiers"] = list(source.fixed_bonus_tiers)
        if flip_shift and source.current_shift is not None:
            fields["current_shift"] = Shift(source.current_shift).opposite()
        return fields
