"""Settings history repository: time-ranged commission settings."""

import logging
from datetime import date
from typing import Optional, List, Dict, Any

from psycopg2 import errors, extras

from .base import BaseRepository
from .interfaces import SettingsHistoryStore
from services.exceptions import IntervalConflict
from services.models import BonusTier, Shift, SettingsSnapshot, to_decimal

logger = logging.getLogger(__name__)


class SettingsHistoryRepository(BaseRepository, SettingsHistoryStore):
    """Repository for settings_history rows.

    Intervals are half-open: a row is in force for weeks with
    effective_from <= week_start < effective_to; effective_to NULL is open.
    """

    table = "settings_history"

    def list_all(self, from_date: Optional[date] = None, to_date: Optional[date] = None) -> List[SettingsSnapshot]:
        query = """
            SELECT * FROM settings_history
            WHERE user_id = %s
              AND (%s::date IS NULL OR effective_to IS NULL OR effective_to > %s::date)
              AND (%s::date IS NULL OR effective_from <= %s::date)
            ORDER BY effective_from ASC
        """
        rows = self._execute_many(query, (self.user_id, from_date, from_date, to_date, to_date))
        return [self._from_row(row) for row in rows]

    def find_covering(self, week_start: date) -> Optional[SettingsSnapshot]:
        query = """
            SELECT * FROM settings_history
            WHERE user_id = %s
              AND effective_from <= %s
              AND (effective_to IS NULL OR effective_to > %s)
            ORDER BY effective_from DESC
            LIMIT 1
        """
        row = self._execute_one(query, (self.user_id, week_start, week_start))
        return self._from_row(row) if row else None

    def find_earliest(self) -> Optional[SettingsSnapshot]:
        query = """
            SELECT * FROM settings_history
            WHERE user_id = %s
            ORDER BY effective_from ASC
            LIMIT 1
        """
        row = self._execute_one(query, (self.user_id,))
        return self._from_row(row) if row else None

    def find_latest_before(self, day: date) -> Optional[SettingsSnapshot]:
        query = """
            SELECT * FROM settings_history
            WHERE user_id = %s AND effective_from < %s
            ORDER BY effective_from DESC
            LIMIT 1
        """
        row = self._execute_one(query, (self.user_id, day))
        return self._from_row(row) if row else None

    def find_open(self) -> Optional[SettingsSnapshot]:
        query = "SELECT * FROM settings_history WHERE user_id = %s AND effective_to IS NULL"
        row = self._execute_one(query, (self.user_id,))
        return self._from_row(row) if row else None

    def insert(self, snapshot: SettingsSnapshot) -> SettingsSnapshot:
        """Insert a settings record.

        Raises:
            IntervalConflict: If a second open record would be created
        """
        values = self._to_values(snapshot)
        try:
            row = self._execute_returning(self._insert_query(values.keys()), tuple(values.values()))
        except errors.UniqueViolation as e:
            raise IntervalConflict(f"User {self.user_id} already has an open settings record") from e

        created = self._from_row(row)
        logger.info(
            f"Inserted settings {created.id} for user {self.user_id}: "
            f"[{created.effective_from}, {created.effective_to or 'open'})"
        )
        return created

    def update(self, record_id: str, changes: Dict[str, Any]) -> Optional[SettingsSnapshot]:
        values = self._adapt(changes)
        row = self._update_row(record_id, values)
        return self._from_row(row) if row else None

    def close_and_insert(
        self,
        record_id: str,
        expected_effective_to: Optional[date],
        close_at: date,
        snapshot: SettingsSnapshot
    ) -> SettingsSnapshot:
        """Close one record and insert its successor in one transaction.

        The UPDATE is a compare-and-swap on effective_to, so two sessions
        branching from the same open record cannot both succeed.
        """
        values = self._to_values(snapshot)
        try:
            with self._transaction() as (conn, cursor):
                cursor.execute(
                    """
                    UPDATE settings_history
                    SET effective_to = %s, updated_at = now()
                    WHERE id = %s AND user_id = %s
                      AND effective_to IS NOT DISTINCT FROM %s
                    """,
                    (close_at, record_id, self.user_id, expected_effective_to)
                )
                if cursor.rowcount != 1:
                    raise IntervalConflict(
                        f"Settings record {record_id} changed concurrently; reload and retry"
                    )

                cursor.execute(self._insert_query(values.keys()), tuple(values.values()))
                row = cursor.fetchone()
        except errors.UniqueViolation as e:
            raise IntervalConflict(f"User {self.user_id} already has an open settings record") from e

        created = self._from_row(row)
        logger.info(
            f"Closed settings {record_id} at {close_at}, opened {created.id} "
            f"[{created.effective_from}, {created.effective_to or 'open'})"
        )
        return created

    def _to_values(self, snapshot: SettingsSnapshot) -> Dict[str, Any]:
        values = {
            "user_id": self.user_id,
            "weekly_target": snapshot.weekly_target,
            "base_commission_rate": snapshot.base_commission_rate,
            "streak_bonus_rate": snapshot.streak_bonus_rate,
            "streak_bonus_threshold": snapshot.streak_bonus_threshold,
            "fixed_bonus_tiers": snapshot.fixed_bonus_tiers,
            "streak_threshold_met": snapshot.streak_threshold_met,
            "current_shift": snapshot.current_shift,
            "shift_pattern_start": snapshot.shift_pattern_start,
            "effective_from": snapshot.effective_from,
            "effective_to": snapshot.effective_to,
        }
        return self._adapt(values)

    @staticmethod
    def _adapt(values: Dict[str, Any]) -> Dict[str, Any]:
        adapted = dict(values)
        if "fixed_bonus_tiers" in adapted:
            adapted["fixed_bonus_tiers"] = extras.Json(
                [tier.to_dict() for tier in adapted["fixed_bonus_tiers"] or []]
            )
        if adapted.get("current_shift") is not None:
            adapted["current_shift"] = Shift(adapted["current_shift"]).value
        return adapted

    @staticmethod
    def _from_row(row: Dict) -> SettingsSnapshot:
        tiers = [BonusTier.from_dict(t) for t in row.get("fixed_bonus_tiers") or []]
        return SettingsSnapshot(
            id=str(row["id"]),
            user_id=row["user_id"],
            weekly_target=to_decimal(row["weekly_target"]),
            base_commission_rate=to_decimal(row["base_commission_rate"]),
            streak_bonus_rate=to_decimal(row["streak_bonus_rate"]),
            streak_bonus_threshold=to_decimal(row.get("streak_bonus_threshold")),
            fixed_bonus_tiers=sorted(tiers, key=lambda t: t.threshold),
            streak_threshold_met=bool(row.get("streak_threshold_met")),
            current_shift=Shift(row["current_shift"]) if row.get("current_shift") else None,
            shift_pattern_start=row.get("shift_pattern_start"),
            effective_from=row["effective_from"],
            effective_to=row.get("effective_to"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
