"""In-memory repositories.

Same contracts as the PostgreSQL repositories, backed by plain dicts.
Used by tests and by ``STORAGE_BACKEND=memory``. Each InMemoryDatabase
is an explicit object handed to the stores; there is no module-level
shared store.
"""

import logging
import uuid
from dataclasses import fields, replace
from datetime import date, datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional

from .interfaces import ClientStore, JobStore, SettingsHistoryStore, require_user
from services.exceptions import IntervalConflict
from services.models import Client, Job, SettingsSnapshot

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _copy(record: Any, **changes: Any) -> Any:
    """Copy a record, list fields included, so callers never share state with the table."""
    copied = replace(record, **changes)
    lists = {
        f.name: list(getattr(copied, f.name))
        for f in fields(copied)
        if isinstance(getattr(copied, f.name), list)
    }
    return replace(copied, **lists)


class InMemoryDatabase:
    """Tables as {id: record}, guarded by a single lock."""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self.clients: Dict[str, Client] = {}
        self.settings_history: Dict[str, SettingsSnapshot] = {}
        self.lock = Lock()


class _InMemoryStore:
    table_name = ""

    def __init__(self, user_id: Optional[str], database: Optional[InMemoryDatabase] = None):
        self.user_id = require_user(user_id)
        self.db = database or InMemoryDatabase()

    @property
    def _table(self) -> Dict[str, Any]:
        return getattr(self.db, self.table_name)

    def _rows(self) -> List[Any]:
        return [_copy(r) for r in self._table.values() if r.user_id == self.user_id]

    def _get(self, record_id: str) -> Optional[Any]:
        record = self._table.get(record_id)
        if record is None or record.user_id != self.user_id:
            return None
        return record

    def _add(self, record: Any) -> Any:
        now = _now()
        stored = _copy(record, id=str(uuid.uuid4()), user_id=self.user_id, created_at=now, updated_at=now)
        self._table[stored.id] = stored
        return _copy(stored)

    def _patch(self, record_id: str, changes: Dict[str, Any]) -> Optional[Any]:
        with self.db.lock:
            record = self._get(record_id)
            if record is None:
                return None
            updated = _copy(record, updated_at=_now(), **changes)
            self._table[record_id] = updated
            return _copy(updated)

    def _remove(self, record_id: str) -> bool:
        with self.db.lock:
            if self._get(record_id) is None:
                return False
            del self._table[record_id]
            return True


class InMemoryJobRepository(_InMemoryStore, JobStore):
    table_name = "jobs"

    def list_for_range(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Job]:
        jobs = [
            job for job in self._rows()
            if (start is None or job.date >= start) and (end is None or job.date <= end)
        ]
        return sorted(jobs, key=lambda j: (j.date, j.created_at), reverse=True)

    def get_by_id(self, job_id: str) -> Optional[Job]:
        job = self._get(job_id)
        return _copy(job) if job else None

    def create(self, job: Job) -> Job:
        with self.db.lock:
            created = self._add(job)
        logger.info(f"Created job {created.id} for user {self.user_id}: {created.amount} on {created.date}")
        return created

    def update(self, job_id: str, changes: Dict[str, Any]) -> Optional[Job]:
        return self._patch(job_id, changes)

    def delete(self, job_id: str) -> bool:
        return self._remove(job_id)


class InMemoryClientRepository(_InMemoryStore, ClientStore):
    table_name = "clients"

    def list_all(self) -> List[Client]:
        return sorted(self._rows(), key=lambda c: c.name.lower())

    def get_by_id(self, client_id: str) -> Optional[Client]:
        client = self._get(client_id)
        return _copy(client) if client else None

    def create(self, client: Client) -> Client:
        with self.db.lock:
            return self._add(client)

    def update(self, client_id: str, changes: Dict[str, Any]) -> Optional[Client]:
        return self._patch(client_id, changes)

    def delete(self, client_id: str) -> bool:
        return self._remove(client_id)


class InMemorySettingsHistoryRepository(_InMemoryStore, SettingsHistoryStore):
    table_name = "settings_history"

    def list_all(self, from_date: Optional[date] = None, to_date: Optional[date] = None) -> List[SettingsSnapshot]:
        records = [
            r for r in self._rows()
            if (from_date is None or r.effective_to is None or r.effective_to > from_date)
            and (to_date is None or r.effective_from <= to_date)
        ]
        return sorted(records, key=lambda r: r.effective_from)

    def find_covering(self, week_start: date) -> Optional[SettingsSnapshot]:
        covering = [r for r in self.list_all() if r.covers(week_start)]
        return covering[-1] if covering else None

    def find_earliest(self) -> Optional[SettingsSnapshot]:
        records = self.list_all()
        return records[0] if records else None

    def find_latest_before(self, day: date) -> Optional[SettingsSnapshot]:
        earlier = [r for r in self.list_all() if r.effective_from < day]
        return earlier[-1] if earlier else None

    def find_open(self) -> Optional[SettingsSnapshot]:
        return next((r for r in self._rows() if r.is_open), None)

    def insert(self, snapshot: SettingsSnapshot) -> SettingsSnapshot:
        with self.db.lock:
            self._check_single_open(snapshot)
            created = self._add(snapshot)
        logger.info(
            f"Inserted settings {created.id} for user {self.user_id}: "
            f"[{created.effective_from}, {created.effective_to or 'open'})"
        )
        return created

    def update(self, record_id: str, changes: Dict[str, Any]) -> Optional[SettingsSnapshot]:
        return self._patch(record_id, changes)

    def close_and_insert(
        self,
        record_id: str,
        expected_effective_to: Optional[date],
        close_at: date,
        snapshot: SettingsSnapshot
    ) -> SettingsSnapshot:
        with self.db.lock:
            record = self._get(record_id)
            if record is None or record.effective_to != expected_effective_to:
                raise IntervalConflict(
                    f"Settings record {record_id} changed concurrently; reload and retry"
                )

            closed = replace(record, effective_to=close_at, updated_at=_now())
            self._table[record_id] = closed
            try:
                self._check_single_open(snapshot)
            except IntervalConflict:
                self._table[record_id] = record
                raise
            created = self._add(snapshot)

        logger.info(
            f"Closed settings {record_id} at {close_at}, opened {created.id} "
            f"[{created.effective_from}, {created.effective_to or 'open'})"
        )
        return created

    def _check_single_open(self, snapshot: SettingsSnapshot) -> None:
        # Mirrors the partial unique index on open records
        if snapshot.is_open and any(
            r.is_open for r in self._table.values() if r.user_id == self.user_id
        ):
            raise IntervalConflict(f"User {self.user_id} already has an open settings record")
