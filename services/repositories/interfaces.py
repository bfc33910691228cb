"""Persistence interfaces injected into the services.

Two implementations exist: PostgreSQL repositories and in-memory
repositories (tests, demos). Every store is bound to one user.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional

from services.exceptions import NotAuthenticated
from services.models import Client, Job, SettingsSnapshot


def require_user(user_id: Optional[str]) -> str:
    """Return ``user_id`` or raise NotAuthenticated when it is empty."""
    if not user_id:
        raise NotAuthenticated("No active user")
    return str(user_id)


class JobStore(ABC):
    user_id: str

    @abstractmethod
    def list_for_range(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Job]:
        """Jobs with start <= date <= end, newest first."""

    @abstractmethod
    def get_by_id(self, job_id: str) -> Optional[Job]: ...

    @abstractmethod
    def create(self, job: Job) -> Job: ...

    @abstractmethod
    def update(self, job_id: str, changes: Dict[str, Any]) -> Optional[Job]: ...

    @abstractmethod
    def delete(self, job_id: str) -> bool: ...


class ClientStore(ABC):
    user_id: str

    @abstractmethod
    def list_all(self) -> List[Client]:
        """Clients ordered by name."""

    @abstractmethod
    def get_by_id(self, client_id: str) -> Optional[Client]: ...

    @abstractmethod
    def create(self, client: Client) -> Client: ...

    @abstractmethod
    def update(self, client_id: str, changes: Dict[str, Any]) -> Optional[Client]: ...

    @abstractmethod
    def delete(self, client_id: str) -> bool: ...


class SettingsHistoryStore(ABC):
    user_id: str

    @abstractmethod
    def list_all(self, from_date: Optional[date] = None, to_date: Optional[date] = None) -> List[SettingsSnapshot]:
        """Records whose interval intersects [from_date, to_date], oldest first."""

    @abstractmethod
    def find_covering(self, week_start: date) -> Optional[SettingsSnapshot]:
        """Record with effective_from <= week_start < effective_to (or open)."""

    @abstractmethod
    def find_earliest(self) -> Optional[SettingsSnapshot]: ...

    @abstractmethod
    def find_latest_before(self, day: date) -> Optional[SettingsSnapshot]:
        """Most recent record with effective_from < day."""

    @abstractmethod
    def find_open(self) -> Optional[SettingsSnapshot]: ...

    @abstractmethod
    def insert(self, snapshot: SettingsSnapshot) -> SettingsSnapshot: ...

    @abstractmethod
    def update(self, record_id: str, changes: Dict[str, Any]) -> Optional[SettingsSnapshot]: ...

    @abstractmethod
    def close_and_insert(
        self,
        record_id: str,
        expected_effective_to: Optional[date],
        close_at: date,
        snapshot: SettingsSnapshot
    ) -> SettingsSnapshot:
        """Atomically close ``record_id`` at ``close_at`` and insert ``snapshot``.

        The close only happens if the record's effective_to still equals
        ``expected_effective_to``; otherwise IntervalConflict is raised and
        nothing is written.
        """
