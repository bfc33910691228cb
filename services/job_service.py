"""Job workflow: settings bootstrap, job write, streak recomputation.

Order matters for every mutation:
    1. ensure the settings record for the job's week exists
    2. write the job
    3. recompute the streak flag of every week the job touched
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from services.exceptions import ValidationError
from services.models import Job
from services.repositories.interfaces import ClientStore, JobStore
from services.settings_history_manager import SettingsHistoryManager
from services.streak_service import StreakEvaluator
from services.validators import normalize_job
from time_utils import DateLike, week_start

logger = logging.getLogger(__name__)


class JobService:
    """Create, edit and delete jobs while keeping settings and streaks in step."""

    def __init__(
        self,
        jobs: JobStore,
        clients: ClientStore,
        settings: SettingsHistoryManager,
        streak: Optional[StreakEvaluator] = None
    ):
        self.jobs = jobs
        self.clients = clients
        self.settings = settings
        self.streak = streak or StreakEvaluator(jobs, settings)

    def list_jobs(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Job]:
        return self.jobs.list_for_range(start, end)

    def list_week_jobs(self, week: DateLike) -> List[Job]:
        ws = week_start(week)
        return self.jobs.list_for_range(ws, ws + timedelta(days=6))

    def get_job(self, job_id: str) -> Optional[Job]:
        return self.jobs.get_by_id(job_id)

    def create_job(self, **fields: Any) -> Job:
        """Log a new job.

        Args:
            **fields: amount, date, tip_amount, description, rating, tags,
                      client_id, photos

        Returns:
            Created job

        Raises:
            ValidationError: On invalid fields or unknown client
        """
        data = normalize_job(fields)
        self._check_client(data.get("client_id"))

        self.settings.ensure_settings_for_week(data["date"])
        job = self.jobs.create(Job(**data))
        self.streak.recompute_for_dates(job.date)

        logger.info(f"Logged job {job.id}: {job.amount} + tip {job.tip_amount} on {job.date}")
        return job

    def update_job(self, job_id: str, **changes: Any) -> Optional[Job]:
        """Edit a job; both the old and the new week are re-evaluated.

        Returns:
            Updated job, or None if it does not exist
        """
        existing = self.jobs.get_by_id(job_id)
        if existing is None:
            logger.warning(f"Job {job_id} not found for update")
            return None

        data = normalize_job(changes, partial=True)
        if "client_id" in data:
            self._check_client(data["client_id"])

        if "date" in data:
            self.settings.ensure_settings_for_week(data["date"])

        job = self.jobs.update(job_id, data)
        if job is None:
            logger.warning(f"Job {job_id} vanished during update")
            return None

        self.streak.recompute_for_dates(existing.date, job.date)
        return job

    def delete_job(self, job_id: str) -> bool:
        existing = self.jobs.get_by_id(job_id)
        if existing is None:
            return False

        deleted = self.jobs.delete(job_id)
        if deleted:
            self.streak.recompute_for_dates(existing.date)
            logger.info(f"Deleted job {job_id} from {existing.date}")
        return deleted

    def client_name_for(self, job: Job, clients_by_id: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """Get the job's client name, or None for no client (or a deleted one)."""
        if not job.client_id:
            return None
        if clients_by_id is not None:
            client = clients_by_id.get(job.client_id)
        else:
            client = self.clients.get_by_id(job.client_id)
        return client.name if client else None

    def _check_client(self, client_id: Optional[str]) -> None:
        if client_id and self.clients.get_by_id(client_id) is None:
            raise ValidationError(f"Unknown client: {client_id}")
