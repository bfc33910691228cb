"""Job repository for job data access."""

import logging
from datetime import date
from typing import Optional, List, Dict, Any

from .base import BaseRepository
from .interfaces import JobStore
from services.models import Job, to_decimal

logger = logging.getLogger(__name__)


class JobRepository(BaseRepository, JobStore):
    """Repository for job CRUD operations.

    This repository handles only data access. Settings bootstrap and
    streak recomputation live in JobService.
    """

    table = "jobs"

    def list_for_range(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Job]:
        """Get jobs in an inclusive date range.

        Args:
            start: First date (inclusive), unbounded if None
            end: Last date (inclusive), unbounded if None

        Returns:
            Jobs ordered newest first
        """
        query = """
            SELECT * FROM jobs
            WHERE user_id = %s
              AND (%s::date IS NULL OR date >= %s::date)
              AND (%s::date IS NULL OR date <= %s::date)
            ORDER BY date DESC, created_at DESC
        """
        rows = self._execute_many(query, (self.user_id, start, start, end, end))
        return [self._from_row(row) for row in rows]

    def get_by_id(self, job_id: str) -> Optional[Job]:
        query = "SELECT * FROM jobs WHERE id = %s AND user_id = %s"
        row = self._execute_one(query, (job_id, self.user_id))
        return self._from_row(row) if row else None

    def create(self, job: Job) -> Job:
        """Create new job.

        Args:
            job: Job to insert (id and timestamps are assigned by the database)

        Returns:
            Created job
        """
        values = {
            "user_id": self.user_id,
            "client_id": job.client_id,
            "amount": job.amount,
            "tip_amount": job.tip_amount,
            "date": job.date,
            "description": job.description,
            "photos": job.photos,
            "rating": job.rating,
            "tags": list(job.tags),
        }
        row = self._execute_returning(self._insert_query(values.keys()), tuple(values.values()))
        created = self._from_row(row)
        logger.info(f"Created job {created.id} for user {self.user_id}: {created.amount} on {created.date}")
        return created

    def update(self, job_id: str, changes: Dict[str, Any]) -> Optional[Job]:
        row = self._update_row(job_id, changes)
        if not row:
            return None
        logger.info(f"Updated job {job_id}: {', '.join(changes) or 'no changes'}")
        return self._from_row(row)

    def delete(self, job_id: str) -> bool:
        deleted = self._delete_row(job_id)
        if deleted:
            logger.info(f"Deleted job {job_id}")
        return deleted

    @staticmethod
    def _from_row(row: Dict) -> Job:
        return Job(
            id=str(row["id"]),
            user_id=row["user_id"],
            client_id=str(row["client_id"]) if row.get("client_id") else None,
            amount=to_decimal(row["amount"]),
            tip_amount=to_decimal(row.get("tip_amount")),
            date=row["date"],
            description=row.get("description"),
            photos=row.get("photos"),
            rating=row.get("rating"),
            tags=list(row.get("tags") or []),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
