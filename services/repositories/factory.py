"""Pick the persistence implementation from configuration."""

import logging
from typing import NamedTuple, Optional

from config import Config
from services.database import ConnectionManager
from .interfaces import ClientStore, JobStore, SettingsHistoryStore
from .client_repo import ClientRepository
from .job_repo import JobRepository
from .settings_history_repo import SettingsHistoryRepository
from .memory import (
    InMemoryDatabase, InMemoryClientRepository,
    InMemoryJobRepository, InMemorySettingsHistoryRepository,
)

logger = logging.getLogger(__name__)


class Repositories(NamedTuple):
    jobs: JobStore
    clients: ClientStore
    settings: SettingsHistoryStore


def create_repositories(
    user_id: Optional[str],
    backend: Optional[str] = None,
    connection_manager: Optional[ConnectionManager] = None,
    database: Optional[InMemoryDatabase] = None
) -> Repositories:
    """Build the stores for one user.

    Args:
        user_id: Authenticated user (NotAuthenticated when empty)
        backend: "postgres" or "memory"; defaults to Config.STORAGE_BACKEND
        connection_manager: Shared ConnectionManager for the postgres backend
        database: Shared InMemoryDatabase for the memory backend

    Returns:
        Repositories tuple
    """
    backend = (backend or Config.STORAGE_BACKEND).lower()

    if backend == "memory":
        database = database or InMemoryDatabase()
        return Repositories(
            jobs=InMemoryJobRepository(user_id, database),
            clients=InMemoryClientRepository(user_id, database),
            settings=InMemorySettingsHistoryRepository(user_id, database),
        )

    if backend == "postgres":
        manager = connection_manager or ConnectionManager()
        return Repositories(
            jobs=JobRepository(user_id, manager),
            clients=ClientRepository(user_id, manager),
            settings=SettingsHistoryRepository(user_id, manager),
        )

    raise ValueError(f"Unknown storage backend: {backend}")
