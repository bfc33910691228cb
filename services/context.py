"""Wiring of stores and services for one authenticated user.

Replaces module-level singletons: callers build a context explicitly and
pass it where it is needed.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from services.client_service import ClientService
from services.job_service import JobService
from services.repositories.factory import Repositories, create_repositories
from services.settings_history_manager import SettingsHistoryManager
from services.settings_state import SettingsState
from services.streak_service import StreakEvaluator
from services.weekly_summary import WeeklySummaryService
from time_utils import today_local

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    repositories: Repositories
    settings: SettingsHistoryManager
    settings_state: SettingsState
    streak: StreakEvaluator
    jobs: JobService
    clients: ClientService
    summary: WeeklySummaryService


def create_app_context(
    user_id: Optional[str],
    backend: Optional[str] = None,
    today: Callable[[], date] = today_local,
    **store_options
) -> AppContext:
    """Build every service for ``user_id``.

    Args:
        user_id: Authenticated user (NotAuthenticated when empty)
        backend: "postgres" or "memory"; defaults to Config.STORAGE_BACKEND
        today: Clock returning the local date
        **store_options: connection_manager / database passed to create_repositories
    """
    repos = create_repositories(user_id, backend, **store_options)
    settings = SettingsHistoryManager(repos.settings, today=today)
    streak = StreakEvaluator(repos.jobs, settings)

    context = AppContext(
        repositories=repos,
        settings=settings,
        settings_state=SettingsState(settings),
        streak=streak,
        jobs=JobService(repos.jobs, repos.clients, settings, streak),
        clients=ClientService(repos.clients),
        summary=WeeklySummaryService(repos.jobs, settings, streak),
    )
    logger.debug(f"App context ready for user {repos.jobs.user_id} ({type(repos.jobs).__name__})")
    return context
