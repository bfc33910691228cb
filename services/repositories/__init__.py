"""Repositories module for data access layer."""

from .interfaces import JobStore, ClientStore, SettingsHistoryStore
from .base import BaseRepository
from .job_repo import JobRepository
from .client_repo import ClientRepository
from .settings_history_repo import SettingsHistoryRepository
from .memory import (
    InMemoryDatabase,
    InMemoryJobRepository,
    InMemoryClientRepository,
    InMemorySettingsHistoryRepository,
)
from .factory import Repositories, create_repositories

__all__ = [
    'JobStore',
    'ClientStore',
    'SettingsHistoryStore',
    'BaseRepository',
    'JobRepository',
    'ClientRepository',
    'SettingsHistoryRepository',
    'InMemoryDatabase',
    'InMemoryJobRepository',
    'InMemoryClientRepository',
    'InMemorySettingsHistoryRepository',
    'Repositories',
    'create_repositories',
]
