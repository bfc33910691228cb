"""PostgreSQL schema for clients, jobs and settings history.

Tables:
- clients: contacts owned by a user
- jobs: services performed (client_id is a weak reference, no foreign key,
  so deleting a client leaves its jobs untouched)
- settings_history: time-ranged commission settings,
  [effective_from, effective_to) with effective_to NULL for the open record
"""

import logging
from typing import List

from services.database.connection import ConnectionManager

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SCHEMA_STATEMENTS: List[str] = [
    "CREATE EXTENSION IF NOT EXISTS pgcrypto",
    """
    CREATE TABLE IF NOT EXISTS clients (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        phone TEXT,
        notes TEXT,
        status TEXT NOT NULL DEFAULT 'good'
            CHECK (status IN ('good', 'warning', 'bad')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_clients_user ON clients (user_id, name)",
    """
    CREATE TABLE IF NOT EXISTS jobs (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id TEXT NOT NULL,
        client_id UUID,
        amount NUMERIC(14, 2) NOT NULL CHECK (amount >= 0),
        tip_amount NUMERIC(14, 2) NOT NULL DEFAULT 0 CHECK (tip_amount >= 0),
        date DATE NOT NULL,
        description TEXT,
        photos TEXT[],
        rating SMALLINT CHECK (rating BETWEEN 1 AND 5),
        tags TEXT[] NOT NULL DEFAULT '{}',
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_jobs_user_date ON jobs (user_id, date)",
    """
    CREATE TABLE IF NOT EXISTS settings_history (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id TEXT NOT NULL,
        weekly_target NUMERIC(14, 2) NOT NULL,
        base_commission_rate NUMERIC(6, 4) NOT NULL
            CHECK (base_commission_rate BETWEEN 0 AND 1),
        streak_bonus_rate NUMERIC(6, 4) NOT NULL
            CHECK (streak_bonus_rate BETWEEN 0 AND 1),
        streak_bonus_threshold NUMERIC(14, 2) NOT NULL DEFAULT 0,
        fixed_bonus_tiers JSONB NOT NULL DEFAULT '[]'::jsonb,
        streak_threshold_met BOOLEAN NOT NULL DEFAULT FALSE,
        current_shift TEXT CHECK (current_shift IN ('morning', 'afternoon')),
        shift_pattern_start DATE,
        effective_from DATE NOT NULL,
        effective_to DATE CHECK (effective_to IS NULL OR effective_to > effective_from),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_settings_history_user_from
        ON settings_history (user_id, effective_from)
    """,
    # At most one open record per user
    """
    CREATE UNIQUE INDEX IF NOT EXISTS uq_settings_history_open
        ON settings_history (user_id) WHERE effective_to IS NULL
    """,
]


def init_schema(manager: ConnectionManager) -> None:
    """Create all tables and indexes if they don't exist.

    Args:
        manager: ConnectionManager for the target database
    """
    with manager.transaction() as (conn, cursor):
        for statement in SCHEMA_STATEMENTS:
            cursor.execute(statement)

    logger.info(f"Schema v{SCHEMA_VERSION} initialized ({len(SCHEMA_STATEMENTS)} statements)")
