"""Database connection management.

Connection-per-unit-of-work against PostgreSQL: every cursor or
transaction opens its own connection and closes it on exit.
"""

import logging
from contextlib import contextmanager
from typing import Optional, Generator

import psycopg2
from psycopg2 import extras

from config import Config

logger = logging.getLogger(__name__)


def get_connection(**params):
    """Get PostgreSQL connection with RealDictCursor.

    Args:
        **params: Connection parameters (host, database, user, password, port).
                 Uses Config.get_db_params() when empty.

    Returns:
        psycopg2 connection with RealDictCursor factory
    """
    if not params:
        params = Config.get_db_params()

    return psycopg2.connect(
        **params,
        cursor_factory=extras.RealDictCursor
    )


class ConnectionManager:
    """Hands out cursors and transactions.

    Usage:
        manager = ConnectionManager()

        with manager.get_cursor(commit=False) as cursor:
            cursor.execute("SELECT * FROM jobs WHERE user_id = %s", (user_id,))
            rows = cursor.fetchall()

        with manager.transaction() as (conn, cursor):
            cursor.execute("UPDATE settings_history ...")
            cursor.execute("INSERT INTO settings_history ...")
            # committed when the block exits without an exception
    """

    def __init__(self, db_params: Optional[dict] = None):
        """Initialize connection manager.

        Args:
            db_params: Database connection parameters. Uses Config if not provided.
        """
        self.db_params = db_params or Config.get_db_params()

    def get_connection(self):
        return get_connection(**self.db_params)

    @contextmanager
    def get_cursor(self, commit: bool = True) -> Generator:
        """Get database cursor with automatic connection management.

        Args:
            commit: Whether to commit on successful completion

        Yields:
            psycopg2 cursor (RealDictCursor)
        """
        conn = self.get_connection()
        cursor = conn.cursor()
        try:
            yield cursor
            if commit:
                conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    @contextmanager
    def transaction(self) -> Generator:
        """Run several statements atomically.

        Commits when the block completes, rolls back on any exception
        (including errors raised by the caller to abort the write).

        Yields:
            Tuple of (connection, cursor)
        """
        conn = self.get_connection()
        cursor = conn.cursor()
        try:
            yield conn, cursor
            conn.commit()
        except Exception:
            conn.rollback()
            logger.debug("Transaction rolled back")
            raise
        finally:
            cursor.close()
            conn.close()
