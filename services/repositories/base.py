"""Base repository class with common PostgreSQL operations."""

import logging
from typing import Optional, List, Dict, Any, Iterable
from contextlib import contextmanager

from psycopg2 import sql

from services.database import ConnectionManager
from services.repositories.interfaces import require_user

logger = logging.getLogger(__name__)


class BaseRepository:
    """Base class for all PostgreSQL repositories.

    Every repository is scoped to one user; all queries filter on
    ``user_id`` so one user can never read or touch another's rows.
    """

    table: str = ""

    def __init__(self, user_id: Optional[str], connection_manager: Optional[ConnectionManager] = None):
        """Initialize repository.

        Args:
            user_id: Authenticated user. Raises NotAuthenticated when empty.
            connection_manager: ConnectionManager instance. Creates new one if not provided.
        """
        self.user_id = require_user(user_id)
        self._conn_manager = connection_manager or ConnectionManager()

    @contextmanager
    def _cursor(self, commit: bool = True):
        with self._conn_manager.get_cursor(commit=commit) as cursor:
            yield cursor

    @contextmanager
    def _transaction(self):
        """Get connection and cursor for multi-statement transactions.

        Yields:
            Tuple of (connection, cursor)
        """
        with self._conn_manager.transaction() as (conn, cursor):
            yield conn, cursor

    def _execute_one(self, query, params: tuple = None) -> Optional[Dict]:
        """Execute query and return single row or None."""
        with self._cursor(commit=False) as cursor:
            cursor.execute(query, params)
            return cursor.fetchone()

    def _execute_many(self, query, params: tuple = None) -> List[Dict]:
        """Execute query and return all rows."""
        with self._cursor(commit=False) as cursor:
            cursor.execute(query, params)
            return cursor.fetchall() or []

    def _execute_returning(self, query, params: tuple = None) -> Optional[Dict]:
        """Execute INSERT/UPDATE with RETURNING * and return the row.

        Args:
            query: SQL query (should include RETURNING)
            params: Query parameters

        Returns:
            Returned row or None when nothing matched
        """
        with self._cursor(commit=True) as cursor:
            cursor.execute(query, params)
            return cursor.fetchone()

    def _execute_update(self, query, params: tuple = None) -> int:
        """Execute UPDATE/DELETE query.

        Returns:
            Number of affected rows
        """
        with self._cursor(commit=True) as cursor:
            cursor.execute(query, params)
            return cursor.rowcount

    def _insert_query(self, columns: Iterable[str]) -> sql.Composed:
        columns = list(columns)
        return sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
            sql.Identifier(self.table),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() * len(columns)),
        )

    def _update_query(self, columns: Iterable[str]) -> sql.Composed:
        """UPDATE ... SET <columns>, updated_at = now() WHERE id = %s AND user_id = %s."""
        return sql.SQL(
            "UPDATE {} SET {}, updated_at = now() WHERE id = %s AND user_id = %s RETURNING *"
        ).format(
            sql.Identifier(self.table),
            sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(c)) for c in columns
            ),
        )

    def _update_row(self, record_id: str, values: Dict[str, Any]) -> Optional[Dict]:
        if not values:
            return self._execute_one(
                sql.SQL("SELECT * FROM {} WHERE id = %s AND user_id = %s").format(sql.Identifier(self.table)),
                (record_id, self.user_id)
            )
        query = self._update_query(values.keys())
        return self._execute_returning(query, tuple(values.values()) + (record_id, self.user_id))

    def _delete_row(self, record_id: str) -> bool:
        query = sql.SQL("DELETE FROM {} WHERE id = %s AND user_id = %s").format(sql.Identifier(self.table))
        return self._execute_update(query, (record_id, self.user_id)) > 0
