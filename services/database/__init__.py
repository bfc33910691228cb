"""Database module for PostgreSQL connection management and schema."""

from .connection import get_connection, ConnectionManager
from .schema import init_schema

__all__ = ['get_connection', 'ConnectionManager', 'init_schema']
