"""
PostgreSQL connection helper for the SGI records service.

This module provides a simple connection function for PostgreSQL access.
Uses psycopg for the connection.
"""

import psycopg
from loguru import logger

from sgi_core.config import settings
from sgi_core.runtime.errors import StorageUnavailableError


def get_db_connection(dsn: str | None = None) -> psycopg.Connection:
    """
    Get a PostgreSQL database connection.

    Returns a context manager that can be used with 'with' statement.
    The connection is automatically closed when the context exits.

    Usage:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT area FROM persona WHERE id = %s", (entity_id,))

    Args:
        dsn: Connection string. Defaults to settings.POSTGRES_DSN.

    Returns:
        psycopg.Connection: A PostgreSQL connection.

    Raises:
        StorageUnavailableError: If the database refuses the connection.
    """
    try:
        conn = psycopg.connect(dsn or settings.POSTGRES_DSN)
        logger.debug("Connected to PostgreSQL")
        return conn
    except psycopg.OperationalError as e:
        logger.error(f"Failed to connect to PostgreSQL: {e}")
        raise StorageUnavailableError(message_debug=str(e), cause=e) from e
