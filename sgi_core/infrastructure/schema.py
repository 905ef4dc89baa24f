"""
Database schema bootstrap.

Creates the users/refresh token tables, one table per protected entity
kind, the temporary_access table and the versioned area allow-list.
Every statement is idempotent so init_schema() can run on each deploy.
"""

from __future__ import annotations

from loguru import logger

from sgi_core.config import settings
from sgi_core.domain.entities import EntityKind
from sgi_core.infrastructure.postgres import get_db_connection

BASE_DDL = [
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id UUID PRIMARY KEY,
        nombre TEXT NOT NULL DEFAULT '',
        apellido TEXT NOT NULL DEFAULT '',
        cedula TEXT UNIQUE,
        correo TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'user',
        area TEXT NOT NULL,
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        last_login_at TIMESTAMPTZ
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS refresh_tokens (
        token_id UUID PRIMARY KEY,
        user_id UUID NOT NULL REFERENCES users(user_id),
        token_hash TEXT NOT NULL UNIQUE,
        expires_at TIMESTAMPTZ NOT NULL,
        revoked_at TIMESTAMPTZ,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS temporary_access (
        id UUID PRIMARY KEY,
        user_id UUID NOT NULL,
        entity_id UUID NOT NULL,
        entity_type VARCHAR(50) NOT NULL,
        expires_at TIMESTAMPTZ NOT NULL,
        created_at TIMESTAMPTZ NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS temporary_access_lookup
        ON temporary_access (user_id, entity_id, entity_type, expires_at)
    """,
    """
    CREATE TABLE IF NOT EXISTS area_config (
        id SMALLINT PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL DEFAULT 0,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS areas (
        name TEXT PRIMARY KEY,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS areas_name_ci ON areas (LOWER(name))
    """,
]

ENTITY_DDL = """
    CREATE TABLE IF NOT EXISTS {table} (
        id UUID PRIMARY KEY,
        area TEXT NOT NULL,
        user_id UUID,
        data JSONB NOT NULL DEFAULT '{{}}'::jsonb,
        created_at TIMESTAMPTZ NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL
    )
"""

ENTITY_AREA_INDEX = "CREATE INDEX IF NOT EXISTS {table}_area ON {table} (area)"


def schema_statements() -> list[str]:
    """All DDL statements in execution order."""
    statements = list(BASE_DDL)
    for kind in EntityKind:
        statements.append(ENTITY_DDL.format(table=kind.table))
        statements.append(ENTITY_AREA_INDEX.format(table=kind.table))
    return statements


def init_schema(dsn: str | None = None, areas: list[str] | None = None) -> None:
    """Create all tables and seed the area allow-list if it is empty.

    Args:
        dsn: PostgreSQL connection string. Defaults to settings.POSTGRES_DSN.
        areas: Seed areas. Defaults to settings.DEFAULT_AREAS.
    """
    seed = areas if areas is not None else settings.DEFAULT_AREAS

    with get_db_connection(dsn) as conn:
        cursor = conn.cursor()
        for statement in schema_statements():
            cursor.execute(statement)

        cursor.execute(
            "INSERT INTO area_config (id, version) VALUES (1, 0) ON CONFLICT (id) DO NOTHING"
        )
        cursor.execute("SELECT COUNT(*) FROM areas")
        if cursor.fetchone()[0] == 0:
            for name in seed:
                cursor.execute(
                    "INSERT INTO areas (name) VALUES (%s) ON CONFLICT DO NOTHING", (name,)
                )
            logger.info(f"Seeded {len(seed)} areas")
        conn.commit()

    logger.info("Database schema initialized")
