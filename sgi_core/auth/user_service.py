"""
User service for email/password authentication.

Handles user creation, authentication, and management.
Passwords are hashed using bcrypt with cost factor 12. Every user
belongs to exactly one area from the allow-list and has one role.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import TypedDict

import bcrypt
import psycopg

from sgi_core.config import settings
from sgi_core.domain.auth import Role
from sgi_core.infrastructure.postgres import get_db_connection
from sgi_core.repositories.area_repository import AreaRepository


class UserRecord(TypedDict):
    """User record from database."""

    user_id: str
    nombre: str
    apellido: str
    cedula: str | None
    correo: str
    role: str
    area: str
    created_at: str | None
    last_login_at: str | None
    is_active: bool


_USER_COLUMNS = """
    user_id, nombre, apellido, cedula, correo, role, area,
    created_at, last_login_at, is_active
"""


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _duplicate_message(error: psycopg.errors.UniqueViolation) -> str:
    """Name the users column whose unique constraint was violated."""
    constraint = error.diag.constraint_name or ""
    if "correo" in constraint:
        return "Email already registered"
    return "Cedula already registered"


class UserService:
    """Service for user authentication and management."""

    BCRYPT_COST = 12
    EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")

    def __init__(self, dsn: str | None = None, areas: AreaRepository | None = None):
        """Initialize the user service.

        Args:
            dsn: PostgreSQL connection string. Defaults to settings.POSTGRES_DSN.
            areas: Area allow-list used to validate assignments.
        """
        self.dsn = dsn or settings.POSTGRES_DSN
        self.areas = areas or AreaRepository(dsn=self.dsn)

    def _hash_password(self, password: str) -> str:
        """Hash a password using bcrypt."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(self.BCRYPT_COST)).decode()

    def _verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash."""
        return bcrypt.checkpw(password.encode(), password_hash.encode())

    def _validate_email(self, email: str) -> bool:
        return bool(self.EMAIL_PATTERN.match(email))

    def _validate_password(self, password: str) -> tuple[bool, str | None]:
        """Validate password strength.

        Returns:
            Tuple of (is_valid, error_message).
        """
        if len(password) < 8:
            return False, "Password must be at least 8 characters"
        if not any(c.isupper() for c in password):
            return False, "Password must contain at least one uppercase letter"
        if not any(c.islower() for c in password):
            return False, "Password must contain at least one lowercase letter"
        if not any(c.isdigit() for c in password):
            return False, "Password must contain at least one digit"
        return True, None

    def _normalize_role(self, role: str) -> str:
        try:
            return Role(role.strip().lower()).value
        except ValueError:
            raise ValueError(f"Unknown role: {role}") from None

    def create_user(
        self,
        *,
        correo: str,
        password: str,
        area: str,
        role: str = Role.USER.value,
        nombre: str = "",
        apellido: str = "",
        cedula: str | None = None,
    ) -> UserRecord:
        """Create a new user.

        Args:
            correo: User's email address (login name).
            password: Plain text password (will be hashed).
            area: Home area; must exist in the allow-list.
            role: One of admin, superuser, analyst, user.
            nombre: First name.
            apellido: Last name.
            cedula: National id number, unique when given.

        Returns:
            UserRecord with user details.

        Raises:
            ValueError: If email, password, role or area is invalid.
            RuntimeError: If the email or cedula already exists.
        """
        if not self._validate_email(correo):
            raise ValueError("Invalid email format")

        is_valid, error = self._validate_password(password)
        if not is_valid:
            raise ValueError(error)

        role = self._normalize_role(role)
        if not self.areas.is_valid(area):
            raise ValueError(f"Invalid area: {area}")

        password_hash = self._hash_password(password)
        user_id = str(uuid.uuid4())

        with get_db_connection(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 FROM users WHERE correo = %s", (correo,))
                if cur.fetchone():
                    raise RuntimeError("Email already registered")

                try:
                    cur.execute(
                        """
                        INSERT INTO users (user_id, nombre, apellido, cedula, correo,
                                           password_hash, role, area)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING created_at
                        """,
                        (user_id, nombre, apellido, cedula, correo, password_hash, role, area),
                    )
                except psycopg.errors.UniqueViolation as e:
                    raise RuntimeError(_duplicate_message(e)) from None
                created_at = cur.fetchone()[0]
                conn.commit()

        return UserRecord(
            user_id=user_id,
            nombre=nombre,
            apellido=apellido,
            cedula=cedula,
            correo=correo,
            role=role,
            area=area,
            created_at=created_at.isoformat() if created_at else None,
            last_login_at=None,
            is_active=True,
        )

    def authenticate(self, correo: str, password: str) -> UserRecord | None:
        """Authenticate a user by email and password.

        Returns:
            UserRecord if authentication succeeds, None otherwise.
        """
        with get_db_connection(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {_USER_COLUMNS}, password_hash FROM users WHERE correo = %s",
                    (correo,),
                )
                row = cur.fetchone()

                if not row:
                    return None

                record = self._row_to_record(row[:10])
                password_hash = row[10]

                if not record["is_active"]:
                    return None

                if not self._verify_password(password, password_hash):
                    return None

                cur.execute(
                    "UPDATE users SET last_login_at = NOW() WHERE user_id = %s",
                    (record["user_id"],),
                )
                conn.commit()

        record["last_login_at"] = datetime.now(timezone.utc).isoformat()
        return record

    def get_by_id(self, user_id: str) -> UserRecord | None:
        """Get a user by their ID."""
        if not _is_uuid(user_id):
            return None

        with get_db_connection(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = %s",
                    (user_id,),
                )
                row = cur.fetchone()

        return self._row_to_record(row) if row else None

    def list_users(self, area: str | None = None, role: str | None = None) -> list[UserRecord]:
        """List users, optionally filtered by area and role."""
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE TRUE"
        params: list = []
        if area is not None:
            query += " AND area = %s"
            params.append(area)
        if role is not None:
            query += " AND role = %s"
            params.append(self._normalize_role(role))
        query += " ORDER BY created_at"

        with get_db_connection(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(query, tuple(params))
                rows = cur.fetchall()

        return [self._row_to_record(row) for row in rows]

    def update_password(self, user_id: str, password: str) -> bool:
        """Replace a user's password.

        Returns:
            True if the user exists and was updated.

        Raises:
            ValueError: If the password is weak.
        """
        is_valid, error = self._validate_password(password)
        if not is_valid:
            raise ValueError(error)
        if not _is_uuid(user_id):
            return False

        with get_db_connection(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE users SET password_hash = %s, updated_at = NOW() WHERE user_id = %s",
                    (self._hash_password(password), user_id),
                )
                conn.commit()
                return cur.rowcount > 0

    def deactivate(self, user_id: str) -> bool:
        """Deactivate a user. Deactivated users cannot log in or refresh."""
        if not _is_uuid(user_id):
            return False
        with get_db_connection(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE users SET is_active = FALSE, updated_at = NOW() WHERE user_id = %s",
                    (user_id,),
                )
                conn.commit()
                return cur.rowcount > 0

    def _row_to_record(self, row: tuple) -> UserRecord:
        return UserRecord(
            user_id=str(row[0]),
            nombre=row[1],
            apellido=row[2],
            cedula=row[3],
            correo=row[4],
            role=row[5],
            area=row[6],
            created_at=row[7].isoformat() if row[7] else None,
            last_login_at=row[8].isoformat() if row[8] else None,
            is_active=row[9],
        )
