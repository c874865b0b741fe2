from uuid import UUID

import asyncpg
import structlog

from folio.core.core import Service
from folio.core.modules.user.models import DEFAULT_ROLE, Role, User
from folio.errors import DuplicateEmailError
from folio.utils import now

logger = structlog.get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS auth_users (
    id UUID PRIMARY KEY,
    email TEXT NOT NULL,
    password_hash TEXT NOT NULL,
    full_name TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL,
    CONSTRAINT auth_users_email_key UNIQUE (email)
);

CREATE TABLE IF NOT EXISTS profiles (
    id UUID PRIMARY KEY REFERENCES auth_users (id),
    full_name TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);

CREATE TABLE IF NOT EXISTS user_roles (
    user_id UUID NOT NULL REFERENCES auth_users (id),
    role TEXT NOT NULL CHECK (role IN ('admin', 'reader')),
    created_at TIMESTAMPTZ NOT NULL
);

CREATE INDEX IF NOT EXISTS user_roles_user_id_idx ON user_roles (user_id);
"""


class UserService(Service):
    """Credential store: users, their profiles and role assignments."""

    async def find_by_email(self, email: str) -> User | None:
        """Get user by exact email, or None."""
        async with self.database.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, email, password_hash, full_name, created_at, updated_at FROM auth_users WHERE email = $1",
                email,
            )
        return User.from_row(row) if row is not None else None

    async def create_user(self, conn: asyncpg.Connection, email: str, password_hash: str, full_name: str) -> User:
        """Insert a user on the given connection.

        Uniqueness of the email is enforced by the table constraint, so a
        concurrent insert of the same email fails here even if both callers
        passed an earlier lookup.
        """
        user = User(email=email, password_hash=password_hash, full_name=full_name)
        try:
            await conn.execute(
                "INSERT INTO auth_users (id, email, password_hash, full_name, created_at, updated_at) "
                "VALUES ($1, $2, $3, $4, $5, $6)",
                user.id,
                user.email,
                user.password_hash,
                user.full_name,
                user.created_at,
                user.updated_at,
            )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateEmailError from e
        return user

    async def create_profile(self, conn: asyncpg.Connection, user_id: UUID, full_name: str) -> None:
        timestamp = now()
        await conn.execute(
            "INSERT INTO profiles (id, full_name, created_at, updated_at) VALUES ($1, $2, $3, $4)",
            user_id,
            full_name,
            timestamp,
            timestamp,
        )

    async def create_default_role(self, conn: asyncpg.Connection, user_id: UUID) -> None:
        """Assign the default role. Errors propagate so the caller's transaction rolls back."""
        await conn.execute(
            "INSERT INTO user_roles (user_id, role, created_at) VALUES ($1, $2, $3)",
            user_id,
            DEFAULT_ROLE.value,
            now(),
        )

    async def find_user_with_role(self, user_id: UUID) -> tuple[User, Role | None] | None:
        """Get user by ID with the latest assigned role.

        Returns None if the user does not exist. The role is None when no
        role row exists; no row is created for it.
        """
        async with self.database.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, email, password_hash, full_name, created_at, updated_at FROM auth_users WHERE id = $1",
                user_id,
            )
            if row is None:
                return None
            role = await conn.fetchval(
                "SELECT role FROM user_roles WHERE user_id = $1 ORDER BY created_at DESC LIMIT 1",
                user_id,
            )
        return User.from_row(row), Role(role) if role is not None else None

    async def on_start(self) -> None:
        """Create tables and constraints if missing."""
        async with self.database.acquire() as conn:
            await conn.execute(SCHEMA)
        logger.debug("user_service_started")
