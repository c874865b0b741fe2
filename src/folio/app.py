from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from folio.config import Config
from folio.core.core import Core
from folio.core.db import Database
from folio.core.modules.auth.models import AuthResult
from folio.core.modules.session.models import AuthToken
from folio.core.modules.user.models import VerifiedUser


class App:
    """Facade for all application operations, validates permissions before delegating to Core."""

    def __init__(self, config: Config, database: Database | None = None) -> None:
        self._core = Core(config, database)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthResult:
        """Register a new reader account and start a session."""
        return await self._core.services.auth.sign_up(email, password, full_name)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Authenticate user and issue a session token."""
        return await self._core.services.auth.sign_in(email, password)

    async def verify_token(self, auth_token: AuthToken) -> VerifiedUser:
        """Resolve a session token to the user and their current role."""
        return await self._core.services.auth.verify(auth_token)

    async def get_current_user(self, auth_token: AuthToken) -> VerifiedUser:
        """Get current authenticated user profile."""
        return await self._core.services.access.ensure_authenticated(auth_token)

    async def get_admin_user(self, auth_token: AuthToken) -> VerifiedUser:
        """Get current user, requiring the admin role."""
        return await self._core.services.access.ensure_admin(auth_token)
