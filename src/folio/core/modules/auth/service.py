import asyncio

import bcrypt
import structlog

from folio.core.core import Service
from folio.core.modules.auth.models import AuthResult
from folio.core.modules.session.codec import TokenError
from folio.core.modules.user.models import DEFAULT_ROLE, User, UserView, VerifiedUser
from folio.core.modules.user.validators import validate_password, validate_required
from folio.errors import (
    DuplicateEmailError,
    InternalError,
    InvalidCredentialsError,
    StoreTimeoutError,
    UnauthorizedError,
)

logger = structlog.get_logger(__name__)


class AuthService(Service):
    """Sign up, sign in and token verification.

    The only place plaintext passwords are handled.
    """

    _dummy_hash: str | None = None

    async def on_start(self) -> None:
        self._dummy_hash = await asyncio.to_thread(self._hash_password, "folio-dummy-password")

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthResult:
        """Register a user with the default role and return a session token.

        The user, profile and role rows are written in one transaction.
        """
        validate_required(email=email, password=password, full_name=full_name)
        validate_password(password)

        if await self.core.services.user.find_by_email(email) is not None:
            raise DuplicateEmailError

        password_hash = await asyncio.to_thread(self._hash_password, password)

        users = self.core.services.user
        try:
            async with self.database.transaction() as conn:
                user = await users.create_user(conn, email, password_hash, full_name)
                await users.create_profile(conn, user.id, full_name)
                await users.create_default_role(conn, user.id)
        except DuplicateEmailError:
            logger.info("signup_duplicate_email", email=email)
            raise
        except StoreTimeoutError:
            raise
        except Exception as e:
            logger.exception("signup_failed", email=email)
            raise InternalError("Sign up failed") from e

        logger.info("user_signed_up", user_id=str(user.id))
        return self._issue(user)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Check credentials and return a session token.

        Unknown email and wrong password raise the same error.
        """
        validate_required(email=email, password=password)
        validate_password(password)

        user = await self.core.services.user.find_by_email(email)
        if user is None:
            # Match the timing of a wrong-password check
            await asyncio.to_thread(self._check_password, password, self._get_dummy_hash())
            raise InvalidCredentialsError

        if not await asyncio.to_thread(self._check_password, password, user.password_hash):
            raise InvalidCredentialsError

        return self._issue(user)

    async def verify(self, auth_token: str) -> VerifiedUser:
        """Resolve a token to the current user and role.

        The role is read from the store on every call, not taken from the token.
        """
        if not auth_token:
            raise UnauthorizedError("Token required")

        try:
            payload = self.core.services.session.decode_token(auth_token)
        except TokenError as e:
            logger.debug("token_rejected", reason=type(e).__name__)
            raise UnauthorizedError from e

        found = await self.core.services.user.find_user_with_role(payload.user_id)
        if found is None:
            raise UnauthorizedError("User not found")

        user, role = found
        # No role row means the user has the default role
        return VerifiedUser.from_domain_with_role(user, role or DEFAULT_ROLE)

    def _issue(self, user: User) -> AuthResult:
        token = self.core.services.session.create_token(user)
        return AuthResult(user=UserView.from_domain(user), token=token)

    def _hash_password(self, password: str) -> str:
        rounds = self.core.config.password_hash_rounds
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")

    @staticmethod
    def _check_password(password: str, password_hash: str) -> bool:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self._hash_password("folio-dummy-password")
        return self._dummy_hash
