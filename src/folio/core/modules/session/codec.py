"""Signed, self-contained session tokens.

Tokens are HS256 JWTs carrying ``userId``, ``email``, ``iat`` and ``exp``.
Nothing is stored server side: a token is valid when its signature checks out
under the secret and the current time is before ``exp``.
"""

from datetime import datetime, timedelta
from uuid import UUID

import jwt
from pydantic import ValidationError as PydanticValidationError

from folio.core.modules.session.models import AuthToken, TokenPayload
from folio.utils import from_epoch, now, to_epoch


class TokenError(Exception):
    """Base class for token verification failures."""


class MalformedTokenError(TokenError):
    """Token cannot be parsed or lacks required claims."""


class InvalidSignatureError(TokenError):
    """Token signature does not match the secret."""


class TokenExpiredError(TokenError):
    """Token expiry time has passed."""


class TokenCodec:
    algorithm = "HS256"

    def __init__(self, secret: str, ttl: timedelta = timedelta(days=7)) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        if ttl <= timedelta(0):
            raise ValueError("Token TTL must be positive")
        self._secret = secret
        self.ttl = ttl

    def mint(self, user_id: UUID, email: str, issued_at: datetime | None = None) -> AuthToken:
        """Create a token for the user, valid for ``ttl`` from ``issued_at`` (default: now)."""
        issued_at = issued_at or now()
        claims = {
            "userId": str(user_id),
            "email": email,
            "iat": to_epoch(issued_at),
            "exp": to_epoch(issued_at + self.ttl),
        }
        return AuthToken(jwt.encode(claims, self._secret, algorithm=self.algorithm))

    def verify(self, token: str) -> TokenPayload:
        """Check signature and expiry and return the payload.

        Raises:
            InvalidSignatureError: Signed with another secret or tampered with
            TokenExpiredError: Current time is at or past expiry
            MalformedTokenError: Not a token, or required claims missing
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError("Token signature mismatch") from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Malformed token: {e}") from e

        try:
            return TokenPayload(
                user_id=claims.get("userId"),
                email=claims.get("email"),
                issued_at=from_epoch(claims["iat"]),
                expires_at=from_epoch(claims["exp"]),
            )
        except PydanticValidationError as e:
            raise MalformedTokenError("Token payload is incomplete") from e
