"""Client-side session handling for the storefront.

The client keeps the token issued at sign up / sign in, verifies it once when
loaded, and forgets it on sign out. There is no refresh: once the token
expires the user has to sign in again.
"""

import httpx
import structlog
from pydantic import BaseModel

from folio.client.storage import FileTokenStorage

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
SESSION_EXPIRED_MESSAGE = "Session expired, please sign in again"
NETWORK_ERROR_MESSAGE = "Network error occurred"


class SessionUser(BaseModel):
    """User as seen by the client. ``role`` is only known after verification."""

    id: str
    email: str
    full_name: str
    role: str | None = None


class SessionError(Exception):
    """Sign up / sign in failure with a message safe to show to the user."""


class SessionClient:
    def __init__(self, http: httpx.Client, storage: FileTokenStorage) -> None:
        self._http = http
        self._storage = storage
        self.user: SessionUser | None = None

    @property
    def token(self) -> str | None:
        return self._storage.load()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def load(self) -> SessionUser | None:
        """Verify the stored token once and restore the user.

        On any failure the stored token is discarded and the client is left
        signed out.
        """
        token = self._storage.load()
        if token is None:
            return None

        try:
            response = self._http.post("/api/auth/verify", json={"token": token})
        except httpx.HTTPError as e:
            logger.warning("token_verification_failed", error=str(e))
            self._discard()
            return None

        if response.status_code != 200:
            logger.info("stored_token_rejected", status_code=response.status_code)
            self._discard()
            return None

        self.user = SessionUser.model_validate(response.json())
        return self.user

    def sign_up(self, email: str, password: str, full_name: str) -> SessionUser:
        return self._authenticate(
            "/api/auth/signup", {"email": email, "password": password, "fullName": full_name}, "Signup failed"
        )

    def sign_in(self, email: str, password: str) -> SessionUser:
        return self._authenticate("/api/auth/signin", {"email": email, "password": password}, "Signin failed")

    def sign_out(self) -> None:
        """Forget the token locally. The server keeps accepting it until it expires."""
        self._discard()

    def auth_headers(self) -> dict[str, str]:
        """Headers for calls to protected endpoints."""
        token = self._storage.load()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def get_profile(self) -> SessionUser:
        """Fetch the current profile; a rejected token signs the client out."""
        try:
            response = self._http.get("/api/profile", headers=self.auth_headers())
        except httpx.HTTPError as e:
            raise SessionError(NETWORK_ERROR_MESSAGE) from e

        if response.status_code == 401:
            self._discard()
            raise SessionError(SESSION_EXPIRED_MESSAGE)
        if response.status_code != 200:
            raise SessionError(_error_message(response, "Request failed"))

        self.user = SessionUser.model_validate(response.json())
        return self.user

    def _authenticate(self, path: str, payload: dict[str, str], fallback: str) -> SessionUser:
        try:
            response = self._http.post(path, json=payload)
        except httpx.HTTPError as e:
            raise SessionError(NETWORK_ERROR_MESSAGE) from e

        if response.status_code == 401:
            raise SessionError(INVALID_CREDENTIALS_MESSAGE)
        if response.status_code != 200:
            raise SessionError(_error_message(response, fallback))

        data = response.json()
        self._storage.save(data["token"])
        self.user = SessionUser.model_validate(data["user"])
        return self.user

    def _discard(self) -> None:
        self._storage.clear()
        self.user = None


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Message from the standard error body, or ``fallback`` for 5xx and unparseable bodies."""
    if response.status_code >= 500:
        return fallback
    try:
        message = response.json().get("message")
    except ValueError:
        return fallback
    return message if isinstance(message, str) and message else fallback
