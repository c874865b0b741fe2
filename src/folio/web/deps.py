from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from folio.app import App
from folio.core.modules.session.models import AuthToken
from folio.errors import UnauthorizedError

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="BearerAuth")


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> AuthToken:
    """Get auth token from the Authorization Bearer header.

    The token is only extracted here; it is verified by the App call that uses it.
    """
    if credentials and credentials.scheme.lower() == "bearer" and credentials.credentials:
        return AuthToken(credentials.credentials)
    raise UnauthorizedError("Token required")


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AuthTokenDep = Annotated[AuthToken, Depends(get_auth_token)]
