from pydantic import BaseModel, Field

from folio.core.modules.session.models import AuthToken
from folio.core.modules.user.models import UserView


class AuthResult(BaseModel):
    """Signed-in user and the session token issued for them."""

    user: UserView = Field(..., description="Public view of the user")
    token: AuthToken = Field(..., description="Session token for subsequent requests")
