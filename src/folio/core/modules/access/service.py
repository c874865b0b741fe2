from folio.core.core import Service
from folio.core.modules.session.models import AuthToken
from folio.core.modules.user.models import Role, VerifiedUser
from folio.errors import AccessDeniedError


class AccessService(Service):
    async def ensure_authenticated(self, auth_token: AuthToken) -> VerifiedUser:
        """Ensure the token belongs to an existing user."""
        return await self.core.services.auth.verify(auth_token)

    async def ensure_admin(self, auth_token: AuthToken) -> VerifiedUser:
        """Ensure the authenticated user is admin, raise AccessDeniedError if not."""
        user = await self.core.services.auth.verify(auth_token)
        if user.role != Role.ADMIN:
            raise AccessDeniedError("Admin privileges required")
        return user
