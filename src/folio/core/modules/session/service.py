from folio.core.core import Service
from folio.core.modules.session.codec import TokenCodec
from folio.core.modules.session.models import AuthToken, TokenPayload
from folio.core.modules.user.models import User


class SessionService(Service):
    """Issues and decodes session tokens with the configured secret and lifetime."""

    _codec: TokenCodec | None = None

    @property
    def codec(self) -> TokenCodec:
        if self._codec is None:
            config = self.core.config
            self._codec = TokenCodec(config.token_secret, config.token_ttl)
        return self._codec

    async def on_start(self) -> None:
        """Build the codec early so a bad secret or TTL fails startup."""
        _ = self.codec

    def create_token(self, user: User) -> AuthToken:
        return self.codec.mint(user.id, user.email)

    def decode_token(self, auth_token: str) -> TokenPayload:
        """Raises a TokenError subclass if the token is not acceptable."""
        return self.codec.verify(auth_token)
