import logging

from fastapi import Request

from gametracker.core.errors import AuthError, ErrorCode, InvalidTokenError
from gametracker.core.security import Identity, TokenService


logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthGate:
    """Turns an ``Authorization`` header into an :class:`Identity` or rejects it."""

    def __init__(self, tokens: TokenService):
        self.tokens = tokens

    @staticmethod
    def extract_token(authorization: str) -> str:
        # prefix is case-sensitive; anything else is taken as the raw token
        if len(authorization) > len(BEARER_PREFIX) and authorization.startswith(BEARER_PREFIX):
            return authorization[len(BEARER_PREFIX):]
        return authorization

    def check(self, authorization: str | None) -> Identity:
        if not authorization:
            raise AuthError("Authorization token required", ErrorCode.MISSING_TOKEN)

        token = self.extract_token(authorization)
        try:
            claims = self.tokens.validate(token)
        except InvalidTokenError as e:
            logger.info("Rejected token: %s", e.reason.value)
            raise

        identity = self.tokens.extract_identity(claims)
        return identity


async def require_identity(request: Request) -> Identity:
    """FastAPI dependency for protected routes."""
    gate: AuthGate = request.app.state.auth_gate
    identity = gate.check(request.headers.get("Authorization"))
    request.state.user_id = identity.user_id
    request.state.username = identity.username
    return identity
