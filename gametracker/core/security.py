"""Password hashing and session tokens.

:class:`PasswordHasher` wraps bcrypt with a fixed cost factor.
:class:`TokenService` issues and validates HS256 JWTs via :mod:`jose`; the
signing algorithm is pinned, so a token whose header asserts anything else
(``none`` included) is rejected before its signature is even looked at.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import bcrypt
from jose import jwk, jwt
from jose.exceptions import JWTError
from jose.utils import base64url_decode

from gametracker.core.errors import (
    AuthError,
    ErrorCode,
    GameTrackerError,
    HashingError,
    InvalidTokenError,
    TokenFailure,
)


logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 12
DEFAULT_TOKEN_TTL = timedelta(days=7)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasswordHasher:
    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        try:
            return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()
        except Exception as e:
            logger.error("Password hashing failed: %s", type(e).__name__)
            raise HashingError() from e

    def verify(self, password: str, hashed_password: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), hashed_password.encode())
        except ValueError:
            # malformed stored hash, or a password bcrypt refuses to process
            return False


@dataclass(frozen=True)
class Identity:
    user_id: int
    username: str


class TokenService:
    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not algorithm.startswith("HS"):
            raise ValueError(f"TokenService only supports HMAC algorithms, got {algorithm!r}")
        self._secret = secret
        self._key = jwk.construct(secret, algorithm)
        self.algorithm = algorithm
        self.ttl = ttl
        self._clock = clock

    def issue(self, user_id: int, username: str) -> str:
        now = self._clock()
        claims = {
            "user_id": user_id,
            "username": username,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        try:
            return jwt.encode(claims, self._secret, algorithm=self.algorithm)
        except JWTError as e:
            logger.error("Token issuance failed for user_id=%s: %s", user_id, e)
            raise GameTrackerError("Error generating token", ErrorCode.TOKEN_ISSUANCE_FAILED) from e

    def validate(self, token: str) -> dict[str, Any]:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise InvalidTokenError(TokenFailure.MALFORMED) from e

        if header.get("alg") != self.algorithm:
            raise InvalidTokenError(TokenFailure.ALGORITHM)

        signing_input, _, crypto_segment = token.rpartition(".")
        try:
            signature = base64url_decode(crypto_segment.encode())
        except ValueError as e:
            raise InvalidTokenError(TokenFailure.MALFORMED) from e
        if not self._key.verify(signing_input.encode(), signature):
            raise InvalidTokenError(TokenFailure.SIGNATURE)

        # signature checked above; jose only rejects claims from here on
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidTokenError(TokenFailure.MALFORMED) from e

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise InvalidTokenError(TokenFailure.MALFORMED)
        if not self._clock().timestamp() < exp:
            raise InvalidTokenError(TokenFailure.EXPIRED)

        return claims

    @staticmethod
    def extract_identity(claims: dict[str, Any]) -> Identity:
        user_id = claims.get("user_id")
        username = claims.get("username")
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise AuthError("Invalid token", ErrorCode.MALFORMED_CLAIMS)
        if not isinstance(username, str):
            raise AuthError("Invalid token", ErrorCode.MALFORMED_CLAIMS)
        return Identity(user_id=user_id, username=username)
