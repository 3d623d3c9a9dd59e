"""Error taxonomy shared by the services and the HTTP layer.

Every failure the services raise is a :class:`GameTrackerError`. The
``kind`` decides the HTTP status, the ``code`` lets callers branch without
string matching, and ``message`` is safe to show to a client.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"


class ErrorCode(str, Enum):
    INVALID_INPUT = "InvalidInput"
    ALREADY_EXISTS = "AlreadyExists"
    LOOKUP_FAILED = "LookupFailed"
    HASHING_FAILED = "HashingFailed"
    PERSIST_FAILED = "PersistFailed"
    NOT_FOUND = "NotFound"
    BAD_CREDENTIALS = "BadCredentials"
    TOKEN_ISSUANCE_FAILED = "TokenIssuanceFailed"
    INVALID_TOKEN = "InvalidToken"
    MALFORMED_CLAIMS = "MalformedClaims"
    MISSING_TOKEN = "MissingToken"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,
    ErrorKind.PERSISTENCE: 500,
    ErrorKind.INTERNAL: 500,
}


class GameTrackerError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL
    default_code: ErrorCode = ErrorCode.PERSIST_FAILED
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, code: ErrorCode | None = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"


class ValidationError(GameTrackerError):
    kind = ErrorKind.VALIDATION
    default_code = ErrorCode.INVALID_INPUT
    default_message = "Invalid data"


class AuthError(GameTrackerError):
    kind = ErrorKind.AUTH
    default_code = ErrorCode.BAD_CREDENTIALS
    default_message = "Invalid credentials"


class TokenFailure(str, Enum):
    """Why a token was rejected. Logged, never returned to the client."""

    MALFORMED = "malformed"
    ALGORITHM = "algorithm"
    SIGNATURE = "signature"
    EXPIRED = "expired"


class InvalidTokenError(AuthError):
    default_code = ErrorCode.INVALID_TOKEN
    default_message = "Invalid token"

    def __init__(self, reason: TokenFailure, message: str | None = None):
        self.reason = reason
        super().__init__(message)


class NotFoundError(GameTrackerError):
    kind = ErrorKind.NOT_FOUND
    default_code = ErrorCode.NOT_FOUND
    default_message = "Not found"


class ConflictError(GameTrackerError):
    kind = ErrorKind.CONFLICT
    default_code = ErrorCode.ALREADY_EXISTS
    default_message = "Username or email already exists"


class PersistenceError(GameTrackerError):
    kind = ErrorKind.PERSISTENCE
    default_code = ErrorCode.PERSIST_FAILED
    default_message = "Database error"


class HashingError(GameTrackerError):
    kind = ErrorKind.INTERNAL
    default_code = ErrorCode.HASHING_FAILED
    default_message = "Error hashing password"
