"""Outcomes of the authentication use cases.

Every use case returns either a success value or an ``AuthFailure`` carrying
one member of the error taxonomy, so callers branch on the result type
instead of catching exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from coddy_public.domain.entities.user import PublicUser


class AuthErrorCode(str, Enum):
    """Failure taxonomy shared by login, registration and token checks."""

    INVALID_INPUT = "invalid_input"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNAUTHORIZED = "unauthorized"
    ACCOUNT_DISABLED = "account_disabled"
    CONFLICT = "conflict"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL_ERROR = "internal_error"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    AuthErrorCode.INVALID_INPUT: 400,
    AuthErrorCode.INVALID_CREDENTIALS: 401,
    AuthErrorCode.UNAUTHORIZED: 401,
    AuthErrorCode.ACCOUNT_DISABLED: 403,
    AuthErrorCode.CONFLICT: 409,
    AuthErrorCode.SERVICE_UNAVAILABLE: 503,
    AuthErrorCode.INTERNAL_ERROR: 500,
}


@dataclass(frozen=True)
class AuthFailure:
    """A rejected request.

    Attributes:
        code: Taxonomy member, determines the HTTP status.
        message: Client-facing message.
        detail: Internal detail (exception text), only shown in development.
    """

    code: AuthErrorCode
    message: str
    detail: str | None = None

    @property
    def status_code(self) -> int:
        return self.code.status_code


@dataclass(frozen=True)
class AuthSession:
    """A freshly issued token and the user it was issued to."""

    token: str
    user: PublicUser


@dataclass(frozen=True)
class TokenIdentity:
    """Verified claims of a presented token."""

    claims: dict[str, Any]


LoginResult = Union[AuthSession, AuthFailure]
RegisterResult = Union[AuthSession, AuthFailure]
VerifyResult = Union[TokenIdentity, AuthFailure]
