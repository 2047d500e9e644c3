"""Domain entities."""

from coddy_public.domain.entities.auth_result import (
    AuthErrorCode,
    AuthFailure,
    AuthSession,
    LoginResult,
    RegisterResult,
    TokenIdentity,
    VerifyResult,
)
from coddy_public.domain.entities.user import DEFAULT_ROLE, NewUser, PublicUser, User

__all__ = [
    "AuthErrorCode",
    "AuthFailure",
    "AuthSession",
    "DEFAULT_ROLE",
    "LoginResult",
    "NewUser",
    "PublicUser",
    "RegisterResult",
    "TokenIdentity",
    "User",
    "VerifyResult",
]
