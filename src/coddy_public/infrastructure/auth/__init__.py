"""Authentication infrastructure components.

This module provides password hashing and JWT token services.
"""

from coddy_public.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    TokenError,
    TokenExpiredError,
    TokenService,
)
from coddy_public.infrastructure.auth.password_hasher import (
    HashingError,
    PasswordHasher,
)

__all__ = [
    "HashingError",
    "InvalidTokenError",
    "PasswordHasher",
    "TokenError",
    "TokenExpiredError",
    "TokenService",
]
