"""API Schemas for request/response validation."""

from coddy_public.infrastructure.api.schemas.auth_schemas import (
    AuthData,
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
    VerifyTokenData,
    VerifyTokenRequest,
    VerifyTokenResponse,
)

__all__ = [
    "AuthData",
    "AuthResponse",
    "ErrorResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserResponse",
    "VerifyTokenData",
    "VerifyTokenRequest",
    "VerifyTokenResponse",
]
