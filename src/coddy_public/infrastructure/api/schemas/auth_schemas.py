"""Pydantic schemas for authentication endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request body for login."""

    email: str = Field(..., min_length=1, description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class RegisterRequest(BaseModel):
    """Request body for registration."""

    email: str = Field(..., min_length=1, description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")
    name: str = Field(..., min_length=1, description="Display name")


class VerifyTokenRequest(BaseModel):
    """Request body for token verification."""

    token: str | None = Field(None, description="Token to verify")


class UserResponse(BaseModel):
    """Public user information in auth responses."""

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="User's email address")
    name: str = Field(..., description="Display name")
    role: str = Field(..., description="User's role name")

    model_config = {"from_attributes": True}


class AuthData(BaseModel):
    token: str = Field(..., description="JWT access token")
    user: UserResponse


class AuthResponse(BaseModel):
    """Response for successful authentication (login/register)."""

    status: Literal["success"] = "success"
    message: str | None = Field(None, description="Optional human-readable message")
    data: AuthData


class VerifyTokenData(BaseModel):
    valid: bool = True
    user: dict[str, Any] = Field(..., description="Verified token claims")


class VerifyTokenResponse(BaseModel):
    """Response for a valid token."""

    status: Literal["success"] = "success"
    data: VerifyTokenData


class ErrorResponse(BaseModel):
    """Error envelope returned by every endpoint."""

    status: Literal["error"] = "error"
    code: int = Field(..., description="HTTP status code")
    message: str = Field(..., description="Human-readable error message")
