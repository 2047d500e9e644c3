"""Authentication API routes.

Provides endpoints for login, registration and token verification. The
handlers only translate between HTTP and the auth flow; every decision is
made in ``AuthService``.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from coddy_public.core.config import Settings, get_settings
from coddy_public.domain.entities import AuthFailure, AuthSession
from coddy_public.domain.services import AuthService
from coddy_public.infrastructure.api.dependencies import get_auth_service
from coddy_public.infrastructure.api.responses import failure_response
from coddy_public.infrastructure.api.schemas import (
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

router = APIRouter()

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def _auth_response(session: AuthSession, message: str | None = None) -> AuthResponse:
    return AuthResponse(
        message=message,
        data=AuthData(
            token=session.token,
            user=UserResponse(
                id=session.user.id,
                email=session.user.email,
                name=session.user.name,
                role=session.user.role,
            ),
        ),
    )


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=AuthResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account disabled"},
        503: {"model": ErrorResponse, "description": "User store not configured"},
    },
)
async def login(
    request: LoginRequest,
    auth_service: AuthServiceDep,
    settings: SettingsDep,
) -> AuthResponse | JSONResponse:
    """Authenticate a user and return a token.

    Unknown emails and wrong passwords produce the same 401 response after
    the same minimum delay.
    """
    result = await auth_service.login(request.email, request.password)
    if isinstance(result, AuthFailure):
        return failure_response(result, settings)
    return _auth_response(result)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        503: {"model": ErrorResponse, "description": "User store not configured"},
    },
)
async def register(
    request: RegisterRequest,
    auth_service: AuthServiceDep,
    settings: SettingsDep,
) -> AuthResponse | JSONResponse:
    """Register a new student account and return a token."""
    result = await auth_service.register(request.email, request.password, request.name)
    if isinstance(result, AuthFailure):
        return failure_response(result, settings)
    return _auth_response(result, message="Account created successfully")


@router.post(
    "/verify-token",
    status_code=status.HTTP_200_OK,
    response_model=VerifyTokenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Token missing"},
        401: {"model": ErrorResponse, "description": "Invalid or expired token"},
    },
)
async def verify_token(
    request: VerifyTokenRequest,
    auth_service: AuthServiceDep,
    settings: SettingsDep,
) -> VerifyTokenResponse | JSONResponse:
    """Check whether a token is valid and return its claims."""
    result = await auth_service.verify_token(request.token)
    if isinstance(result, AuthFailure):
        return failure_response(result, settings)
    return VerifyTokenResponse(data=VerifyTokenData(valid=True, user=result.claims))
