"""Error envelope helpers.

Every error leaves the API as ``{"status": "error", "code": ..., "message": ...}``.
"""

from typing import Any

from fastapi.responses import JSONResponse

from coddy_public.core.config import Settings
from coddy_public.domain.entities import AuthErrorCode, AuthFailure


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """Build an error envelope.

    Args:
        status_code: HTTP status code, repeated in the body as ``code``.
        message: Human-readable error message.
        **extra: Additional top-level fields.
    """
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "code": status_code, "message": message, **extra},
    )


def failure_response(failure: AuthFailure, settings: Settings) -> JSONResponse:
    """Render an auth flow failure.

    Internal error details are only included in development.
    """
    extra: dict[str, Any] = {}
    if failure.code is AuthErrorCode.INTERNAL_ERROR and settings.is_development and failure.detail:
        extra["detail"] = failure.detail
    return error_response(failure.status_code, failure.message, **extra)
