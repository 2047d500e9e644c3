"""HTTP middleware."""

from coddy_public.infrastructure.api.middleware.content_validation_middleware import (
    ContentValidationMiddleware,
)
from coddy_public.infrastructure.api.middleware.security_headers_middleware import (
    SecurityHeadersMiddleware,
)

__all__ = ["ContentValidationMiddleware", "SecurityHeadersMiddleware"]
