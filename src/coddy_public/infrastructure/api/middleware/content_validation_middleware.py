"""Request content validation middleware.

Requests that carry a body (POST, PUT) must be JSON and no larger than the
configured limit. The limit is checked against the Content-Length header when
one is sent and against the bytes actually received otherwise, so chunked
uploads cannot slip past it.
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from coddy_public.core.config import get_settings
from coddy_public.core.logging import get_logger
from coddy_public.infrastructure.api.responses import error_response

logger = get_logger(__name__)

BODY_METHODS = frozenset({"POST", "PUT"})


class ContentValidationMiddleware(BaseHTTPMiddleware):
    """Reject non-JSON and oversized request bodies."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method not in BODY_METHODS:
            return await call_next(request)

        content_type = request.headers.get("content-type", "")
        if "application/json" not in content_type.lower():
            return error_response(400, "Content-Type must be application/json")

        max_bytes = get_settings().max_body_bytes
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                return error_response(400, "Invalid Content-Length header")
            if declared > max_bytes:
                return self._too_large(request, declared, max_bytes)

        received = 0
        chunks: list[bytes] = []
        async for chunk in request.stream():
            received += len(chunk)
            if received > max_bytes:
                return self._too_large(request, received, max_bytes)
            chunks.append(chunk)

        # Starlette replays a cached body to the endpoint
        request._body = b"".join(chunks)
        return await call_next(request)

    @staticmethod
    def _too_large(request: Request, size: int, limit: int) -> Response:
        logger.warning(
            "Request body too large",
            path=request.url.path,
            size=size,
            limit=limit,
        )
        return error_response(413, "Request body too large")
