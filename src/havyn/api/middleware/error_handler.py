"""
Error Handler Middleware

Tags every request with a correlation ID and turns anything an
endpoint failed to handle into a sanitized 500. The background alert
flow never passes through here; it has its own error handling.
"""

from uuid import uuid4

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from havyn.config.logging_config import bind_correlation_id, clear_context, get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def internal_error_response(correlation_id: str) -> JSONResponse:
    """Generic 500 body; never includes exception text."""
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "correlation_id": correlation_id,
            "message": "An unexpected error occurred. Please try again.",
        },
        headers={CORRELATION_HEADER: correlation_id},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Correlation IDs and last-resort error handling.

    A client-supplied X-Correlation-ID is reused; otherwise a UUID is
    minted. The ID is bound into the logging context for the request
    and echoed on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid4())
        bind_correlation_id(correlation_id)

        try:
            response = await call_next(request)
        except Exception as e:
            # Request bodies may hold crisis text; log the type only
            logger.error(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error_type=type(e).__name__,
            )
            return internal_error_response(correlation_id)
        finally:
            clear_context()

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
