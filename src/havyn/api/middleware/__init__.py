"""API middleware."""

from havyn.api.middleware.error_handler import ErrorHandlerMiddleware

__all__ = ["ErrorHandlerMiddleware"]
