"""Error handling middleware."""

from fastapi import HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_504_GATEWAY_TIMEOUT,
)
from starlette.types import ASGIApp

from content_core.content.errors import (
    ContentError,
    ContractViolationError,
    FetchTimeoutError,
    RenderError,
    UnresolvedItemsError,
)
from content_core.core.logging import get_logger

logger = get_logger(__name__)

# Checked in order, so subclasses come before their bases
ErrorMapping = list[tuple[type[Exception], int]]


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that turns content failures into consistent JSON errors."""

    def __init__(self, app: ASGIApp) -> None:
        """
        Initialize middleware with error mappings.

        Args:
        ----
            app: The ASGI application
        """
        super().__init__(app)
        self.error_mapping: ErrorMapping = [
            (FetchTimeoutError, HTTP_504_GATEWAY_TIMEOUT),
            (UnresolvedItemsError, HTTP_404_NOT_FOUND),
            (ContractViolationError, HTTP_500_INTERNAL_SERVER_ERROR),
            (RenderError, HTTP_500_INTERNAL_SERVER_ERROR),
            (ValueError, HTTP_422_UNPROCESSABLE_ENTITY),
        ]

    def _get_status_code(self, exc: Exception) -> int:
        if isinstance(exc, HTTPException):
            return exc.status_code
        for exc_type, status_code in self.error_mapping:
            if isinstance(exc, exc_type):
                return status_code
        return HTTP_500_INTERNAL_SERVER_ERROR

    def _create_error_response(
        self,
        exc: Exception,
        status_code: int,
        correlation_id: str | None,
    ) -> JSONResponse:
        """Create JSON error response with optional correlation ID."""
        detail = str(exc.detail) if isinstance(exc, HTTPException) else str(exc)
        content: dict[str, object] = {
            "error": exc.__class__.__name__,
            "message": detail,
            "status_code": status_code,
            "correlation_id": correlation_id if correlation_id else "unknown",
        }
        item_ids = getattr(exc, "item_ids", None)
        if isinstance(exc, ContentError) and item_ids:
            content["item_ids"] = list(item_ids)

        response = JSONResponse(
            status_code=status_code,
            content=content,
            media_type="application/json",
        )
        if correlation_id:
            response.headers["X-Request-ID"] = correlation_id
        return response

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and handle errors.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers or error response
        """
        try:
            return await call_next(request)
        except Exception as exc:
            correlation_id = getattr(request.state, "correlation_id", None)
            status_code = self._get_status_code(exc)
            logger.error(
                "request_error",
                error_type=exc.__class__.__name__,
                error_message=str(exc),
                status_code=status_code,
                path=request.url.path,
                method=request.method,
                correlation_id=correlation_id,
            )
            return self._create_error_response(exc, status_code, correlation_id)
