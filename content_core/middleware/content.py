"""Request lifecycle middleware for the content core."""

import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp
from structlog.contextvars import bind_contextvars, clear_contextvars

from content_core.content.signals import RequestEnded, RequestStarted, Signal
from content_core.core.bus import EventBus
from content_core.core.logging import get_logger

logger = get_logger(__name__)


class ContentRequestMiddleware(BaseHTTPMiddleware):
    """
    Middleware that scopes the content core to a single request.

    For every request it:
    - Assigns a correlation ID (request state, response header, log context)
    - Opens a bus scope and emits the request-start signal
    - Emits the request-end signal and closes the scope when the request is done
    """

    def __init__(self, app: ASGIApp, bus: EventBus) -> None:
        """
        Initialize middleware.

        Args:
        ----
            app: The ASGI application
            bus: Application bus the lifecycle hooks are registered on
        """
        super().__init__(app)
        self.bus = bus

    def _get_correlation_id(self, request: Request) -> str:
        """Reuse a valid incoming X-Request-ID or generate a new one."""
        header_value = request.headers.get("X-Request-ID", "")
        if header_value:
            try:
                return str(uuid.UUID(header_value))
            except ValueError:
                pass
        return str(uuid.uuid4())

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle inside a content scope.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers
        """
        clear_contextvars()
        correlation_id = self._get_correlation_id(request)
        bind_contextvars(correlation_id=correlation_id)
        request.state.correlation_id = correlation_id

        scope = self.bus.scope()
        try:
            await self.bus.emit(Signal.REQUEST_START, RequestStarted(request=request, bus=scope))
            response = await call_next(request)
        finally:
            try:
                await self.bus.emit(Signal.REQUEST_END, RequestEnded(request=request, bus=scope))
            finally:
                scope.close()

        response.headers["X-Request-ID"] = correlation_id
        return response
