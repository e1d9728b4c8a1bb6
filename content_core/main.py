"""Main FastAPI application module."""

from typing import Optional

from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from content_core.api.v1.router import router as v1_router
from content_core.content.lifecycle import register_lifecycle_hooks
from content_core.core.bus import EventBus
from content_core.core.config import Settings, settings as default_settings
from content_core.core.logging import configure_logging
from content_core.middleware.content import ContentRequestMiddleware
from content_core.middleware.errors import ErrorHandlingMiddleware
from content_core.placement.zones import ZonePlacementStrategy


def create_app(
    settings: Optional[Settings] = None,
    bus: Optional[EventBus] = None,
) -> FastAPI:
    """Build the application around an event bus.

    Content stores, placement strategies and renderers subscribe to ``bus``
    (or ``app.state.bus`` afterwards). A zone placement strategy is attached
    when ``bus`` is not supplied.

    Args:
        settings: Application settings, defaults to the environment
        bus: Application-wide event bus

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    if bus is None:
        bus = EventBus()
        ZonePlacementStrategy(settings.CONTENT_DEFAULT_ZONE).attach(bus)
    register_lifecycle_hooks(bus, settings)

    app = FastAPI(
        title=settings.app_name,
        description="Request-scoped content fetching and page rendering",
        version=settings.version,
        default_response_class=JSONResponse,
    )
    app.state.bus = bus
    app.state.settings = settings

    # Added inside -> out: the content scope wraps error handling so the
    # correlation id is set before errors are reported.
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(ContentRequestMiddleware, bus=bus)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose Prometheus metrics."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(v1_router, prefix=settings.api_prefix)
    return app


configure_logging()
app = create_app()
