"""API v1 router module."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from content_core.api.deps import get_content_bus, get_content_manager
from content_core.content.manager import ContentManager
from content_core.content.signals import (
    FetchContentRequested,
    RenderPageRequested,
    Signal,
)
from content_core.content.stream import BufferedResponseSink
from content_core.core.bus import EventBus

router = APIRouter()


@router.get("/pages")
async def render_page(
    request: Request,
    item_ids: list[str] = Query(default=[], alias="id", description="Item to render"),
    display_type: Optional[str] = Query(None, description="Display type for the items"),
    manager: ContentManager = Depends(get_content_manager),
    bus: EventBus = Depends(get_content_bus),
) -> Response:
    """
    Render a page made of the requested items.

    Each item is queued as a placeholder, fetched from the content stores in
    a single round, then placed and rendered.
    """
    for item_id in item_ids:
        manager.render(item_id=item_id, display_type=display_type)

    await bus.emit(Signal.FETCH_CONTENT_REQUESTED, FetchContentRequested())

    sink = BufferedResponseSink()
    await bus.emit(
        Signal.RENDER_PAGE_REQUESTED,
        RenderPageRequested(request=request, response=sink),
    )
    return Response(
        content=sink.body, media_type=request.app.state.settings.RENDER_MEDIA_TYPE
    )
