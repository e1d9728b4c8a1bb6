"""Bind a fresh content manager to each request and tear it down afterwards."""

from typing import Any, Optional

from content_core.content.manager import ContentManager
from content_core.content.signals import RequestEnded, RequestStarted, Signal
from content_core.core.bus import EventBus
from content_core.core.config import Settings
from content_core.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ATTRIBUTES = ("content_manager", "content_bus", "layout")


class ContentLifecycle:
    """Request start/end handlers for the content core.

    On start, a new ``ContentManager`` is attached to the request and its
    fetch and render entry points are subscribed on the request's bus scope.
    On end, both are unsubscribed and every request-bound reference is
    removed.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings

    def register(self, bus: EventBus) -> "ContentLifecycle":
        bus.on(Signal.REQUEST_START, self.on_request_start)
        bus.on(Signal.REQUEST_END, self.on_request_end)
        return self

    def unregister(self, bus: EventBus) -> "ContentLifecycle":
        bus.remove_listener(Signal.REQUEST_START, self.on_request_start)
        bus.remove_listener(Signal.REQUEST_END, self.on_request_end)
        return self

    def on_request_start(self, payload: RequestStarted) -> ContentManager:
        manager = ContentManager(payload.bus, settings=self.settings)
        payload.bus.on(Signal.FETCH_CONTENT_REQUESTED, manager.fetch_items)
        payload.bus.on(Signal.RENDER_PAGE_REQUESTED, manager.build_rendered_page)

        state = payload.request.state
        state.content_manager = manager
        state.content_bus = payload.bus
        return manager

    def on_request_end(self, payload: RequestEnded) -> None:
        state = payload.request.state
        manager: Optional[ContentManager] = getattr(state, "content_manager", None)
        if manager is not None:
            manager.bus.remove_listener(
                Signal.FETCH_CONTENT_REQUESTED, manager.fetch_items
            ).remove_listener(Signal.RENDER_PAGE_REQUESTED, manager.build_rendered_page)
            if manager.state.pending_fetches:
                logger.debug(
                    "request_ended_with_pending_items",
                    item_ids=sorted(manager.state.pending_fetches),
                )
        _clear(state)


def register_lifecycle_hooks(bus: EventBus, settings: Optional[Settings] = None) -> ContentLifecycle:
    """Subscribe the content core's request hooks on an application bus."""
    return ContentLifecycle(settings).register(bus)


def _clear(state: Any) -> None:
    for name in REQUEST_ATTRIBUTES:
        if hasattr(state, name):
            delattr(state, name)
