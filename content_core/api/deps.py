"""Request dependencies for content routes."""

from fastapi import Request

from content_core.content.errors import ContractViolationError
from content_core.content.manager import ContentManager
from content_core.core.bus import EventBus


def get_content_manager(request: Request) -> ContentManager:
    """Return the content manager bound to this request."""
    manager = getattr(request.state, "content_manager", None)
    if manager is None:
        raise ContractViolationError(
            "No content manager on this request; is ContentRequestMiddleware installed?"
        )
    return manager


def get_content_bus(request: Request) -> EventBus:
    """Return the bus scope bound to this request."""
    bus = getattr(request.state, "content_bus", None)
    if bus is None:
        raise ContractViolationError(
            "No content bus on this request; is ContentRequestMiddleware installed?"
        )
    return bus
