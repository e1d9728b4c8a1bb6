"""Request-scoped content retrieval and rendering."""

from content_core.content.errors import (
    CallbackError,
    ContentError,
    ContractViolationError,
    FetchTimeoutError,
    RenderError,
    RenderPreconditionError,
    UnresolvedItemsError,
)
from content_core.content.lifecycle import ContentLifecycle, register_lifecycle_hooks
from content_core.content.manager import ContentManager
from content_core.content.models import Shape
from content_core.content.signals import Signal
from content_core.content.state import ItemClaims, RequestContentState
from content_core.content.stream import BufferedResponseSink, RenderStream

__all__ = [
    "BufferedResponseSink",
    "CallbackError",
    "ContentError",
    "ContentLifecycle",
    "ContentManager",
    "ContractViolationError",
    "FetchTimeoutError",
    "ItemClaims",
    "RenderError",
    "RenderPreconditionError",
    "RenderStream",
    "RequestContentState",
    "Shape",
    "Signal",
    "UnresolvedItemsError",
    "register_lifecycle_hooks",
]
