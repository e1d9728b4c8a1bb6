"""Signals exchanged on the bus and their payloads."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from content_core.content.models import Shape
from content_core.content.state import ItemClaims

if TYPE_CHECKING:
    from content_core.content.stream import RenderStream, ResponseSink
    from content_core.core.bus import EventBus


class Signal(str, Enum):
    """Names of the signals the content core consumes and emits."""

    REQUEST_START = "content.request-start"
    REQUEST_END = "content.request-end"
    FETCH_CONTENT_REQUESTED = "content.fetch-content-requested"
    LOAD_ITEMS = "content.load-items"
    RENDER_PAGE_REQUESTED = "content.render-page-requested"
    SHAPE_PLACEMENT = "content.shape-placement"
    HANDLE_ITEM = "content.handle-item"
    SHAPE_RENDER = "content.shape-render"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RequestStarted:
    request: Any
    bus: "EventBus"


@dataclass(frozen=True)
class RequestEnded:
    request: Any
    bus: "EventBus"


@dataclass(frozen=True)
class FetchContentRequested:
    """Asks the request's content manager to run one fetch cycle.

    ``callback`` receives ``None`` once every wanted item is resolved, or the
    error describing what could not be resolved. Without a callback the
    error is raised to whoever emitted the signal.
    """

    callback: Optional[Callable[[Optional[Exception]], Any]] = None


@dataclass(frozen=True)
class LoadItems:
    """Fan-out payload for content stores.

    Stores look at ``wanted``, skip what they do not own and call ``claim``
    for every item they can supply. ``items`` is a read-only view of what the
    request has already resolved.
    """

    wanted: frozenset[str]
    items: Mapping[str, Any]
    claims: ItemClaims

    def claim(self, item_id: str, item: Any) -> bool:
        return self.claims.claim(item_id, item)


@dataclass(frozen=True)
class RenderPageRequested:
    request: Any
    response: "ResponseSink"


@dataclass(frozen=True)
class ShapePlacement:
    shape: Shape
    shapes: list[Shape]


@dataclass(frozen=True)
class HandleItem:
    shape: Shape
    render_stream: "RenderStream"


@dataclass(frozen=True)
class ShapeRender:
    shape: Shape
    render_stream: "RenderStream"
