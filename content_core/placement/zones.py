"""Zone-based placement strategy."""

from typing import Optional

from content_core.content.signals import ShapePlacement, Signal
from content_core.core.bus import EventBus
from content_core.core.config import settings


class ZonePlacementStrategy:
    """Puts each shape in a zone of the layout, keeping list order.

    A shape chooses its zone with ``data["zone"]``; anything else lands in
    the default zone.
    """

    def __init__(self, default_zone: Optional[str] = None) -> None:
        self.default_zone = default_zone or settings.CONTENT_DEFAULT_ZONE

    def attach(self, bus: EventBus) -> "ZonePlacementStrategy":
        bus.on(Signal.SHAPE_PLACEMENT, self.place)
        return self

    def detach(self, bus: EventBus) -> "ZonePlacementStrategy":
        bus.remove_listener(Signal.SHAPE_PLACEMENT, self.place)
        return self

    def place(self, payload: ShapePlacement) -> None:
        for shape in payload.shapes:
            zone = shape.data.get("zone") or self.default_zone
            payload.shape.add_to_zone(zone, shape)
