"""Data models for shapes."""

from dataclasses import dataclass, field
from typing import Any, Optional

LAYOUT = "layout"
ITEM_PROMISE = "shape-item-promise"


@dataclass
class Shape:
    """A renderable node.

    Placeholders reference an item by ``id`` and carry the display type the
    item should be rendered with. Literal shapes are supplied as-is by the
    caller. Placement arranges shapes into ``zones`` under a layout root.
    """

    type: str
    id: Optional[str] = None
    display_type: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
    zones: dict[str, list["Shape"]] = field(default_factory=dict)

    @classmethod
    def layout(cls) -> "Shape":
        """Create the synthetic root of a page."""
        return cls(type=LAYOUT)

    @classmethod
    def item_promise(cls, item_id: str, display_type: Optional[str] = None) -> "Shape":
        """Create a placeholder for an item that is not resolved yet."""
        return cls(type=ITEM_PROMISE, id=item_id, display_type=display_type)

    @property
    def is_item_promise(self) -> bool:
        return self.type == ITEM_PROMISE

    def add_to_zone(self, zone: str, shape: "Shape") -> None:
        """Append a child shape to the named zone."""
        self.zones.setdefault(zone, []).append(shape)

    def walk(self):
        """Yield this shape and every descendant, depth first, in zone order."""
        yield self
        for children in self.zones.values():
            for child in children:
                yield from child.walk()
