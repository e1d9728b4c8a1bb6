"""Dictionary-backed content store."""

import asyncio
from collections.abc import Mapping
from typing import Any, Optional

from content_core.content.signals import LoadItems, Signal
from content_core.core.bus import EventBus
from content_core.core.logging import get_logger

logger = get_logger(__name__)


class InMemoryContentStore:
    """Serves items from a dictionary.

    Args:
        items: Initial items keyed by identifier
        name: Store name used in log entries
        latency: Seconds to wait before claiming, to behave like a remote store
    """

    def __init__(
        self,
        items: Optional[Mapping[str, Any]] = None,
        name: str = "memory",
        latency: float = 0.0,
    ) -> None:
        self.name = name
        self.latency = latency
        self._items: dict[str, Any] = dict(items or {})
        self.requests_seen = 0

    def put(self, item_id: str, item: Any) -> None:
        self._items[item_id] = item

    def remove(self, item_id: str) -> None:
        self._items.pop(item_id, None)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def attach(self, bus: EventBus) -> "InMemoryContentStore":
        bus.on(Signal.LOAD_ITEMS, self.load_items)
        return self

    def detach(self, bus: EventBus) -> "InMemoryContentStore":
        bus.remove_listener(Signal.LOAD_ITEMS, self.load_items)
        return self

    async def load_items(self, payload: LoadItems) -> None:
        """Claim every wanted item this store owns."""
        self.requests_seen += 1
        owned = sorted(item_id for item_id in payload.wanted if item_id in self._items)
        if not owned:
            return
        if self.latency:
            await asyncio.sleep(self.latency)

        claimed = [item_id for item_id in owned if payload.claim(item_id, self._items[item_id])]
        logger.debug("items_claimed", store=self.name, item_ids=claimed)
