"""Request-scoped item cache, pending-fetch ledger and claim collector."""

import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional

from content_core.content.errors import ContractViolationError
from content_core.content.models import Shape
from content_core.core.logging import get_logger

logger = get_logger(__name__)

ItemCallback = Callable[[Any], Optional[Awaitable[None]]]


@dataclass
class RequestContentState:
    """Everything the content core knows about one in-flight request.

    ``items`` only ever holds resolved items. ``pending_fetches`` maps each
    identifier that is still wanted to the callbacks waiting for it; once an
    identifier is resolved it leaves the ledger and moves to ``items``.
    """

    items: dict[str, Any] = field(default_factory=dict)
    pending_fetches: dict[str, list[ItemCallback]] = field(default_factory=dict)
    shapes: list[Shape] = field(default_factory=list)
    layout: Optional[Shape] = None
    started_at: float = field(default_factory=time.perf_counter)

    def want(self, item_id: str, callback: Optional[ItemCallback] = None) -> None:
        """Record interest in an item, appending to any existing waiters."""
        waiters = self.pending_fetches.setdefault(item_id, [])
        if callback is not None:
            waiters.append(callback)

    def cached_pending(self) -> list[str]:
        """Identifiers that are wanted and already sit in the cache."""
        return [item_id for item_id in self.pending_fetches if item_id in self.items]

    def resolve(self, item_id: str, item: Any) -> list[ItemCallback]:
        """Move an identifier from the ledger to the cache.

        Returns:
            The callbacks that were waiting for the item, in registration order
        """
        self.items[item_id] = item
        return self.pending_fetches.pop(item_id, [])

    def unresolved(self) -> frozenset[str]:
        return frozenset(self.pending_fetches)

    def missing_for_render(self) -> set[str]:
        """Placeholder identifiers with no resolved item behind them."""
        return {
            shape.id
            for shape in self.shapes
            if shape.is_item_promise and shape.id is not None and shape.id not in self.items
        }


class ItemClaims:
    """Collects the items content stores claim during one fetch round.

    Stores never touch the request's maps directly: they claim against the
    immutable set of wanted identifiers and the coordinator merges the claims
    once the round has settled.
    """

    def __init__(self, wanted: Iterable[str]) -> None:
        self.wanted: frozenset[str] = frozenset(wanted)
        self._claimed: dict[str, Any] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def claimed(self) -> Mapping[str, Any]:
        return MappingProxyType(self._claimed)

    def outstanding(self) -> frozenset[str]:
        """Wanted identifiers nobody has claimed yet."""
        return self.wanted.difference(self._claimed)

    def claim(self, item_id: str, item: Any) -> bool:
        """Hand a resolved item to the coordinator.

        Returns:
            True if the claim was accepted, False if another store got there first

        Raises:
            ContractViolationError: If the round is closed or the id was not wanted
        """
        if self._closed:
            raise ContractViolationError(
                f"Item '{item_id}' claimed after the fetch round closed"
            )
        if item_id not in self.wanted:
            raise ContractViolationError(f"Item '{item_id}' was not requested")
        if item is None:
            raise ContractViolationError(f"Item '{item_id}' claimed without a value")
        if item_id in self._claimed:
            logger.warning("duplicate_item_claim", item_id=item_id)
            return False
        self._claimed[item_id] = item
        return True

    def close(self) -> dict[str, Any]:
        """Stop accepting claims and return what was collected."""
        self._closed = True
        return dict(self._claimed)
