"""In-process publish/subscribe bus with per-request scopes."""

import asyncio
import inspect
from collections import defaultdict
from collections.abc import Callable
from typing import Any, Optional

from content_core.core.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[[Any], Any]


class EventBus:
    """
    Dispatches signal payloads to subscribed listeners.

    Listeners may be plain callables or coroutine functions. A bus created
    with ``scope()`` keeps its own listeners and forwards every emission to
    its parent afterwards, so request-bound subscriptions disappear with the
    scope while application-wide listeners keep receiving the signals.
    """

    def __init__(self, parent: Optional["EventBus"] = None) -> None:
        self.parent = parent
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._closed = False

    def on(self, signal: str, listener: Listener) -> "EventBus":
        """Subscribe a listener to a signal."""
        if self._closed:
            raise RuntimeError("Cannot subscribe to a closed bus scope")
        self._listeners[str(signal)].append(listener)
        logger.debug(
            "listener_subscribed",
            signal=str(signal),
            listener=getattr(listener, "__qualname__", repr(listener)),
        )
        return self

    def remove_listener(self, signal: str, listener: Listener) -> "EventBus":
        """Unsubscribe a listener; unknown listeners are ignored."""
        listeners = self._listeners.get(str(signal), [])
        if listener in listeners:
            listeners.remove(listener)
        return self

    def listeners(self, signal: str) -> list[Listener]:
        """Listeners that receive ``signal`` here, own ones before the parent's."""
        own = list(self._listeners.get(str(signal), []))
        if self.parent is not None:
            return own + self.parent.listeners(signal)
        return own

    def listener_count(self, signal: str) -> int:
        return len(self._listeners.get(str(signal), []))

    async def emit(self, signal: str, payload: Any) -> None:
        """Invoke listeners one after the other; the first failure propagates."""
        for listener in self.listeners(signal):
            await _call(listener, payload)

    async def broadcast(self, signal: str, payload: Any) -> list[BaseException]:
        """Invoke listeners concurrently and wait for all of them.

        Returns:
            The exceptions raised by failing listeners
        """
        listeners = self.listeners(signal)
        if not listeners:
            logger.debug("no_listeners", signal=str(signal))
            return []

        results = await asyncio.gather(
            *(_call(listener, payload) for listener in listeners),
            return_exceptions=True,
        )

        failures: list[BaseException] = []
        for listener, result in zip(listeners, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.warning(
                    "listener_failed",
                    signal=str(signal),
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(result),
                )
                failures.append(result)
        return failures

    def scope(self) -> "EventBus":
        """Create a child bus whose listeners live only as long as the scope."""
        return EventBus(parent=self)

    def close(self) -> None:
        """Drop every listener registered on this bus."""
        self._listeners.clear()
        self._closed = True


async def _call(listener: Listener, payload: Any) -> Any:
    result = listener(payload)
    if inspect.isawaitable(result):
        return await result
    return result
