"""Request-scoped content manager: fetch coordination and page rendering."""

import asyncio
import inspect
import time
from collections.abc import Iterable
from types import MappingProxyType
from typing import Any, Optional, Union

from content_core.content.errors import (
    CallbackError,
    ContentError,
    ContractViolationError,
    FetchTimeoutError,
    RenderError,
    RenderPreconditionError,
    UnresolvedItemsError,
)
from content_core.content.metrics import (
    FETCH_CYCLES_TOTAL,
    ITEMS_RESOLVED_TOTAL,
    ITEMS_UNRESOLVED_TOTAL,
    PAGES_RENDERED_TOTAL,
    RENDER_DURATION_SECONDS,
)
from content_core.content.models import Shape
from content_core.content.signals import (
    FetchContentRequested,
    HandleItem,
    LoadItems,
    RenderPageRequested,
    ShapePlacement,
    ShapeRender,
    Signal,
)
from content_core.content.state import ItemCallback, ItemClaims, RequestContentState
from content_core.content.stream import RenderStream
from content_core.core.bus import EventBus
from content_core.core.config import Settings, settings as default_settings
from content_core.core.logging import get_logger

logger = get_logger(__name__)


class ContentManager:
    """
    Coordinates content retrieval and rendering for a single request.

    Code handling the request registers the items it needs with ``get`` and
    queues shapes with ``render``. A fetch cycle then asks every content
    store for the wanted items in one broadcast, and ``build_rendered_page``
    turns the collected shapes into output once the items are in.
    """

    def __init__(
        self,
        bus: EventBus,
        settings: Optional[Settings] = None,
        state: Optional[RequestContentState] = None,
    ) -> None:
        self.bus = bus
        self.settings = settings or default_settings
        self.state = state or RequestContentState()
        self._fetching = False

    @property
    def items(self) -> dict[str, Any]:
        return self.state.items

    @property
    def pending_fetches(self) -> dict[str, list[ItemCallback]]:
        return self.state.pending_fetches

    @property
    def shapes(self) -> list[Shape]:
        return self.state.shapes

    def get(
        self,
        item_ids: Union[str, Iterable[str]],
        callback: Optional[ItemCallback] = None,
    ) -> None:
        """Register interest in one or more items.

        Nothing is fetched here. The callback, if any, is invoked with the item
        during the fetch cycle that resolves it.

        Args:
            item_ids: An identifier or an ordered collection of identifiers
            callback: Called once per identifier with the resolved item
        """
        if isinstance(item_ids, str):
            item_ids = [item_ids]
        for item_id in item_ids:
            self.state.want(item_id, callback)

    def get_available_item(self, item_id: str) -> Optional[Any]:
        """Return the item if it was already resolved, None otherwise."""
        return self.state.items.get(item_id)

    async def fetch_items(self, payload: Optional[FetchContentRequested] = None) -> None:
        """Run one fetch cycle over everything currently wanted.

        Args:
            payload: Carries the optional batch completion callback

        Raises:
            UnresolvedItemsError: If items remain unresolved and no callback was given
            ContractViolationError: If a cycle is already running and no callback was given
            CallbackError: If item callbacks failed and no callback was given
        """
        payload = payload or FetchContentRequested()
        error: Optional[ContentError] = None
        try:
            await self._run_fetch_cycle()
        except ContentError as exc:
            if payload.callback is None:
                raise
            error = exc

        if payload.callback is not None:
            await _invoke(payload.callback, error)

    async def _run_fetch_cycle(self) -> None:
        if self._fetching:
            raise ContractViolationError("A fetch cycle is already in progress")
        self._fetching = True
        callback_failures: list[BaseException] = []
        try:
            # Items resolved by an earlier cycle never go back to the stores
            notifications = [
                (self.state.resolve(item_id, self.state.items[item_id]), self.state.items[item_id])
                for item_id in self.state.cached_pending()
            ]
            ITEMS_RESOLVED_TOTAL.labels(source="cache").inc(len(notifications))
            for callbacks, item in notifications:
                callback_failures.extend(await _notify(callbacks, item))

            claims = ItemClaims(self.state.pending_fetches)
            logger.debug("fetch_cycle_started", wanted=sorted(claims.wanted))

            timeout = self.settings.fetch_timeout
            failures: list[BaseException] = []
            timed_out = False
            try:
                failures = await asyncio.wait_for(
                    self.bus.broadcast(
                        Signal.LOAD_ITEMS,
                        LoadItems(
                            wanted=claims.wanted,
                            items=MappingProxyType(self.state.items),
                            claims=claims,
                        ),
                    ),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                timed_out = True

            claimed = claims.close()
            notifications = [
                (self.state.resolve(item_id, item), item) for item_id, item in claimed.items()
            ]
            ITEMS_RESOLVED_TOTAL.labels(source="store").inc(len(notifications))

            # Ids registered while the round was running wait for the next cycle
            unresolved = claims.outstanding()
            if unresolved:
                FETCH_CYCLES_TOTAL.labels(outcome="timeout" if timed_out else "unresolved").inc()
                ITEMS_UNRESOLVED_TOTAL.inc(len(unresolved))
                logger.warning(
                    "items_unresolved",
                    item_ids=sorted(unresolved),
                    timed_out=timed_out,
                    store_failures=len(failures),
                )
            else:
                FETCH_CYCLES_TOTAL.labels(outcome="completed").inc()
                logger.debug("fetch_cycle_completed", resolved=sorted(claimed))

            for callbacks, item in notifications:
                callback_failures.extend(await _notify(callbacks, item))
        finally:
            self._fetching = False

        if unresolved:
            if timed_out:
                error: UnresolvedItemsError = FetchTimeoutError(unresolved, timeout or 0)
                error.failures = tuple(callback_failures)
                raise error
            raise UnresolvedItemsError(unresolved, [*failures, *callback_failures])
        if callback_failures:
            raise CallbackError(callback_failures)

    def render(
        self,
        item_id: Optional[str] = None,
        display_type: Optional[str] = None,
        shape: Optional[Shape] = None,
    ) -> Shape:
        """Queue a shape for this request's page.

        Either pass ``item_id`` (and optionally ``display_type``) to render an
        item through a placeholder, or ``shape`` to render a literal shape.

        Raises:
            ContractViolationError: If both or neither of item_id and shape are given
        """
        if (item_id is None) == (shape is None):
            raise ContractViolationError("render() takes exactly one of item_id or shape")
        if item_id is not None:
            self.get(item_id)
            placeholder = Shape.item_promise(item_id, display_type)
            self.state.shapes.append(placeholder)
            return placeholder
        else:
            self.state.shapes.append(shape)
            return shape

    async def build_rendered_page(self, payload: RenderPageRequested) -> None:
        """Place, render and write out the page for this request.

        A fetch cycle must have resolved every placeholder first.

        Raises:
            RenderPreconditionError: If placeholder items were never fetched
            RenderError: If placement or a renderer failed
        """
        request, response = payload.request, payload.response
        if self.settings.CONTENT_REQUIRE_FETCH_BEFORE_RENDER:
            missing = self.state.missing_for_render()
            if missing:
                error = RenderPreconditionError(missing)
                _abort_response(response, error)
                PAGES_RENDERED_TOTAL.labels(outcome="precondition_failed").inc()
                raise error

        started = time.perf_counter()
        layout = self.state.layout = Shape.layout()
        request_state = getattr(request, "state", None)
        if request_state is not None:
            request_state.layout = layout

        stream: Optional[RenderStream] = None
        try:
            await self.bus.emit(
                Signal.SHAPE_PLACEMENT,
                ShapePlacement(shape=layout, shapes=list(self.state.shapes)),
            )
            stream = RenderStream(content_manager=self)
            stream.on_data(response.write)
            await self.bus.emit(Signal.HANDLE_ITEM, HandleItem(shape=layout, render_stream=stream))
            await self.bus.emit(Signal.SHAPE_RENDER, ShapeRender(shape=layout, render_stream=stream))
        except Exception as exc:
            if stream is not None:
                stream.abort(exc)
            _abort_response(response, exc)
            PAGES_RENDERED_TOTAL.labels(outcome="failed").inc()
            logger.error("render_failed", path=_request_path(request), error=str(exc), exc_info=True)
            raise RenderError(f"Rendering failed: {exc}") from exc

        stream.end()
        response.close()

        RENDER_DURATION_SECONDS.observe(time.perf_counter() - started)
        PAGES_RENDERED_TOTAL.labels(outcome="rendered").inc()
        logger.info(
            "page_rendered",
            path=_request_path(request),
            shapes=len(self.state.shapes),
            chunks=stream.chunks_written,
            duration_ms=round((time.perf_counter() - self.state.started_at) * 1000, 2),
        )


async def _invoke(callback: Any, value: Any) -> None:
    result = callback(value)
    if inspect.isawaitable(result):
        await result


async def _notify(callbacks: list[ItemCallback], item: Any) -> list[Exception]:
    """Call every waiter; one failing waiter does not starve the others."""
    failures: list[Exception] = []
    for callback in callbacks:
        try:
            await _invoke(callback, item)
        except Exception as exc:
            logger.error(
                "callback_failed",
                callback=getattr(callback, "__qualname__", repr(callback)),
                error=str(exc),
                exc_info=True,
            )
            failures.append(exc)
    return failures


def _abort_response(response: Any, error: BaseException) -> None:
    abort = getattr(response, "abort", None)
    if callable(abort):
        abort(error)
    else:
        response.close()


def _request_path(request: Any) -> Optional[str]:
    url = getattr(request, "url", None)
    return getattr(url, "path", None)
