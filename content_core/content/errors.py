"""Errors raised by the content core."""

from collections.abc import Iterable


class ContentError(Exception):
    """Base class for content fetch and render failures."""


class UnresolvedItemsError(ContentError):
    """Raised when a fetch round ends with identifiers no store claimed."""

    def __init__(
        self,
        item_ids: Iterable[str],
        failures: Iterable[BaseException] = (),
    ) -> None:
        self.item_ids = tuple(sorted(item_ids))
        self.failures = tuple(failures)
        message = f"Couldn't load items: {', '.join(self.item_ids)}"
        if self.failures:
            message += f" ({len(self.failures)} content store(s) failed)"
        super().__init__(message)


class FetchTimeoutError(UnresolvedItemsError):
    """Raised when content stores did not settle within the fetch timeout."""

    def __init__(self, item_ids: Iterable[str], timeout: float) -> None:
        self.timeout = timeout
        super().__init__(item_ids)
        self.args = (f"{self.args[0]} (timed out after {timeout:g}s)",)


class ContractViolationError(ContentError):
    """Raised when a caller or a collaborator breaks the content protocol."""


class RenderPreconditionError(ContractViolationError):
    """Raised when a page is rendered before its placeholder items were fetched."""

    def __init__(self, item_ids: Iterable[str]) -> None:
        self.item_ids = tuple(sorted(item_ids))
        super().__init__(
            f"Cannot render before items are fetched: {', '.join(self.item_ids)}"
        )


class RenderError(ContentError):
    """Raised when placement or rendering fails and the page is aborted."""


class CallbackError(ContentError):
    """Raised when item waiters failed after their items were resolved."""

    def __init__(self, failures: Iterable[BaseException]) -> None:
        self.failures = tuple(failures)
        super().__init__(f"{len(self.failures)} item callback(s) failed")
