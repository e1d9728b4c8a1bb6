"""Render stream and response sinks."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Optional, Protocol, Union

if TYPE_CHECKING:
    from content_core.content.manager import ContentManager

Chunk = Union[str, bytes]


class ResponseSink(Protocol):
    """Where rendered output ends up."""

    def write(self, chunk: Chunk) -> None: ...

    def close(self) -> None: ...


class RenderStream:
    """
    Ordered conduit between renderers and the response.

    Every chunk written is handed to the ``on_data`` listeners before
    ``write`` returns, so output reaches the sink exactly in the order it
    was produced.
    """

    def __init__(self, content_manager: Optional["ContentManager"] = None) -> None:
        self.content_manager = content_manager
        self._data_listeners: list[Callable[[Chunk], None]] = []
        self._end_listeners: list[Callable[[Optional[BaseException]], None]] = []
        self.ended = False
        self.error: Optional[BaseException] = None
        self.chunks_written = 0

    def on_data(self, listener: Callable[[Chunk], None]) -> "RenderStream":
        self._data_listeners.append(listener)
        return self

    def on_end(self, listener: Callable[[Optional[BaseException]], None]) -> "RenderStream":
        self._end_listeners.append(listener)
        return self

    def write(self, chunk: Chunk) -> None:
        if self.ended:
            raise RuntimeError("write after end of render stream")
        if not chunk:
            return
        self.chunks_written += 1
        for listener in self._data_listeners:
            listener(chunk)

    def end(self) -> None:
        """Signal end-of-data to every consumer."""
        self._finish(None)

    def abort(self, error: BaseException) -> None:
        """End the stream because rendering failed."""
        self._finish(error)

    def _finish(self, error: Optional[BaseException]) -> None:
        if self.ended:
            return
        self.ended = True
        self.error = error
        for listener in self._end_listeners:
            listener(error)


class BufferedResponseSink:
    """Collects rendered output so it can be returned as one response body."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self.chunks: list[bytes] = []
        self.closed = False
        self.error: Optional[BaseException] = None

    def write(self, chunk: Chunk) -> None:
        if self.closed:
            raise RuntimeError("write to a closed response sink")
        if isinstance(chunk, str):
            chunk = chunk.encode(self.encoding)
        self.chunks.append(chunk)

    def close(self) -> None:
        self.closed = True

    def abort(self, error: BaseException) -> None:
        self.error = error
        self.close()

    @property
    def body(self) -> bytes:
        return b"".join(self.chunks)

    @property
    def text(self) -> str:
        return self.body.decode(self.encoding)
