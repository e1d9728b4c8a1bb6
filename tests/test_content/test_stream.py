"""Tests for the render stream and buffered sink."""

import pytest

from content_core.content.stream import BufferedResponseSink, RenderStream


class TestRenderStream:
    """Test chunk forwarding."""

    def test_should_forward_chunks_in_order(self):
        received = []
        stream = RenderStream().on_data(received.append)

        stream.write("a")
        stream.write(b"b")
        stream.write("")
        stream.write("c")

        assert received == ["a", b"b", "c"]
        assert stream.chunks_written == 3

    def test_should_signal_end_once(self):
        ends = []
        stream = RenderStream().on_end(ends.append)

        stream.end()
        stream.end()

        assert ends == [None]
        assert stream.ended

    def test_should_refuse_writes_after_end(self):
        stream = RenderStream()
        stream.end()

        with pytest.raises(RuntimeError):
            stream.write("late")

    def test_should_report_abort_error(self):
        ends = []
        stream = RenderStream().on_end(ends.append)
        error = ValueError("renderer failed")

        stream.abort(error)

        assert ends == [error]
        assert stream.error is error


class TestBufferedResponseSink:
    """Test response buffering."""

    def test_should_encode_text_chunks(self):
        sink = BufferedResponseSink()
        sink.write("héllo ")
        sink.write(b"world")

        assert sink.body == "héllo world".encode()
        assert sink.text == "héllo world"

    def test_should_refuse_writes_after_close(self):
        sink = BufferedResponseSink()
        sink.close()

        with pytest.raises(RuntimeError):
            sink.write("late")
