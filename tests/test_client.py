import asyncio
import time

import pytest

from lineio.client.base import LineIO_BaseClient
from lineio.config import FrameConfig
from lineio.constants import Ascii
from lineio.exceptions import ConnectionException, ExchangeTimeoutException
from lineio.utilities import ClientState

STX, ETX = Ascii.STX, Ascii.ETX


@pytest.fixture
def client(stream):
    client = LineIO_BaseClient(stream, end_marker=ETX, start_marker=STX, chunk_size=3)
    yield client
    client.close()


def _frame(*lines):
    return "".join(f"{STX}{line}{ETX}" for line in lines).encode()


def test_stream_is_required():
    with pytest.raises(ConnectionException):
        LineIO_BaseClient(None)


def test_frame_settings(stream):
    client = LineIO_BaseClient(stream, end_marker="\n", chunk_size=7)
    try:
        assert client.params.frame.end_marker == "\n"
        assert client.params.frame.start_marker is None
        assert client.params.frame.chunk_size == 7
    finally:
        client.close()


def test_explicit_frame_config(stream):
    frame = FrameConfig(end_marker=ETX, start_marker=STX, chunk_size=1)
    client = LineIO_BaseClient(stream, frame=frame)
    try:
        assert client.framer.frame is frame
    finally:
        client.close()


def test_invalid_marker_is_rejected(stream):
    with pytest.raises(ValueError):
        LineIO_BaseClient(stream, end_marker=ETX, start_marker=ETX)


def test_subscribers_receive_lines_in_order(client, stream, wait_for):
    first, second = [], []
    client.subscribe(first.append)
    client.subscribe(second.append)
    stream.feed(_frame("a", "bb"))
    stream.feed(_frame("ccc"))
    assert wait_for(lambda: len(second) == 3)
    assert first == ["a", "bb", "ccc"]
    assert second == first


def test_unsubscribe(client, stream, wait_for):
    kept, dropped = [], []
    client.subscribe(kept.append)
    unsubscribe = client.subscribe(dropped.append)
    unsubscribe()
    unsubscribe()
    stream.feed(_frame("x"))
    assert wait_for(lambda: kept == ["x"])
    assert dropped == []


def test_failing_subscriber_does_not_stop_scanning(client, stream, wait_for):
    lines = []

    def broken(line):
        raise RuntimeError(line)

    client.subscribe(broken)
    client.subscribe(lines.append)
    stream.feed(_frame("1", "2"))
    assert wait_for(lambda: lines == ["1", "2"])
    assert client.is_open


def test_on_line_handler(stream, wait_for):
    lines = []
    client = LineIO_BaseClient(stream, end_marker="\n", on_line=lines.append)
    try:
        stream.feed(b"ready\n")
        assert wait_for(lambda: lines == ["ready"])
    finally:
        client.close()


def test_write_line_frames_and_flushes(client, stream):
    assert client.write_line("i:0")
    assert client.write_line("")
    assert bytes(stream.written) == b"\x02i:0\x03\x02\x03"


def test_write_failure_returns_false(client, stream):
    stream.fail_writes = True
    assert not client.write_line("i:0")
    assert client.is_open


def test_stalled_write_returns_false(client, stream, monkeypatch):
    monkeypatch.setattr(stream, "write", lambda data: 0)
    assert not client.write_line("i:0")


def test_write_line_after_close(client, stream):
    client.close()
    assert not client.write_line("i:0")
    assert bytes(stream.written) == b""


def test_close_is_idempotent(client, stream):
    client.close()
    client.close()
    assert client.state == ClientState.CLOSED
    assert not client.is_open
    assert stream.closed


def test_end_of_stream_closes_client(client, stream, wait_for):
    stream.feed(_frame("last") + STX.encode() + b"cut")
    stream.feed(b"")
    assert wait_for(lambda: client.state == ClientState.CLOSED)
    assert stream.closed


def test_close_from_subscriber(client, stream, wait_for):
    client.subscribe(lambda line: client.close())
    stream.feed(_frame("bye"))
    assert wait_for(lambda: client.state == ClientState.CLOSED)


def test_exchange_resolves_with_reply(client, stream):
    stream.on_write = lambda data: stream.feed(_frame("ack"))
    future = client.exchange("i:0", timeout=1.0)
    assert future.result(timeout=1) == "ack"
    assert bytes(stream.written) == b"\x02i:0\x03"


def test_exchanges_are_serialized(client, stream):
    replies = iter(["r1", "r2", "r3"])
    stream.on_write = lambda data: stream.feed(_frame(next(replies)))
    futures = [client.exchange(f"q{i}", timeout=1.0) for i in range(1, 4)]
    assert [f.result(timeout=1) for f in futures] == ["r1", "r2", "r3"]
    assert bytes(stream.written) == _frame("q1", "q2", "q3")


def test_replies_also_reach_subscribers(client, stream, wait_for):
    lines = []
    client.subscribe(lines.append)
    stream.on_write = lambda data: stream.feed(_frame("pong"))
    assert client.execute("ping", timeout=1.0) == "pong"
    assert wait_for(lambda: lines == ["pong"])


def test_execute_times_out(client):
    with pytest.raises(ExchangeTimeoutException):
        client.execute("i:0", timeout=0.05)
    assert client.is_open


def test_close_fails_pending_exchange(client):
    future = client.exchange("i:0", timeout=5.0)
    client.close()
    with pytest.raises(ConnectionException):
        future.result(timeout=1)


def test_exchange_after_close_raises(client):
    client.close()
    with pytest.raises(ConnectionException):
        client.exchange("i:0")


def test_async_execute(client, stream):
    stream.on_write = lambda data: stream.feed(_frame("async"))
    assert asyncio.run(client.async_execute("q", timeout=1.0)) == "async"


def test_context_manager(stream):
    with LineIO_BaseClient(stream, end_marker="\n") as client:
        assert client.is_open
    assert client.state == ClientState.CLOSED
    with pytest.raises(ConnectionException):
        with client:
            pass


def test_done_callback_may_close_client(client, stream, wait_for):
    stream.on_write = lambda data: stream.feed(_frame("ack"))
    future = client.exchange("i:0", timeout=1.0)
    future.add_done_callback(lambda fut: client.close())
    assert future.result(timeout=1) == "ack"
    assert wait_for(lambda: client.state == ClientState.CLOSED)


class _NonBlockingStream:
    def __init__(self):
        self.reads = 0

    def read(self, size):
        self.reads += 1
        return None

    def write(self, data):
        return len(data)

    def flush(self):
        pass

    def close(self):
        pass


def test_non_blocking_stream_is_polled_gently():
    stream = _NonBlockingStream()
    client = LineIO_BaseClient(stream, end_marker="\n")
    try:
        time.sleep(0.1)
        assert client.is_open
        assert 0 < stream.reads < 50
    finally:
        client.close()
    assert client.state == ClientState.CLOSED
