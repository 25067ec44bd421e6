"""Base for all clients."""
from __future__ import annotations

import asyncio
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..config import FrameConfig, get_exchange_timeout, get_frame_config, get_lineio_config
from ..constants import Defaults
from ..exceptions import ConnectionException, LineIO_Exception, LineIO_IOException
from ..framer import LineIO_LineFramer
from ..logger import Log
from ..transaction import FifoExchangeManager
from ..utilities import ClientState, printable

# Faults that mean "the stream is gone"; anything else is a bug and propagates.
STREAM_ERRORS = (OSError, ValueError, LineIO_Exception)


class LineIO_BaseClient:
    """
    **LineIO_BaseClient**

    Line-by-line communication over a duplex byte stream.

    :param stream: Object with ``read(size)``, ``write(data)``, ``flush()`` and ``close()``.
    :param end_marker: (optional) Character ending every line.
    :param start_marker: (optional) Character starting every line, None for auto-start.
    :param chunk_size: (optional) Maximum bytes per read, independent of the line length.
    :param encoding: (optional) Stream encoding.
    :param frame: (optional) A complete :class:`FrameConfig`, instead of the four above.
    :param timeout: (optional) Default exchange timeout in seconds.
    :param join_timeout: (optional) Seconds ``close()`` waits for the scan thread.
    :param on_line: (optional) Line handler subscribed before scanning starts.

    When neither ``frame`` nor ``end_marker`` is given the frame comes from the
    configuration. When only ``end_marker`` is given lines have no start marker.

    The client is open as soon as it is constructed: a background thread reads
    ``chunk_size`` bytes at a time and hands every completed line to the
    subscribers, in arrival order, on that thread. Slow subscribers stall the
    scan. Example::

        client = LineIO_BaseClient(stream, end_marker=Ascii.ETX, start_marker=Ascii.STX)
        client.subscribe(print)
        client.write_line("i:0")
        reply = client.execute("i:1")
        client.close()

    .. tip::
        ``write_line`` does not serialize concurrent callers. Use ``exchange``
        (one request in flight, FIFO order) when lines are requests.
    """

    @dataclass
    class _params:  # pylint: disable=too-many-instance-attributes
        """Parameter class."""

        frame: FrameConfig = None
        timeout: float = None
        join_timeout: float = None
        kwargs: dict = None

    def __init__(
        self,
        stream: Any = None,
        end_marker: Optional[str] = None,
        start_marker: Optional[str] = None,
        chunk_size: Optional[int] = None,
        encoding: Optional[str] = None,
        frame: Optional[FrameConfig] = None,
        timeout: Optional[float] = None,
        join_timeout: Optional[float] = None,
        on_line: Optional[Callable[[str], None]] = None,
        **kwargs: Any,
    ) -> None:
        """Initialize a client instance and start scanning."""
        if stream is None:
            raise ConnectionException("A stream is required")

        self.params = self._params()
        self.params.frame = self._build_frame(frame, end_marker, start_marker, chunk_size, encoding)
        self.params.timeout = float(timeout) if timeout is not None else get_exchange_timeout()
        self.params.join_timeout = (
            float(join_timeout)
            if join_timeout is not None
            else get_lineio_config().exchange.join_timeout
        )
        self.params.kwargs = kwargs

        # Common variables.
        self.stream = stream
        self.framer = LineIO_LineFramer(self.params.frame, self)
        self._subscribers = []
        self._subscribers_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self.state = ClientState.OPEN
        self.transaction = FifoExchangeManager(
            self.write_line, self.subscribe, timeout=self.params.timeout
        )
        if on_line is not None:
            self.subscribe(on_line)

        self._scan_thread = threading.Thread(
            target=self._scan, name=f"lineio-scan-{id(self):x}", daemon=True
        )
        self._scan_thread.start()
        Log.info("Opened {}", self)

    @staticmethod
    def _build_frame(frame, end_marker, start_marker, chunk_size, encoding):
        if frame is not None:
            return frame
        overrides = {}
        if end_marker is not None:
            overrides["end_marker"] = end_marker
            overrides["start_marker"] = start_marker
        elif start_marker is not None:
            overrides["start_marker"] = start_marker
        if chunk_size is not None:
            overrides["chunk_size"] = chunk_size
        if encoding is not None:
            overrides["encoding"] = encoding
        return get_frame_config(**overrides)

    # ----------------------------------------------------------------------- #
    # Client external interface
    # ----------------------------------------------------------------------- #
    @property
    def is_open(self) -> bool:
        """Return whether lines can still be written and exchanged (call **sync**)."""
        return self.state == ClientState.OPEN

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Call ``callback(line)`` for every received line (call **sync**).

        :param callback: Runs on the scan thread and must return quickly.
        :returns: A function that removes the subscription.
        """
        with self._subscribers_lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._subscribers_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def write_line(self, line: str) -> bool:
        """Frame ``line``, write it and flush (call **sync**).

        :param line: The payload, without markers
        :returns: True when the line left the local buffers, False on a
            transport fault or when the client is not open
        """
        if not self.is_open:
            Log.debug("Not writing {}, {} is not open", printable(line), self)
            return False
        packet = self.framer.buildPacket(line)
        try:
            size = self.framer.sendPacket(packet)
        except STREAM_ERRORS as exc:
            Log.warning("Write to {} failed: {}", self, exc, ":str")
            return False
        Log.debug("send({}): {}", size, packet, ":hex")
        return True

    def exchange(self, line: str, timeout: Optional[float] = None) -> Future:
        """Queue ``line`` as a request and return a future of the next line received.

        :param line: The request payload
        :param timeout: (optional) Seconds, counted from now rather than from
            transmission
        :returns: A ``concurrent.futures.Future`` resolving to the reply or
            failing with ``ExchangeTimeoutException`` / ``ConnectionException``
        :raises ConnectionException: If the client is not open
        """
        if not self.is_open:
            raise ConnectionException(f"Not connected[{str(self)}]")
        return self.transaction.exchange(line, timeout)

    def execute(self, line: str, timeout: Optional[float] = None) -> str:
        """Exchange ``line`` and wait for the reply (call **sync**).

        :raises ExchangeTimeoutException: If no reply arrived in time
        :raises ConnectionException: If the client is or gets closed
        """
        return self.exchange(line, timeout).result()

    async def async_execute(self, line: str, timeout: Optional[float] = None) -> str:
        """Exchange ``line`` and await the reply (call **async**)."""
        return await asyncio.wrap_future(self.exchange(line, timeout))

    def close(self) -> None:
        """Stop scanning and release the stream (call **sync**).

        Outstanding exchanges fail with ``ConnectionException``. Calling
        ``close()`` again, or after the stream has failed, does nothing.
        """
        with self._state_lock:
            if self.state != ClientState.OPEN:
                return
            self.state = ClientState.CLOSING
        Log.info("Closing {}", self)
        try:
            self.transaction.close(ConnectionException(f"{self} closed"))
            self._release_stream()
            if self._scan_thread is not threading.current_thread():
                self._scan_thread.join(self.params.join_timeout)
                if self._scan_thread.is_alive():
                    Log.warning("Scan thread of {} did not stop in time", self)
        finally:
            self.state = ClientState.CLOSED
            Log.info("Closed {}", self)

    # ----------------------------------------------------------------------- #
    # Internal methods
    # ----------------------------------------------------------------------- #
    def send(self, request: bytes) -> int:
        """Write all of ``request`` and flush.

        :meta private:
        """
        if self.stream is None:
            raise ConnectionException(str(self))
        view = memoryview(request)
        while view:
            written = self.stream.write(view)
            if not written:
                raise LineIO_IOException(f"{self}: wrote 0 of {len(view)} bytes")
            view = view[written:]
        self.stream.flush()
        return len(request)

    def recv(self, size: int) -> bytes:
        """Read at most ``size`` bytes; an empty read is the end of the stream.

        A non-blocking stream returning None has no data yet; the scan
        thread then waits ``Defaults.IdleSleep`` before polling again.

        :meta private:
        """
        if self.stream is None:
            raise ConnectionException(str(self))
        read = getattr(self.stream, "read1", None) or self.stream.read
        data = read(size)
        if data is None:
            # non-blocking stream with nothing buffered
            time.sleep(Defaults.IdleSleep)
            return b""
        if not data:
            raise ConnectionException(f"{self}: end of stream")
        Log.debug("recv: {}", data, ":hex")
        return data

    def _release_stream(self) -> None:
        try:
            self.stream.close()
        except STREAM_ERRORS as exc:
            Log.warning("Error while closing {}: {}", self, exc, ":str")

    def _scan(self) -> None:
        Log.debug("Scanning {}", self)
        try:
            while self.is_open:
                data = self.framer.recvPacket(self.framer.chunk_size)
                if data:
                    self.framer.processIncomingPacket(data, self._handle_line)
        except STREAM_ERRORS as exc:
            if self.is_open:
                Log.warning("Stopped scanning {}: {}", self, exc, ":str")
        finally:
            self.framer.resetFrame()
            self.close()

    def _handle_line(self, line: str) -> None:
        """Publish a completed line to every subscriber."""
        Log.debug("line: {}", printable(line))
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(line)
            except Exception:  # pylint: disable=broad-except
                Log.exception("Line handler {} failed", callback, ":str")

    # ----------------------------------------------------------------------- #
    # The magic methods
    # ----------------------------------------------------------------------- #
    def __enter__(self):
        """Implement the client with enter block.

        :returns: The current instance of the client
        :raises ConnectionException:
        """
        if not self.is_open:
            raise ConnectionException(f"Not connected[{self.__str__()}]")
        return self

    def __exit__(self, klass, value, traceback):
        """Implement the client with exit block."""
        self.close()

    def __str__(self):
        """Build a string representation of the connection.

        :returns: The string representation
        """
        return f"{self.__class__.__name__}({type(self.stream).__name__})"

    def __repr__(self):
        """Return string representation."""
        return (
            f"<{self.__class__.__name__} at {hex(id(self))} "
            f"state={ClientState.to_string(self.state)}, "
            f"end={self.params.frame.end_marker!r}, start={self.params.frame.start_marker!r}>"
        )
