"""Collection of transaction based abstractions."""
# pylint: disable=missing-type-doc
import threading
import time
from collections import deque
from concurrent.futures import Future, InvalidStateError
from threading import RLock

from .config import get_exchange_timeout
from .exceptions import ConnectionException, ExchangeTimeoutException
from .logger import Log
from .utilities import ExchangeState


# --------------------------------------------------------------------------- #
# A single request awaiting its reply
# --------------------------------------------------------------------------- #
class PendingExchange:
    """One request and the future of its reply.

    The timer starts when the exchange is created, i.e. when it is queued,
    not when it is transmitted. An exchange that waits in the queue has less
    time left once sent, and may time out before it is ever sent.

    The future is resolved exactly once. Whichever of reply, timeout or
    failure comes first wins; the others are no-ops.
    """

    def __init__(self, request, timeout, on_timeout=None):
        """Initialize a pending exchange.

        :param request: The payload to transmit
        :param timeout: Seconds until the exchange times out
        :param on_timeout: Called with this exchange after it has timed out
        """
        self.request = request
        self.timeout = timeout
        self.future = Future()
        self.deadline = time.monotonic() + timeout
        self._on_timeout = on_timeout
        self._timer = threading.Timer(timeout, self._expire)
        self._timer.daemon = True
        self._timer.start()

    def done(self):
        return self.future.done()

    def remaining(self):
        """Seconds left before the deadline (never negative)."""
        return max(0.0, self.deadline - time.monotonic())

    def _resolve(self, setter, value):
        # done callbacks run inside setter and may close the manager
        self._timer.cancel()
        try:
            setter(value)
        except InvalidStateError:
            return False
        return True

    def set_result(self, reply):
        """Resolve with a reply. Returns False if already resolved."""
        return self._resolve(self.future.set_result, reply)

    def set_exception(self, exc):
        """Fail the exchange. Returns False if already resolved."""
        return self._resolve(self.future.set_exception, exc)

    def cancel_timer(self):
        self._timer.cancel()

    def _expire(self):
        exc = ExchangeTimeoutException(
            f"No reply within {self.timeout * 1000:.0f} ms to {self.request!r}",
            request=self.request,
        )
        if self.set_exception(exc):
            Log.debug("Exchange timed out: {}", self.request, ":str")
        # a cancelled future still frees the queue at its deadline
        if self._on_timeout is not None:
            self._on_timeout(self)

    def __repr__(self):
        state = "done" if self.done() else f"{self.remaining():.3f}s left"
        return f"<{self.__class__.__name__} request={self.request!r} {state}>"


# --------------------------------------------------------------------------- #
# The Exchange Manager
# --------------------------------------------------------------------------- #
class FifoExchangeManager:
    """Send requests one at a time and treat the next reply as the response.

    Unifies a communication style where a request is sent with one call and
    the reply arrives later through a separate notification::

        manager = FifoExchangeManager(client.write_line, client.subscribe)
        reply = manager.exchange("i:0").result()

    At most one request is in flight. Requests are transmitted in the order
    they were queued. The remote end is assumed to reply exactly once, in
    order, to every request; this is not verified here.
    """

    def __init__(self, send, subscribe=None, timeout=None):
        """Initialize an instance of the FifoExchangeManager.

        :param send: Called with a request to transmit it
        :param subscribe: Called with the response handler, to register it
        :param timeout: Default exchange timeout in seconds
        """
        self.send = send
        self.timeout = timeout if timeout is not None else get_exchange_timeout()
        self.state = ExchangeState.IDLE
        self._pending = deque()
        self._active = None
        self._transaction_lock = RLock()
        if subscribe is not None:
            subscribe(self.handle_response)

    def __iter__(self):
        """Iterate over the active and the queued exchanges."""
        with self._transaction_lock:
            items = ([self._active] if self._active is not None else []) + list(self._pending)
        return iter(items)

    def __len__(self):
        return len(list(iter(self)))

    @property
    def active(self):
        """The exchange sent and awaiting its reply, or None."""
        return self._active

    @property
    def closed(self):
        return self.state == ExchangeState.CLOSED

    def exchange(self, request, timeout=None):
        """Queue ``request`` and return a future of its reply (call **sync**).

        :param request: The payload to transmit
        :param timeout: Seconds, counted from now; defaults to the manager timeout
        :returns: A ``concurrent.futures.Future`` resolving to the reply, or
            failing with ``ExchangeTimeoutException``
        :raises ConnectionException: If the manager has been closed
        """
        with self._transaction_lock:
            if self.closed:
                raise ConnectionException(f"Exchange manager is closed, not sending {request!r}")
            pending = PendingExchange(
                request,
                self.timeout if timeout is None else timeout,
                on_timeout=self._on_timeout,
            )
            self._pending.append(pending)
            Log.debug("Queued exchange {} ({} waiting)", request, len(self._pending), ":str")
            self.manage_queue()
        return pending.future

    def handle_response(self, reply):
        """Resolve the active exchange with ``reply`` and advance the queue."""
        with self._transaction_lock:
            active = self._active
            if active is not None and active.set_result(reply):
                Log.debug("Got response {} for {}", reply, active.request, ":str")
            else:
                Log.debug("Unrequested message: {}", reply, ":str")
            self.manage_queue()

    def manage_queue(self):
        """Send the next queued request unless one is still awaiting its reply."""
        with self._transaction_lock:
            if self.closed:
                return
            while self._pending and self._pending[0].done():
                expired = self._pending.popleft()
                Log.debug("Dropping expired exchange {}", expired.request, ":str")

            if self._active is not None and not self._active.done():
                return

            if not self._pending:
                self._active = None
                self.state = ExchangeState.IDLE
                return

            self._active = self._pending.popleft()
            self.state = ExchangeState.WAITING_FOR_REPLY
            Log.debug(
                "Sending {} ({:.3f}s left)", self._active.request, self._active.remaining()
            )
            self.send(self._active.request)

    def _on_timeout(self, _pending):
        self.manage_queue()

    def close(self, exc=None):
        """Fail every queued and active exchange and refuse new ones.

        :param exc: The exception to fail them with
        """
        with self._transaction_lock:
            if self.closed:
                return
            self.state = ExchangeState.CLOSED
            outstanding = list(self._pending)
            if self._active is not None:
                outstanding.insert(0, self._active)
            self._pending.clear()
            self._active = None
        exc = exc or ConnectionException("Connection closed before a reply was received")
        failed = 0
        for pending in outstanding:
            pending.cancel_timer()
            if pending.set_exception(exc):
                failed += 1
        if failed:
            Log.debug("Failed {} outstanding exchange(s) on close", failed)


# --------------------------------------------------------------------------- #
# Exported symbols
# --------------------------------------------------------------------------- #


__all__ = [
    "PendingExchange",
    "FifoExchangeManager",
]
