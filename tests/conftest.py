"""
LineIO 테스트 공용 설정 및 픽스처

- 테스트 환경(LINEIO_ENV=testing)으로 설정을 로드합니다.
- 블로킹 읽기를 흉내 내는 가짜 바이트 스트림을 제공합니다.
"""

import os
import queue
import time

import pytest

# 패키지 import 전에 테스트 환경 지정
os.environ.setdefault("LINEIO_ENV", "testing")


class FakeStream:
    """A duplex byte stream whose ``read`` blocks until data is fed.

    ``feed(b"")`` signals the end of the stream. After ``close()`` reads
    raise ``ValueError`` like a closed file object.
    """

    def __init__(self):
        self._chunks = queue.Queue()
        self._pending = b""
        self.written = bytearray()
        self.closed = False
        self.on_write = None
        self.fail_writes = False

    def feed(self, data):
        self._chunks.put(data)

    def read(self, size):
        if not self._pending:
            chunk = self._chunks.get()
            if chunk is None:
                raise ValueError("I/O operation on closed stream")
            if not chunk:
                return b""
            self._pending = chunk
        data, self._pending = self._pending[:size], self._pending[size:]
        return data

    def write(self, data):
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        if self.fail_writes:
            raise OSError("device unplugged")
        data = bytes(data)
        self.written += data
        if self.on_write is not None:
            self.on_write(data)
        return len(data)

    def flush(self):
        pass

    def close(self):
        if not self.closed:
            self.closed = True
            self._chunks.put(None)


def wait_until(predicate, timeout=1.0):
    """Poll ``predicate`` until it is true or ``timeout`` seconds passed."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def stream():
    """Fresh fake stream, closed after the test."""
    fake = FakeStream()
    yield fake
    fake.close()


@pytest.fixture
def wait_for():
    return wait_until
