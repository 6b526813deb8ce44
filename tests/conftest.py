"""Shared fixtures: an in-memory transport standing in for the serial port."""

import threading
import time
from typing import Callable, Dict, List, Optional, Union

import pytest

from rn2483.config.config_models import (
    Config,
    SerialConfig,
    CommandConfig,
    ListenerConfig,
)
from rn2483.core.connection import Connection
from rn2483.core.transport import Transport

Reply = Union[bytes, List[bytes]]


class FakeTransport(Transport):
    """Scripted transport.

    Writing a command whose text (terminator stripped) is a key of
    ``responses`` makes the matching reply readable, as one chunk or as a
    list of chunks.
    """

    def __init__(self,
                 port: str = "/dev/ttyFAKE",
                 responses: Optional[Dict[str, Reply]] = None,
                 open_error: Optional[Exception] = None):
        self.port = port
        self.responses: Dict[str, Reply] = dict(responses or {})
        self.open_error = open_error
        self.written: List[bytes] = []
        self.write_error: Optional[Exception] = None
        self.short_write = False
        self.read_error: Optional[Exception] = None
        self.reset_count = 0
        self.open_count = 0
        self._incoming = bytearray()
        self._lock = threading.Lock()
        self._open = False

    def open(self) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.open_count += 1
        self._open = True

    def close(self) -> None:
        self._open = False

    def is_connected(self) -> bool:
        return self._open

    def bytes_available(self) -> int:
        if self.read_error is not None:
            raise self.read_error
        with self._lock:
            return len(self._incoming)

    def read(self, size: int) -> bytes:
        with self._lock:
            data = bytes(self._incoming[:size])
            del self._incoming[:size]
            return data

    def write(self, data: bytes) -> int:
        if self.write_error is not None:
            raise self.write_error
        self.written.append(data)
        reply = self.responses.get(data.decode('ascii').strip())
        if reply is not None:
            chunks = reply if isinstance(reply, list) else [reply]
            for chunk in chunks:
                self.inject(chunk)
        return len(data) - 1 if self.short_write else len(data)

    def reset_input_buffer(self) -> None:
        self.reset_count += 1
        with self._lock:
            self._incoming.clear()

    def inject(self, data: bytes) -> None:
        """Make bytes readable as if the module had sent them."""
        with self._lock:
            self._incoming.extend(data)


def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def wait_for():
    """Poll a predicate until it holds or the timeout expires."""
    return _wait_for


@pytest.fixture
def fast_config():
    """Config with no settle delay and short timeouts."""
    return Config(
        serial=SerialConfig(port="/dev/ttyFAKE", settle_delay_ms=0),
        command=CommandConfig(response_timeout_ms=1000, poll_interval_ms=20),
        listener=ListenerConfig(idle_sleep_ms=1, read_buffer_size=1024, join_timeout_ms=1000),
    )


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def connection(fast_config, fake_transport):
    """Connected Connection over the fake transport; closed after the test."""
    conn = Connection(fast_config, transport_factory=lambda port: fake_transport)
    assert conn.connect()
    yield conn
    conn.close()
