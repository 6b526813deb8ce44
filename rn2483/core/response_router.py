"""Dispatch of received lines to the pending response and to observers."""

import logging
import queue
from typing import Callable, Optional

from rn2483.config.config_models import RoutingMode
from rn2483.core.dispatcher import MessageDispatcher, MessageCallback
from rn2483.core.protocol import OK_TOKEN

_LOGGER = logging.getLogger(__name__)


class PendingResponseBuffer:
    """Unbounded, thread-safe FIFO of lines awaiting the command in flight."""

    def __init__(self):
        self._queue: queue.Queue = queue.Queue()

    def put(self, line: str) -> None:
        self._queue.put(line)

    def get(self, timeout: float) -> Optional[str]:
        """Pop the oldest line, waiting at most timeout seconds.

        Returns:
            The line, or None if none arrived in time
        """
        try:
            return self._queue.get(timeout=max(timeout, 0.0))
        except queue.Empty:
            return None

    def clear(self) -> int:
        """Discard every buffered line and return how many were dropped."""
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return dropped
            dropped += 1

    def __len__(self) -> int:
        return self._queue.qsize()


class ResponseRouter:
    """Routes each assembled line to the trace sink, the pending response
    buffer and the message observer.

    In DUAL mode (the default) every line is buffered, and every line other
    than a bare "ok" or the echo of the command in flight is also passed to
    the observer. Callers must therefore tolerate seeing a command's own
    reply lines as messages. EXCLUSIVE mode sends a line to exactly one of
    the two sinks depending on whether a command is awaiting its response.
    """

    def __init__(self,
                 buffer: PendingResponseBuffer,
                 dispatcher: Optional[MessageDispatcher] = None,
                 trace: Optional[Callable[[str], None]] = None,
                 mode: RoutingMode = RoutingMode.DUAL):
        self.buffer = buffer
        self.dispatcher = dispatcher
        self.trace = trace
        self.mode = mode
        self._message_callback: Optional[MessageCallback] = None
        self._in_flight: Optional[str] = None
        self._last_sent: Optional[str] = None

    def set_message_callback(self, callback: Optional[MessageCallback]) -> None:
        """Register the single message observer, replacing any previous one."""
        self._message_callback = callback

    def begin_command(self, command: str) -> None:
        """Mark a command as awaiting its response lines."""
        self._in_flight = command
        self._last_sent = command

    def end_command(self) -> None:
        """Stop awaiting lines.

        The command stays the echo candidate until the next line arrives, so
        an echo that trails a fire-and-forget send is still recognised.
        """
        self._in_flight = None

    @property
    def in_flight(self) -> Optional[str]:
        return self._in_flight

    def route(self, line: str) -> None:
        """Deliver one line. Called on the listener thread, in stream order."""
        if self.trace is not None:
            try:
                self.trace(f"<< {line}")
            except Exception:
                _LOGGER.exception("Trace sink failed")

        if self.mode == RoutingMode.EXCLUSIVE:
            if self._in_flight is not None:
                self.buffer.put(line)
            else:
                self._notify(line)
            return

        self.buffer.put(line)
        self._notify(line)

    def _is_echo(self, line: str) -> bool:
        if self._in_flight is not None:
            return line == self._in_flight
        last_sent, self._last_sent = self._last_sent, None
        return last_sent is not None and line == last_sent

    def _notify(self, line: str) -> None:
        if self._is_echo(line):
            return
        callback = self._message_callback
        if callback is None or line == OK_TOKEN:
            return

        if self.dispatcher is not None:
            self.dispatcher.submit(callback, line)
            return

        try:
            callback(line)
        except Exception:
            _LOGGER.exception("Message observer raised on line %r", line)
