"""Perpetual background reader of the serial transport."""

import threading
from typing import Callable, Optional

from rn2483.core.exceptions import ListenerIOError, SerialPortError
from rn2483.core.line_assembler import LineAssembler
from rn2483.core.response_router import ResponseRouter
from rn2483.core.transport import Transport


class ListenerLoop:
    """Owns the read side of a transport for the lifetime of a connection.

    Each iteration polls the bytes available; when there are none it waits
    briefly on the stop event, otherwise it reads them, feeds the line
    assembler and routes every completed line on this same thread, so lines
    are delivered in stream order.

    A read failure while listening is reported through on_error and ends the
    loop. A failure right after stop() was requested is ignored.

    Example:
        >>> loop = ListenerLoop(handler, LineAssembler(), router)
        >>> loop.start()
        >>> loop.stop(timeout=1.0)
        True
    """

    def __init__(self,
                 transport: Transport,
                 assembler: LineAssembler,
                 router: ResponseRouter,
                 idle_sleep: float = 0.01,
                 read_buffer_size: int = 1024,
                 trace: Optional[Callable[[str], None]] = None,
                 on_error: Optional[Callable[[ListenerIOError], None]] = None,
                 name: str = "RN2483-Listener"):
        """Initialize the loop.

        Args:
            transport: Open transport to read from
            assembler: Line assembler fed with every chunk read
            router: Receives each completed line
            idle_sleep: Seconds to wait when no bytes are available
            read_buffer_size: Maximum bytes read per iteration
            trace: Optional sink for lifecycle messages
            on_error: Called with the error that terminated the loop
            name: Thread name
        """
        self.transport = transport
        self.assembler = assembler
        self.router = router
        self.idle_sleep = idle_sleep
        self.read_buffer_size = read_buffer_size
        self.trace = trace
        self.on_error = on_error
        self.name = name
        self.last_error: Optional[ListenerIOError] = None
        self._stop_event = threading.Event()
        self._listening = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the reader thread. No-op if already running."""
        if self.is_running():
            return
        self._stop_event.clear()
        self.last_error = None
        self._listening = True
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 1.0) -> bool:
        """Signal the loop to stop and wait for it.

        Args:
            timeout: Maximum seconds to wait for the thread

        Returns:
            True if the thread has terminated
        """
        self._listening = False
        self._stop_event.set()
        thread = self._thread
        if thread is None:
            return True
        if thread is not threading.current_thread():
            thread.join(timeout)
        stopped = not thread.is_alive()
        if stopped:
            self._thread = None
        return stopped

    def is_running(self) -> bool:
        """True while the thread is alive and has not been asked to stop."""
        return self._listening and self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        self._emit("Listener started")
        try:
            while not self._stop_event.is_set() and self.transport.is_connected():
                try:
                    available = self.transport.bytes_available()
                    if available <= 0:
                        self._stop_event.wait(self.idle_sleep)
                        continue

                    data = self.transport.read(min(self.read_buffer_size, available))
                    if data:
                        for line in self.assembler.feed(data):
                            self.router.route(line)

                except Exception as e:
                    if self._listening:
                        self._report(e)
                    break
        finally:
            self._listening = False
            self._emit("Listener stopped")

    def _report(self, error: Exception) -> None:
        if isinstance(error, ListenerIOError):
            listener_error = error
        else:
            port = getattr(self.transport, 'port', 'unknown')
            os_error = error.os_error if isinstance(error, SerialPortError) else error
            listener_error = ListenerIOError(f"Listener read failed: {error}", port, os_error)
        self.last_error = listener_error
        if self.on_error is not None:
            self.on_error(listener_error)

    def _emit(self, message: str) -> None:
        if self.trace is not None:
            self.trace(message)
