"""Background delivery of asynchronous radio messages.

Observer callbacks run on a dedicated worker thread fed by a queue, so a
slow observer never stalls the listener loop that reads the serial port.
"""

import logging
import queue
import threading
from typing import Callable, Optional

MessageCallback = Callable[[str], None]

_LOGGER = logging.getLogger(__name__)
_STOP = object()


class MessageDispatcher:
    """Queue-fed worker thread invoking message observers in arrival order.

    Example:
        >>> dispatcher = MessageDispatcher()
        >>> dispatcher.start()
        >>> dispatcher.submit(print, "radio_rx 48656C6C6F")
        >>> dispatcher.stop(timeout=1.0)
        radio_rx 48656C6C6F
        True
    """

    def __init__(self, name: str = "RN2483-Dispatcher"):
        self.name = name
        self._queue: Optional[queue.Queue] = None
        self._cancel: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the worker thread. No-op if already running."""
        if self.is_running():
            return
        # Fresh queue and cancel flag per run; an abandoned worker keeps its own.
        self._queue = queue.Queue()
        self._cancel = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._queue, self._cancel),
            name=self.name,
            daemon=True
        )
        self._thread.start()

    def submit(self, callback: MessageCallback, line: str) -> bool:
        """Queue a callback invocation.

        Returns:
            False if the dispatcher is not running and the message was dropped
        """
        if self._queue is None or not self.is_running():
            return False
        self._queue.put((callback, line))
        return True

    def stop(self, timeout: float = 1.0) -> bool:
        """Deliver already queued messages, then stop the worker.

        Messages still pending when the bounded wait expires are discarded.

        Returns:
            True if the worker thread has terminated
        """
        thread = self._thread
        if thread is None:
            return True
        self._queue.put(_STOP)
        thread.join(timeout)
        if thread.is_alive():
            _LOGGER.warning("Message observer still busy after %.1fs; dropping queued messages",
                            timeout)
            self._cancel.set()
            self._thread = None
            return False
        self._thread = None
        return True

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @staticmethod
    def _run(messages: queue.Queue, cancel: threading.Event) -> None:
        while True:
            item = messages.get()
            if item is _STOP or cancel.is_set():
                break
            callback, line = item
            try:
                callback(line)
            except Exception:
                _LOGGER.exception("Message observer raised on line %r", line)
