"""Timestamped debug/trace output for a connection.

Every trace message becomes a LogEntry. The formatted entry goes to the
registered debug callback if there is one, otherwise to the stdlib logger,
and the entry itself is recorded by the optional CommunicationLogger.
"""

from datetime import datetime
from typing import Any, Callable, Optional
import logging

from rn2483.logging.log_models import LogEntry
from rn2483.logging.communication_logger import CommunicationLogger

DebugCallback = Callable[[str], None]

_LOGGER = logging.getLogger(__name__)

_STDLIB_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class TraceSink:
    """Best-effort trace sink; never raises into the caller."""

    def __init__(self,
                 source: str = "Connection",
                 logger: Optional[CommunicationLogger] = None,
                 callback: Optional[DebugCallback] = None):
        self.source = source
        self.logger = logger
        self.callback = callback

    def debug(self, message: str, **fields: Any) -> None:
        self.log("DEBUG", message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self.log("INFO", message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.log("WARNING", message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.log("ERROR", message, **fields)

    def log(self, level: str, message: str, **fields: Any) -> None:
        """Emit one trace message.

        Args:
            level: DEBUG, INFO, WARNING or ERROR
            message: Human-readable message
            **fields: Extra LogEntry fields (port, command, response, ...)
        """
        entry = LogEntry(
            timestamp=datetime.now(),
            level=level,
            source=self.source,
            message=message,
            **fields
        )

        if self.logger is not None:
            try:
                self.logger.log(entry)
            except Exception:
                _LOGGER.exception("Communication logger failed")

        callback = self.callback
        if callback is None:
            _LOGGER.log(_STDLIB_LEVELS.get(level, logging.DEBUG), "%s", entry.to_string())
            return

        try:
            callback(entry.to_string())
        except Exception:
            _LOGGER.exception("Debug callback failed")
