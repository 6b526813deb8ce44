"""Communication logger for the serial link.

CommunicationLogger records commands, received lines, port events and
errors as LogEntry objects. Entries at or above the current level are kept
in a bounded in-memory buffer and optionally written to stderr and to a
rotating log file.
"""

from collections import deque
from datetime import datetime
from threading import Lock
from typing import Optional, List, Dict, Any, Union
import logging
import sys

from rn2483.logging.log_models import LogEntry
from rn2483.logging.file_handler import FileHandler
from rn2483.config.config_models import LogLevel, LoggingConfig

_STATUS_LEVELS = {
    "SUCCESS": "INFO",
    "TIMEOUT": "WARNING",
}


def _level_name(level: Union[LogLevel, str]) -> str:
    return level.value if isinstance(level, LogLevel) else str(level).upper()


def _level_number(name: str) -> int:
    number = logging.getLevelName(name)
    return number if isinstance(number, int) else logging.DEBUG


class CommunicationLogger:
    """Structured log of everything that crosses the serial link.

    Attributes:
        log_level: Current level name (DEBUG, INFO, WARNING, ERROR)
        enable_file: True when entries are also written to log_file_path
        enable_console: True when entries are also printed to stderr
        log_file_path: Log file path, or None

    Example:
        >>> logger = CommunicationLogger(log_level=LogLevel.DEBUG)
        >>> logger.log_command(port="/dev/ttyAMA0", command="sys get ver")
        >>> logger.get_entries()[-1].command
        'sys get ver'
        >>> logger.close()
    """

    BUFFER_SIZE = 1000

    def __init__(
        self,
        log_level: Union[LogLevel, str] = LogLevel.INFO,
        enable_file: bool = False,
        enable_console: bool = True,
        log_file_path: Optional[str] = None,
        max_file_size_mb: float = 10,
        backup_count: int = 5
    ):
        """Set up the buffer and output destinations.

        Args:
            log_level: Minimum level recorded
            enable_file: Also write to log_file_path
            enable_console: Also print to stderr
            log_file_path: Required when enable_file is set
            max_file_size_mb: Size that triggers rotation of the log file
            backup_count: Rotated files kept

        Raises:
            ValueError: enable_file without log_file_path
        """
        if enable_file and not log_file_path:
            raise ValueError("log_file_path required when enable_file=True")

        self.log_level = _level_name(log_level)
        self.enable_console = enable_console
        self.log_file_path = log_file_path
        self._threshold = _level_number(self.log_level)
        self._entries: deque = deque(maxlen=self.BUFFER_SIZE)
        self._lock = Lock()
        self._file: Optional[FileHandler] = None

        if enable_file:
            try:
                self._file = FileHandler(log_file_path, max_size_mb=max_file_size_mb,
                                         backup_count=backup_count)
            except OSError as e:
                print(f"WARNING: File logging disabled, cannot open {log_file_path}: {e}",
                      file=sys.stderr)
        self.enable_file = self._file is not None

    @classmethod
    def from_config(cls, config: LoggingConfig) -> Optional['CommunicationLogger']:
        """Build a logger from a LoggingConfig, or None when logging is disabled.

        log_to_file without a log_file_path leaves file output off.
        """
        if not config.enabled:
            return None
        path = config.log_file_path if config.log_to_file else None
        return cls(
            log_level=config.level,
            enable_file=bool(path),
            enable_console=config.log_to_console,
            log_file_path=path,
            max_file_size_mb=config.max_file_size_mb,
            backup_count=config.backup_count
        )

    def set_level(self, level: Union[LogLevel, str]) -> None:
        self.log_level = _level_name(level)
        self._threshold = _level_number(self.log_level)

    def log(self, entry: LogEntry) -> None:
        """Record an entry in every destination if its level passes the threshold."""
        if _level_number(entry.level) < self._threshold:
            return

        with self._lock:
            self._entries.append(entry)
            if self._file is not None:
                self._file.write(entry)
            if self.enable_console:
                try:
                    print(entry.to_string(), file=sys.stderr)
                except (OSError, ValueError):
                    # stderr closed or detached
                    pass

    def _record(self, level: str, source: str, message: str, **fields: Any) -> None:
        self.log(LogEntry(timestamp=datetime.now(), level=level, source=source,
                          message=message, **fields))

    def log_command(self, port: str, command: str) -> None:
        """Record a command written to the module."""
        self._record("INFO", "CommandExecutor", "Sending command", port=port, command=command)

    def log_response(
        self,
        port: str,
        response: str,
        status: str,
        execution_time: float,
        command: Optional[str] = None
    ) -> None:
        """Record the outcome of a command.

        SUCCESS is logged at INFO, TIMEOUT at WARNING, anything else at ERROR.
        """
        self._record(_STATUS_LEVELS.get(status, "ERROR"), "CommandExecutor", "Received response",
                     port=port, command=command, response=response, status=status,
                     execution_time=execution_time)

    def log_port_event(
        self,
        event: str,
        port: str,
        details: Optional[Dict[str, Any]] = None,
        level: str = "INFO"
    ) -> None:
        """Record a serial port event such as "Port opened"."""
        self._record(level, "SerialHandler", event, port=port, details=details)

    def log_error(self, source: str, error: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._record("ERROR", source, "Error occurred", error=error, details=details)

    def get_entries(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Recorded entries, oldest first; limit keeps only the newest."""
        with self._lock:
            entries = list(self._entries)
        return entries[-limit:] if limit else entries

    def clear_buffer(self) -> None:
        """Forget buffered entries; the log file is untouched."""
        with self._lock:
            self._entries.clear()

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self) -> None:
        """Close the log file. Safe to call more than once."""
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
