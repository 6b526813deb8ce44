"""Log file output with size-based rotation.

Entries are appended one per line. When the file reaches its size limit it
is renamed to ``<name>.1``, older backups shift up by one, and backups
beyond the configured count are deleted.
"""

from pathlib import Path
from threading import Lock
from typing import IO, Optional
import sys

from rn2483.logging.log_models import LogEntry


class FileHandler:
    """Thread-safe, rotating log file writer.

    Attributes:
        log_file_path: Resolved path of the active log file
        max_size_bytes: Size at which the file is rotated
        backup_count: Number of rotated files kept

    Example:
        >>> handler = FileHandler("~/.rn2483/logs/link.log", max_size_mb=10, backup_count=5)
        >>> handler.write(entry)
        True
        >>> handler.close()
    """

    def __init__(self, log_file_path: str, max_size_mb: float = 10, backup_count: int = 5):
        """Create the log directory if needed and open the file for appending.

        Raises:
            OSError: If the log directory cannot be created
        """
        self.log_file_path = Path(log_file_path).expanduser().resolve()
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self.backup_count = backup_count
        self._lock = Lock()
        self._file: Optional[IO[str]] = None
        self._closed = False

        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self._open()

    def _open(self) -> None:
        try:
            self._file = open(self.log_file_path, mode='a', encoding='utf-8')
        except OSError as e:
            print(f"ERROR: Failed to open log file {self.log_file_path}: {e}", file=sys.stderr)
            self._file = None

    def _backup_path(self, index: int) -> Path:
        return self.log_file_path.with_name(f"{self.log_file_path.name}.{index}")

    def write(self, entry: LogEntry) -> bool:
        """Append one entry, rotating first if the file is full.

        Returns:
            True if written, False if the handler is closed or the write failed
        """
        if self._closed:
            return False

        with self._lock:
            if self._file is None:
                return False
            try:
                if self._file.tell() >= self.max_size_bytes:
                    self._rotate()
                    if self._file is None:
                        return False
                self._file.write(entry.to_string() + '\n')
                self._file.flush()
                return True
            except OSError as e:
                print(f"ERROR: Failed to write log entry: {e}", file=sys.stderr)
                return False

    def _rotate(self) -> None:
        """Shift backups and start a new file. Caller holds the lock."""
        self._file.close()
        try:
            oldest = self._backup_path(self.backup_count)
            if oldest.exists():
                oldest.unlink()
            for index in range(self.backup_count - 1, 0, -1):
                src = self._backup_path(index)
                if src.exists():
                    src.replace(self._backup_path(index + 1))
            if self.backup_count > 0:
                self.log_file_path.replace(self._backup_path(1))
            else:
                self.log_file_path.unlink()
        except OSError as e:
            print(f"WARNING: Log rotation failed: {e}", file=sys.stderr)
        self._open()

    def flush(self) -> None:
        if self._closed:
            return
        with self._lock:
            if self._file is not None and not self._file.closed:
                self._file.flush()

    def close(self) -> None:
        """Flush and close the file. Idempotent."""
        if self._closed:
            return
        with self._lock:
            if self._file is not None and not self._file.closed:
                try:
                    self._file.close()
                except OSError as e:
                    print(f"ERROR: Failed to close log file: {e}", file=sys.stderr)
            self._file = None
            self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
