"""Serial port transport for the RN2483 link.

This module provides the pyserial-backed Transport with error translation
and port discovery.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING
import errno
import threading
import time

import serial
from serial.tools import list_ports

from rn2483.core.exceptions import (
    SerialPortError,
    PortNotFoundError,
    OpenFailedError,
    SerialPortBusyError,
)
from rn2483.core.transport import Transport

# Avoid circular import for type hints
if TYPE_CHECKING:
    from rn2483.config.config_models import SerialConfig
    from rn2483.logging.communication_logger import CommunicationLogger


_PARITIES = {
    'N': serial.PARITY_NONE,
    'E': serial.PARITY_EVEN,
    'O': serial.PARITY_ODD,
    'M': serial.PARITY_MARK,
    'S': serial.PARITY_SPACE,
}

_STOP_BITS = {
    1: serial.STOPBITS_ONE,
    1.5: serial.STOPBITS_ONE_POINT_FIVE,
    2: serial.STOPBITS_TWO,
}

_NOT_FOUND_MARKERS = ("no such file", "cannot find the file", "filenotfound")
_DENIED_MARKERS = ("permission denied", "access denied", "access is denied")


@dataclass
class PortInfo:
    """Serial port information from discovery.

    Attributes:
        device: Port device path (e.g., '/dev/ttyUSB0', 'COM3')
        description: Human-readable port description
        hwid: Hardware identifier (USB VID:PID, etc.)
    """
    device: str
    description: str
    hwid: str


class SerialHandler(Transport):
    """Manages the serial port lifecycle and raw byte I/O.

    Wraps pyserial exceptions in the link's own types. Reads are expected
    from the listener thread only and writes from command senders, so
    only open and close are guarded by the lifecycle lock.

    Example:
        >>> handler = SerialHandler('/dev/ttyAMA0', baud_rate=57600)
        >>> handler.open()
        >>> handler.write(b'sys get ver\\r\\n')
        13
        >>> handler.close()
    """

    def __init__(self,
                 port: str,
                 baud_rate: int = 9600,
                 data_bits: int = 8,
                 stop_bits: float = 1,
                 parity: str = 'N',
                 flow_control: bool = False,
                 read_timeout: float = 0.1,
                 write_timeout: float = 0.0,
                 logger: Optional['CommunicationLogger'] = None):
        """Initialize handler with port configuration.

        Args:
            port: Serial port device path
            baud_rate: Baud rate (default 9600, the module's power-on rate)
            data_bits: Data bits per character (default 8)
            stop_bits: Stop bits, 1, 1.5 or 2 (default 1)
            parity: One of N, E, O, M, S (default N)
            flow_control: Enable RTS/CTS hardware flow control (default False)
            read_timeout: Read timeout in seconds (default 0.1)
            write_timeout: Write timeout in seconds, 0 blocks (default 0)
            logger: Optional CommunicationLogger for port events
        """
        self.port = port
        self.baud_rate = baud_rate
        self.data_bits = data_bits
        self.stop_bits = stop_bits
        self.parity = parity
        self.flow_control = flow_control
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.logger = logger
        self._serial: Optional[serial.Serial] = None
        self._lock = threading.Lock()
        self._opened_at: Optional[float] = None

    @classmethod
    def from_config(cls,
                    config: 'SerialConfig',
                    port: Optional[str] = None,
                    logger: Optional['CommunicationLogger'] = None) -> 'SerialHandler':
        """Build a handler from a SerialConfig section.

        Args:
            config: Serial settings
            port: Overrides config.port when given
            logger: Optional CommunicationLogger

        Raises:
            ValueError: No port given and none configured
        """
        port = port or config.port
        if not port:
            raise ValueError("No serial port configured")
        return cls(
            port,
            baud_rate=config.baud_rate,
            data_bits=config.data_bits,
            stop_bits=config.stop_bits,
            parity=config.parity,
            flow_control=config.flow_control,
            read_timeout=config.read_timeout_ms / 1000.0,
            write_timeout=config.write_timeout_ms / 1000.0,
            logger=logger
        )

    def open(self) -> None:
        """Open and configure the serial port. No-op if already open.

        Raises:
            PortNotFoundError: Port doesn't exist
            SerialPortBusyError: Port already in use
            OpenFailedError: Permission denied or any other open failure
        """
        with self._lock:
            if self._serial is not None and self._serial.is_open:
                return
            try:
                self._serial = serial.Serial(**self._port_settings())
            except serial.SerialException as e:
                self._log_failure(f"Failed to open port: {e}", e)
                raise self._translate_open_error(e)
            except (OSError, ValueError) as e:
                self._log_failure(f"Unexpected error opening port: {e}", e)
                raise OpenFailedError(f"Cannot open port {self.port}: {e}", self.port, e)

            self._opened_at = time.monotonic()
            self._log_event("Port opened", {
                "baud_rate": self.baud_rate,
                "framing": f"{self.data_bits}{self.parity.upper()}{self.stop_bits:g}",
                "flow_control": self.flow_control,
            })

    def _port_settings(self) -> dict:
        return {
            "port": self.port,
            "baudrate": self.baud_rate,
            "bytesize": self.data_bits,
            "stopbits": _STOP_BITS.get(self.stop_bits, serial.STOPBITS_ONE),
            "parity": _PARITIES.get(self.parity.upper(), serial.PARITY_NONE),
            "rtscts": self.flow_control,
            "xonxoff": False,
            "timeout": self.read_timeout,
            # pyserial treats None as blocking; 0 would mean non-blocking
            "write_timeout": self.write_timeout or None,
        }

    def _translate_open_error(self, error: serial.SerialException) -> SerialPortError:
        """Map a pyserial open failure onto the link's exception types."""
        text = str(error).lower()

        if getattr(error, 'errno', None) == errno.ENOENT or \
                any(marker in text for marker in _NOT_FOUND_MARKERS):
            return PortNotFoundError(f"Port {self.port} not found", self.port, error)
        if 'busy' in text or 'in use' in text:
            return SerialPortBusyError(f"Port {self.port} is already in use", self.port, error)
        if any(marker in text for marker in _DENIED_MARKERS):
            return OpenFailedError(f"Permission denied accessing port {self.port}", self.port, error)
        return OpenFailedError(f"Failed to open port {self.port}: {error}", self.port, error)

    def close(self) -> None:
        """Close the port. Does nothing if it is not open."""
        with self._lock:
            ser = self._serial
            if ser is None or not ser.is_open:
                return
            opened_at, self._opened_at = self._opened_at, None
            try:
                ser.close()
            except (serial.SerialException, OSError) as e:
                self._log_failure(f"Error closing port: {e}", e)
                return
            details = None
            if opened_at is not None:
                details = {"session_seconds": round(time.monotonic() - opened_at, 3)}
            self._log_event("Port closed", details)

    def _log_event(self, event: str, details: Optional[dict] = None) -> None:
        if self.logger:
            self.logger.log_port_event(event=event, port=self.port, details=details)

    def _log_failure(self, message: str, error: Exception) -> None:
        if self.logger:
            self.logger.log_error(
                source="SerialHandler",
                error=message,
                details={"port": self.port, "error_type": type(error).__name__}
            )

    def is_connected(self) -> bool:
        """Check if port is currently open."""
        with self._lock:
            return self._serial is not None and self._serial.is_open

    def bytes_available(self) -> int:
        """Return the number of bytes waiting in the input buffer.

        Raises:
            SerialPortError: Port not open or query failed
        """
        ser = self._require_open("query")
        with self._io_errors("query input buffer on"):
            return ser.in_waiting

    def read(self, size: int) -> bytes:
        """Read up to size bytes; fewer (or none) when the read timeout expires.

        Raises:
            SerialPortError: Port not open or read failed
        """
        ser = self._require_open("read from")
        with self._io_errors("read from"):
            return ser.read(size)

    def write(self, data: bytes) -> int:
        """Write bytes and flush.

        Returns:
            Number of bytes written

        Raises:
            SerialPortError: Port not open, write timeout or write failed
        """
        ser = self._require_open("write to")
        try:
            with self._io_errors("write to"):
                written = ser.write(data)
                ser.flush()
        except SerialPortError as e:
            if isinstance(e.os_error, serial.SerialTimeoutException):
                raise SerialPortError(f"Write timeout on port {self.port}", self.port, e.os_error)
            raise
        return written or 0

    def reset_input_buffer(self) -> None:
        """Discard any unread input.

        Raises:
            SerialPortError: Port not open or flush failed
        """
        ser = self._require_open("flush")
        with self._io_errors("flush input on"):
            ser.reset_input_buffer()

    @contextmanager
    def _io_errors(self, action: str):
        try:
            yield
        except (serial.SerialException, OSError) as e:
            raise SerialPortError(f"Failed to {action} port {self.port}: {e}", self.port, e)

    def _require_open(self, action: str) -> serial.Serial:
        ser = self._serial
        if ser is None or not ser.is_open:
            raise SerialPortError(f"Cannot {action} closed port", self.port, None)
        return ser

    @staticmethod
    def discover_ports() -> List[PortInfo]:
        """Enumerate available serial ports.

        Example:
            >>> for port in SerialHandler.discover_ports():
            ...     print(f"{port.device}: {port.description}")
            /dev/ttyAMA0: ttyAMA0
            /dev/ttyUSB0: USB Serial Port
        """
        ports = []
        for port_info in list_ports.comports():
            ports.append(PortInfo(
                device=port_info.device,
                description=port_info.description or "Unknown",
                hwid=port_info.hwid or "Unknown"
            ))
        return ports

    def __enter__(self):
        """Context manager entry: open port."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit: close port."""
        self.close()
        return False

    def __repr__(self) -> str:
        status = "open" if self.is_connected() else "closed"
        return f"SerialHandler(port='{self.port}', baud={self.baud_rate}, status={status})"
