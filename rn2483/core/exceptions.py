"""Custom exception hierarchy for the RN2483 link.

This module defines the exceptions raised by the transport and connection
layers, carrying the port or command context needed for diagnostics.
"""

from typing import Optional


class RN2483Error(Exception):
    """Base exception for all RN2483 link errors.

    All custom exceptions inherit from this base class to allow
    catching every link error with a single except clause.
    """
    pass


class SerialPortError(RN2483Error):
    """Serial port communication error.

    Raised when serial port operations fail (open, read, write).
    Captures port identifier and underlying OS error for diagnostics.

    Attributes:
        port: Serial port identifier (e.g., '/dev/ttyUSB0', 'COM3')
        os_error: Original exception from pyserial or OS (if available)
    """

    def __init__(self, message: str, port: str, os_error: Optional[Exception] = None):
        """Initialize SerialPortError.

        Args:
            message: Human-readable error description
            port: Serial port identifier
            os_error: Original exception from pyserial/OS
        """
        super().__init__(message)
        self.port = port
        self.os_error = os_error

    def __str__(self) -> str:
        """Format error message with port context."""
        base_msg = super().__str__()
        if self.os_error:
            return f"{base_msg} (port: {self.port}, cause: {self.os_error})"
        return f"{base_msg} (port: {self.port})"


class PortNotFoundError(SerialPortError):
    """Requested serial port does not exist."""
    pass


class OpenFailedError(SerialPortError):
    """Serial port exists but could not be opened.

    Most often a permissions problem; on Linux the user usually needs
    to be a member of the ``dialout`` group.
    """
    pass


class SerialPortBusyError(OpenFailedError):
    """Port is already in use by another process."""
    pass


class WriteFailedError(SerialPortError):
    """Command bytes could not be fully written.

    Attributes:
        written: Number of bytes actually written
        expected: Number of bytes that should have been written
    """

    def __init__(self, message: str, port: str, written: int = 0, expected: int = 0,
                 os_error: Optional[Exception] = None):
        super().__init__(message, port, os_error)
        self.written = written
        self.expected = expected


class ListenerIOError(SerialPortError):
    """Read failure while the listener loop was active.

    Fatal to the listener of that connection; the connection must be
    reopened before further commands can succeed.
    """
    pass


class NotConnectedError(RN2483Error):
    """Command attempted without an open, listening connection."""
    pass


class CommandTimeoutError(RN2483Error):
    """No terminal line arrived before the response deadline.

    Attributes:
        command: Command that timed out
        timeout: Deadline in seconds
    """

    def __init__(self, command: str, timeout: float):
        super().__init__(f"No response to '{command}' within {timeout:.3f}s")
        self.command = command
        self.timeout = timeout


class InvalidParameterError(RN2483Error):
    """Command parameter rejected before any I/O.

    Attributes:
        name: Parameter name
        value: Rejected value
    """

    def __init__(self, name: str, value: object, reason: str):
        super().__init__(f"Invalid {name} {value!r}: {reason}")
        self.name = name
        self.value = value
        self.reason = reason
