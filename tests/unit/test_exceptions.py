"""Unit tests for the exception hierarchy."""

import pytest

from rn2483.core.exceptions import (
    RN2483Error,
    SerialPortError,
    PortNotFoundError,
    OpenFailedError,
    SerialPortBusyError,
    WriteFailedError,
    ListenerIOError,
    NotConnectedError,
    CommandTimeoutError,
    InvalidParameterError
)


class TestHierarchy:
    """Test inheritance relationships."""

    @pytest.mark.parametrize("exc_class", [
        PortNotFoundError,
        OpenFailedError,
        SerialPortBusyError,
        WriteFailedError,
        ListenerIOError,
    ])
    def test_transport_errors_are_serial_port_errors(self, exc_class):
        """Test transport failures can be caught as SerialPortError."""
        assert issubclass(exc_class, SerialPortError)
        assert issubclass(exc_class, RN2483Error)

    def test_busy_is_open_failure(self):
        """Test a busy port is a kind of open failure."""
        assert issubclass(SerialPortBusyError, OpenFailedError)

    @pytest.mark.parametrize("exc_class", [
        NotConnectedError,
        CommandTimeoutError,
        InvalidParameterError,
    ])
    def test_command_errors_are_base_errors(self, exc_class):
        """Test command failures derive from the base error only."""
        assert issubclass(exc_class, RN2483Error)
        assert not issubclass(exc_class, SerialPortError)


class TestSerialPortError:
    """Test SerialPortError formatting."""

    def test_str_with_cause(self):
        """Test message includes port and cause."""
        cause = OSError(13, "Permission denied")
        error = OpenFailedError("Permission denied accessing port /dev/ttyAMA0",
                                "/dev/ttyAMA0", cause)

        assert error.port == "/dev/ttyAMA0"
        assert error.os_error is cause
        assert "port: /dev/ttyAMA0" in str(error)
        assert "cause:" in str(error)

    def test_str_without_cause(self):
        """Test message without an underlying error."""
        error = PortNotFoundError("Port COM9 not found", "COM9")

        assert str(error) == "Port COM9 not found (port: COM9)"

    def test_write_failed_counts(self):
        """Test WriteFailedError keeps byte counts."""
        error = WriteFailedError("Short write", "/dev/ttyAMA0", written=10, expected=18)

        assert error.written == 10
        assert error.expected == 18


class TestCommandErrors:
    """Test command-level exceptions."""

    def test_timeout_message(self):
        """Test CommandTimeoutError message and attributes."""
        error = CommandTimeoutError("sys get ver", 5.0)

        assert error.command == "sys get ver"
        assert error.timeout == 5.0
        assert str(error) == "No response to 'sys get ver' within 5.000s"

    def test_invalid_parameter_message(self):
        """Test InvalidParameterError message and attributes."""
        error = InvalidParameterError("power", 20, "must be between -3 and 15 dBm")

        assert error.name == "power"
        assert error.value == 20
        assert str(error) == "Invalid power 20: must be between -3 and 15 dBm"
