"""Abstract byte transport interface.

Defines the duplex channel the connection drives. The serial implementation
lives in serial_handler; tests substitute an in-memory implementation.
"""

from abc import ABC, abstractmethod


class Transport(ABC):
    """Duplex byte channel.

    Reads are owned by the listener loop; writes come from callers
    sending commands. Implementations raise SerialPortError subclasses.
    """

    port: str

    @abstractmethod
    def open(self) -> None:
        """Open the channel.

        Raises:
            PortNotFoundError: Port does not exist
            OpenFailedError: Port exists but cannot be opened
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the channel. Safe to call multiple times."""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Return True while the channel is open."""
        pass

    @abstractmethod
    def bytes_available(self) -> int:
        """Number of bytes that can be read without waiting."""
        pass

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read up to size bytes, honouring the configured read timeout."""
        pass

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write bytes and return the count actually written."""
        pass

    def reset_input_buffer(self) -> None:
        """Discard unread input. Optional; no-op by default."""
        pass
