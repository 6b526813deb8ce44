"""Connection to an RN2483 module.

Owns the transport, the listener loop and the command executor for one
serial port, and exposes connect/close/send without raising.
"""

from typing import Callable, List, Optional
import time

from rn2483.config.config_models import Config
from rn2483.core.command_executor import CommandExecutor
from rn2483.core.command_response import CommandResponse, ResponseStatus
from rn2483.core.dispatcher import MessageCallback, MessageDispatcher
from rn2483.core.exceptions import (
    ListenerIOError,
    NotConnectedError,
    PortNotFoundError,
    SerialPortError,
)
from rn2483.core.line_assembler import LineAssembler
from rn2483.core.listener import ListenerLoop
from rn2483.core.response_router import PendingResponseBuffer, ResponseRouter
from rn2483.core.serial_handler import SerialHandler
from rn2483.core.transport import Transport
from rn2483.logging.communication_logger import CommunicationLogger
from rn2483.logging.trace_sink import DebugCallback, TraceSink

TransportFactory = Callable[[str], Transport]


class Connection:
    """Connection to one radio module over one transport.

    Lines read by the background listener are routed to the pending
    response of the command in flight and to the message observer.
    Failures are reported through the debug sink and encoded in return
    values; no public method raises for transport errors.

    Example:
        >>> config = Config(serial=SerialConfig(port='/dev/ttyAMA0', baud_rate=57600))
        >>> with Connection(config) as lora:
        ...     lora.set_message_callback(print)
        ...     if lora.connect():
        ...         print(lora.send('sys get ver').get_response_text())
        RN2483 1.0.5 Oct 31 2018 15:06:52
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 logger: Optional[CommunicationLogger] = None,
                 transport_factory: Optional[TransportFactory] = None):
        """Initialize an unconnected Connection.

        Args:
            config: Link configuration (defaults apply when omitted)
            logger: Optional CommunicationLogger for port, command and line records
            transport_factory: Builds the transport for a port name; defaults
                to a SerialHandler built from config.serial
        """
        self.config = config or Config()
        self.logger = logger
        self._transport_factory = transport_factory or self._serial_transport
        self.trace = TraceSink(source="Connection", logger=logger)

        self.buffer = PendingResponseBuffer()
        self.dispatcher = MessageDispatcher()
        self.router = ResponseRouter(
            self.buffer,
            dispatcher=self.dispatcher,
            trace=self.trace.debug,
            mode=self.config.routing.mode
        )
        self.assembler = LineAssembler()

        self.transport: Optional[Transport] = None
        self.listener: Optional[ListenerLoop] = None
        self.executor: Optional[CommandExecutor] = None
        self.last_error: Optional[Exception] = None

    def _serial_transport(self, port: str) -> Transport:
        return SerialHandler.from_config(self.config.serial, port=port, logger=self.logger)

    def connect(self, port: Optional[str] = None) -> bool:
        """Open the port and start listening.

        Any existing connection is closed first.

        Args:
            port: Port name; falls back to config.serial.port

        Returns:
            True on success; False with a logged diagnostic otherwise
        """
        self.close()
        if self.listener is not None:
            self.trace.error("Previous listener is still reading; cannot reconnect yet")
            return False
        self.last_error = None

        port = port or self.config.serial.port
        if not port:
            self.trace.error("No serial port given or configured")
            return False

        self.trace.debug(f"Opening port {port}")
        try:
            transport = self._transport_factory(port)
            transport.open()
        except PortNotFoundError as e:
            self.last_error = e
            self.trace.error(f"Port '{port}' not found", port=port, error=str(e))
            self._trace_available_ports()
            return False
        except SerialPortError as e:
            self.last_error = e
            self.trace.error(f"Unable to open port '{port}'. Check permissions.",
                             port=port, error=str(e))
            self.trace.debug("On Linux, try: sudo usermod -a -G dialout $USER")
            return False

        self.transport = transport
        self.trace.info(f"Port opened: {port} at {self.config.serial.baud_rate} baud", port=port)
        self._drain_input()

        self.assembler.reset()
        self.buffer.clear()
        self.dispatcher.start()

        listener_config = self.config.listener
        self.listener = ListenerLoop(
            transport,
            self.assembler,
            self.router,
            idle_sleep=listener_config.idle_sleep_ms / 1000.0,
            read_buffer_size=listener_config.read_buffer_size,
            trace=self.trace.debug,
            on_error=self._on_listener_error
        )
        self.executor = CommandExecutor(
            transport,
            self.buffer,
            self.router,
            default_timeout=self.config.command.response_timeout_ms / 1000.0,
            poll_interval=self.config.command.poll_interval_ms / 1000.0,
            trace=self.trace,
            logger=self.logger
        )
        self.listener.start()
        return True

    def _drain_input(self) -> None:
        """Let the port settle, then drop whatever the module sent before we listened."""
        delay = self.config.serial.settle_delay_ms / 1000.0
        if delay > 0:
            time.sleep(delay)
        try:
            self.transport.reset_input_buffer()
        except SerialPortError as e:
            self.trace.warning(f"Could not drain input buffer: {e}")

    def _trace_available_ports(self) -> None:
        try:
            ports = SerialHandler.discover_ports()
        except Exception as e:
            self.trace.warning(f"Port discovery failed: {e}")
            return
        if not ports:
            self.trace.info("Available serial ports: none detected")
            return
        names = ", ".join(f"{p.device} ({p.description})" for p in ports)
        self.trace.info(f"Available serial ports: {names}")

    def _on_listener_error(self, error: ListenerIOError) -> None:
        self.last_error = error
        self.trace.error(f"Listener error: {error}", error=str(error))

    def is_connected(self) -> bool:
        """True while the transport is open and the listener is running."""
        return (self.transport is not None
                and self.transport.is_connected()
                and self.listener is not None
                and self.listener.is_running())

    def send(self,
             command: str,
             expect_response: bool = True,
             timeout: Optional[float] = None) -> CommandResponse:
        """Send a command and aggregate its response.

        Only one command may be in flight per connection; serialize
        concurrent callers.

        Args:
            command: Command text without terminator
            expect_response: Wait for response lines (default True)
            timeout: Override the configured deadline in seconds

        Returns:
            CommandResponse; status NOT_CONNECTED when not listening
        """
        executor = self.executor
        if not self.is_connected() or executor is None:
            message = str(NotConnectedError("Not connected to the module"))
            self.trace.error(message, command=command)
            return CommandResponse(
                command=command,
                raw_response=[],
                status=ResponseStatus.NOT_CONNECTED,
                error_message=message
            )
        return executor.execute(command, expect_response=expect_response, timeout=timeout)

    def send_batch(self, commands: List[str]) -> List[CommandResponse]:
        """Send commands one after another, continuing past failures."""
        return [self.send(command) for command in commands]

    def get_history(self) -> List[CommandResponse]:
        """Responses of the current connection, oldest first."""
        if self.executor is None:
            return []
        return self.executor.get_history()

    def set_message_callback(self, callback: Optional[MessageCallback]) -> None:
        """Register the observer for asynchronous lines (None to clear).

        The observer runs on a dispatcher thread, never on the listener.
        """
        self.router.set_message_callback(callback)

    def set_debug_callback(self, callback: Optional[DebugCallback]) -> None:
        """Register the sink for timestamped trace lines (None to clear)."""
        self.trace.callback = callback

    def close(self) -> None:
        """Stop listening and release the transport.

        The listener is joined before the port is closed, so no read races
        the close. If it does not stop within the join timeout the port is
        left open and a later close() retries. Queued messages are delivered
        before this returns; the observer is not called afterwards. Safe to
        call multiple times.
        """
        join_timeout = self.config.listener.join_timeout_ms / 1000.0

        listener = self.listener
        if listener is not None:
            if listener.stop(join_timeout):
                self.listener = None
            else:
                self.trace.warning("Listener did not stop within the join timeout; "
                                   "port left open until the next close()")

        transport = self.transport
        if transport is not None and self.listener is None:
            was_open = transport.is_connected()
            transport.close()
            if was_open:
                self.trace.info("Serial port closed", port=transport.port)
            self.transport = None

        self.executor = None
        self.buffer.clear()
        self.dispatcher.stop(join_timeout)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        port = self.transport.port if self.transport is not None else self.config.serial.port
        status = "connected" if self.is_connected() else "disconnected"
        return f"Connection(port='{port}', status={status})"
