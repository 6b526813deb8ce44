"""Command/response correlation engine.

This module sends a command over the transport and aggregates the lines
the listener routes back into a single CommandResponse, bounded by a
response deadline.
"""

from typing import List, Optional
import threading
import time

from rn2483.core.command_response import CommandResponse, ResponseStatus
from rn2483.core.exceptions import (
    CommandTimeoutError,
    InvalidParameterError,
    RN2483Error,
    SerialPortError,
    WriteFailedError,
)
from rn2483.core.protocol import encode_command, is_terminal
from rn2483.core.response_router import PendingResponseBuffer, ResponseRouter
from rn2483.core.transport import Transport
from rn2483.logging.communication_logger import CommunicationLogger
from rn2483.logging.trace_sink import TraceSink


class CommandExecutor:
    """Sends commands and correlates them with the lines that follow.

    Correlation is positional: the buffer carries no command identity, so
    at most one command may be in flight at a time. Callers sharing a
    connection across threads must serialize their calls to execute().

    Example:
        >>> executor = CommandExecutor(handler, buffer, router, default_timeout=5.0)
        >>> response = executor.execute('sys get ver')
        >>> response.get_response_text()
        'RN2483 1.0.5 Oct 31 2018 15:06:52'
    """

    def __init__(self,
                 transport: Transport,
                 buffer: PendingResponseBuffer,
                 router: ResponseRouter,
                 default_timeout: float = 5.0,
                 poll_interval: float = 0.1,
                 trace: Optional[TraceSink] = None,
                 logger: Optional[CommunicationLogger] = None):
        """Initialize executor.

        Args:
            transport: Transport to write commands to
            buffer: Buffer the router fills with received lines
            router: Router told which command is in flight
            default_timeout: Response deadline in seconds (default 5.0)
            poll_interval: Maximum wait per buffer poll in seconds (default 0.1)
            trace: Debug/trace sink
            logger: Optional CommunicationLogger for command/response records
        """
        self.transport = transport
        self.buffer = buffer
        self.router = router
        self.default_timeout = default_timeout
        self.poll_interval = poll_interval
        self.trace = trace or TraceSink(source="CommandExecutor")
        self.logger = logger
        self._history: List[CommandResponse] = []
        self._history_lock = threading.Lock()

    def execute(self,
                command: str,
                expect_response: bool = True,
                timeout: Optional[float] = None) -> CommandResponse:
        """Send one command and wait for its response.

        Stale lines are discarded before writing. Lines equal to the command
        (echo) are skipped; every other line is aggregated until a terminal
        line arrives or the deadline passes.

        Args:
            command: Command text without terminator (e.g., "radio tx 48656C6C6F")
            expect_response: Wait for and aggregate response lines
            timeout: Override default deadline in seconds

        Returns:
            CommandResponse; never raises for I/O failures
        """
        timeout = timeout if timeout is not None else self.default_timeout
        start_time = time.monotonic()

        dropped = self.buffer.clear()
        if dropped:
            self.trace.debug(f"Discarded {dropped} stale line(s) before sending")

        self.router.begin_command(command)
        try:
            response = self._send_and_collect(command, expect_response, timeout, start_time)
        finally:
            self.router.end_command()

        with self._history_lock:
            self._history.append(response)

        if self.logger:
            self.logger.log_response(
                port=self._port(),
                response=response.get_response_text(),
                status=response.status.name,
                execution_time=response.execution_time,
                command=command
            )

        return response

    def execute_batch(self,
                      commands: List[str],
                      timeout: Optional[float] = None) -> List[CommandResponse]:
        """Execute commands in sequence, continuing past failures.

        Example:
            >>> responses = executor.execute_batch(['mac pause', 'radio set pwr 14'])
            >>> [r.status.value for r in responses]
            ['success', 'success']
        """
        return [self.execute(command, timeout=timeout) for command in commands]

    def get_history(self) -> List[CommandResponse]:
        """Get the responses produced by this executor, oldest first."""
        with self._history_lock:
            return self._history.copy()

    def clear_history(self) -> None:
        with self._history_lock:
            self._history.clear()

    def _send_and_collect(self,
                          command: str,
                          expect_response: bool,
                          timeout: float,
                          start_time: float) -> CommandResponse:
        try:
            data = encode_command(command)
        except UnicodeEncodeError:
            return self._failure(command, ResponseStatus.INVALID_PARAMETER, InvalidParameterError(
                "command", command, "must be ASCII text"), start_time)

        self.trace.debug(f">> {command}", command=command)
        if self.logger:
            self.logger.log_command(port=self._port(), command=command)

        try:
            written = self.transport.write(data)
        except SerialPortError as e:
            return self._failure(command, ResponseStatus.WRITE_FAILED, e, start_time)

        if written != len(data):
            return self._failure(command, ResponseStatus.WRITE_FAILED, WriteFailedError(
                f"Short write: {written} of {len(data)} bytes", self._port(),
                written=written, expected=len(data)), start_time)

        if not expect_response:
            return CommandResponse(
                command=command,
                raw_response=[],
                status=ResponseStatus.SUCCESS,
                execution_time=time.monotonic() - start_time
            )

        lines = self._collect(command, start_time + timeout)
        execution_time = time.monotonic() - start_time

        if not lines:
            return self._failure(command, ResponseStatus.TIMEOUT,
                                 CommandTimeoutError(command, timeout), start_time)

        return CommandResponse(
            command=command,
            raw_response=lines,
            status=ResponseStatus.SUCCESS,
            execution_time=execution_time
        )

    def _collect(self, command: str, deadline: float) -> List[str]:
        """Aggregate lines until a terminal line or the deadline.

        The loop only exits on a terminal line or once the deadline has
        passed, so a silent device always costs the full timeout.
        """
        lines: List[str] = []
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return lines

            line = self.buffer.get(min(self.poll_interval, remaining))
            if line is None:
                continue

            if line == command:
                continue

            lines.append(line)
            if is_terminal(line):
                return lines

    def _failure(self,
                 command: str,
                 status: ResponseStatus,
                 error: RN2483Error,
                 start_time: float) -> CommandResponse:
        message = str(error)
        self.trace.error(message, command=command, status=status.name)
        return CommandResponse(
            command=command,
            raw_response=[],
            status=status,
            execution_time=time.monotonic() - start_time,
            error_message=message
        )

    def _port(self) -> str:
        return getattr(self.transport, 'port', 'unknown')

    def __repr__(self) -> str:
        return (f"CommandExecutor(port={self._port()}, "
                f"timeout={self.default_timeout}s, "
                f"history={len(self._history)} commands)")
