"""Core link components.

This package provides the serial transport, the background listener and
the command/response correlation built on top of it.
"""

from rn2483.core.command_response import CommandResponse, ResponseStatus
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
from rn2483.core.transport import Transport
from rn2483.core.serial_handler import SerialHandler, PortInfo
from rn2483.core.line_assembler import LineAssembler
from rn2483.core.response_router import PendingResponseBuffer, ResponseRouter
from rn2483.core.dispatcher import MessageDispatcher
from rn2483.core.listener import ListenerLoop
from rn2483.core.command_executor import CommandExecutor
from rn2483.core.connection import Connection
from rn2483.core.device import RN2483

__all__ = [
    'CommandResponse',
    'ResponseStatus',
    'Transport',
    'SerialHandler',
    'PortInfo',
    'LineAssembler',
    'PendingResponseBuffer',
    'ResponseRouter',
    'MessageDispatcher',
    'ListenerLoop',
    'CommandExecutor',
    'Connection',
    'RN2483',
    'RN2483Error',
    'SerialPortError',
    'PortNotFoundError',
    'OpenFailedError',
    'SerialPortBusyError',
    'WriteFailedError',
    'ListenerIOError',
    'NotConnectedError',
    'CommandTimeoutError',
    'InvalidParameterError',
]
