"""Configuration data models for the RN2483 link.

This module defines immutable configuration dataclasses with defaults
matching the module's power-on settings. All dataclasses are frozen.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any


class RoutingMode(Enum):
    """How received lines are split between command responses and observers.

    DUAL: every line feeds the pending response and, unless it is "ok" or the
        echo of the command in flight, the message observer as well.
    EXCLUSIVE: while a command awaits its response lines only feed that
        response; otherwise they only reach the observer.
    """
    DUAL = "dual"
    EXCLUSIVE = "exclusive"


class LogLevel(Enum):
    """Logging level."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SerialConfig:
    """Serial port configuration."""
    port: Optional[str] = None
    baud_rate: int = 9600
    data_bits: int = 8
    stop_bits: float = 1
    parity: str = "N"
    flow_control: bool = False
    read_timeout_ms: int = 100
    write_timeout_ms: int = 0  # 0 blocks until written
    settle_delay_ms: int = 100  # wait before draining input after open


@dataclass(frozen=True)
class CommandConfig:
    """Command/response correlation timing."""
    response_timeout_ms: int = 5000
    poll_interval_ms: int = 100


@dataclass(frozen=True)
class ListenerConfig:
    """Background listener loop settings."""
    idle_sleep_ms: int = 10
    read_buffer_size: int = 1024
    join_timeout_ms: int = 1000


@dataclass(frozen=True)
class RoutingConfig:
    """Line routing settings."""
    mode: RoutingMode = RoutingMode.DUAL


@dataclass(frozen=True)
class LoggingConfig:
    """Communication logging configuration."""
    enabled: bool = False
    level: LogLevel = LogLevel.INFO
    log_to_file: bool = False
    log_to_console: bool = True
    log_file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass(frozen=True)
class Config:
    """Complete configuration object with all sections."""
    serial: SerialConfig = field(default_factory=SerialConfig)
    command: CommandConfig = field(default_factory=CommandConfig)
    listener: ListenerConfig = field(default_factory=ListenerConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary with enum values unwrapped."""
        def convert_value(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, dict):
                return {k: convert_value(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_value(item) for item in obj]
            return obj

        return convert_value(asdict(self))
