"""Log data models for communication logging.

This module defines the immutable log entry used for commands, received
lines, port events and errors.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Dict, Any, Optional
import json

# Optional fields appended to the text form, in order
_TEXT_FIELDS = (
    ("command", "CMD: {}"),
    ("response", "RESP: {}"),
    ("status", "STATUS: {}"),
    ("execution_time", "TIME: {:.3f}s"),
    ("error", "ERROR: {}"),
)


@dataclass(frozen=True)
class LogEntry:
    """Immutable log entry for communication logging.

    Attributes:
        timestamp: When the event occurred
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        source: Component name (Connection, SerialHandler, CommandExecutor, ...)
        message: Human-readable message describing the event
        details: Additional structured data (arbitrary dict)
        port: Serial port name (optional)
        command: Command sent (optional)
        response: Response text received (optional)
        status: Response status name (SUCCESS, TIMEOUT, ...) (optional)
        execution_time: Command execution time in seconds (optional)
        error: Error message if applicable (optional)

    Example:
        >>> entry = LogEntry(
        ...     timestamp=datetime(2025, 1, 12, 10, 30, 15, 234000),
        ...     level="INFO",
        ...     source="CommandExecutor",
        ...     message="Received response",
        ...     command="sys get ver",
        ...     status="SUCCESS",
        ...     execution_time=0.123
        ... )
        >>> entry.to_string()
        '2025-01-12 10:30:15.234 | INFO    | CommandExecutor | Received response | CMD: sys get ver | STATUS: SUCCESS | TIME: 0.123s'
    """

    timestamp: datetime
    level: str
    source: str
    message: str
    details: Optional[Dict[str, Any]] = None

    port: Optional[str] = None
    command: Optional[str] = None
    response: Optional[str] = None
    status: Optional[str] = None
    execution_time: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary, timestamp in ISO 8601."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_string(self) -> str:
        """Format as "YYYY-MM-DD HH:MM:SS.mmm | LEVEL | SOURCE | MESSAGE" plus set fields.

        Empty text fields are omitted; an execution time of zero is shown.
        """
        parts = [
            self.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3],
            f"{self.level:7}",
            f"{self.source:15}",
            self.message,
        ]
        for name, template in _TEXT_FIELDS:
            value = getattr(self, name)
            if value is None or value == "":
                continue
            parts.append(template.format(value))
        return " | ".join(parts)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogEntry':
        """Create LogEntry from dictionary; timestamp may be an ISO string.

        Unknown keys are ignored; missing optional fields default to None.
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if isinstance(values.get('timestamp'), str):
            values['timestamp'] = datetime.fromisoformat(values['timestamp'])
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> 'LogEntry':
        return cls.from_dict(json.loads(json_str))
