"""Command response data model.

This module defines the immutable CommandResponse dataclass and ResponseStatus enum,
the structured outcome of every command sent to the radio module.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import time


class ResponseStatus(Enum):
    """Command outcome.

    - SUCCESS: A terminal line arrived, or lines were collected before the deadline
    - TIMEOUT: Nothing was collected before the deadline
    - NOT_CONNECTED: No open, listening connection
    - WRITE_FAILED: Command bytes could not be fully written
    - INVALID_PARAMETER: Rejected locally, nothing was written
    """
    SUCCESS = "success"
    TIMEOUT = "timeout"
    NOT_CONNECTED = "not_connected"
    WRITE_FAILED = "write_failed"
    INVALID_PARAMETER = "invalid_parameter"


@dataclass(frozen=True)
class CommandResponse:
    """Immutable command response.

    Attributes:
        command: Command text sent (e.g., "sys get ver"), without terminator
        raw_response: Aggregated response lines, echo removed
        status: Outcome of the command
        execution_time: Seconds from send to completion
        error_message: Human-readable failure description (if applicable)
        timestamp: Unix timestamp when response was created
    """

    command: str
    raw_response: List[str]
    status: ResponseStatus
    execution_time: float = 0.0
    error_message: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def get_response_text(self) -> str:
        """Concatenate response lines into a single string.

        Lines are joined without a separator, so a version reply followed
        by its terminal marker reads as one string.

        Example:
            >>> response = CommandResponse(
            ...     command="mac get appeui",
            ...     raw_response=["0004A30B001A2B3C", "ok"],
            ...     status=ResponseStatus.SUCCESS,
            ...     execution_time=0.12
            ... )
            >>> response.get_response_text()
            '0004A30B001A2B3Cok'
        """
        return ''.join(self.raw_response)

    def is_successful(self) -> bool:
        """Check if command succeeded."""
        return self.status == ResponseStatus.SUCCESS

    def __str__(self) -> str:
        if self.status == ResponseStatus.SUCCESS:
            return f"[{self.status.value}] {self.command} -> {len(self.raw_response)} lines ({self.execution_time:.3f}s)"
        error_info = f" ({self.error_message})" if self.error_message else ""
        return f"[{self.status.value}] {self.command}{error_info} ({self.execution_time:.3f}s)"
