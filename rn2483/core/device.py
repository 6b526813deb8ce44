"""Named RN2483 operations built on Connection.send()."""

import re

from rn2483.core.command_response import CommandResponse, ResponseStatus
from rn2483.core.connection import Connection
from rn2483.core.exceptions import InvalidParameterError

MIN_POWER_DBM = -3
MAX_POWER_DBM = 15

_HEX_PAYLOAD = re.compile(r'^(?:[0-9A-Fa-f]{2})+$')


class RN2483:
    """Radio command facade for an RN2483 module.

    Every operation is a fixed command template plus one parameter and
    waits for the module's response. Invalid parameters are rejected
    locally with status INVALID_PARAMETER and nothing is written.

    Example:
        >>> radio = RN2483(connection)
        >>> radio.pause_mac()
        >>> radio.set_power(14)
        >>> radio.transmit("48656C6C6F").get_response_text()
        'ok'
    """

    def __init__(self, connection: Connection):
        self.connection = connection

    def get_version(self) -> CommandResponse:
        """Firmware version string (``sys get ver``)."""
        return self.connection.send("sys get ver")

    def reset(self) -> CommandResponse:
        """Soft-reset the module (``sys reset``); replies with the version."""
        return self.connection.send("sys reset")

    def pause_mac(self) -> CommandResponse:
        """Pause the LoRaWAN stack so raw radio commands are accepted.

        The module replies with the pause duration in milliseconds.
        """
        return self.connection.send("mac pause")

    def set_power(self, power: int) -> CommandResponse:
        """Set transmit power in dBm, within [-3, 15]."""
        command = f"radio set pwr {power}"
        if not isinstance(power, int) or isinstance(power, bool) or \
                not MIN_POWER_DBM <= power <= MAX_POWER_DBM:
            return self._reject(command, InvalidParameterError(
                "power", power, f"must be between {MIN_POWER_DBM} and {MAX_POWER_DBM} dBm"))
        return self.connection.send(command)

    def transmit(self, hex_payload: str) -> CommandResponse:
        """Transmit a hex-encoded payload (``radio tx <hex>``).

        The response ends at the module's ``ok``; the later ``radio_tx_ok``
        or ``radio_err`` reaches the message observer.
        """
        command = f"radio tx {hex_payload}"
        if not isinstance(hex_payload, str) or not _HEX_PAYLOAD.match(hex_payload):
            return self._reject(command, InvalidParameterError(
                "payload", hex_payload, "must be a non-empty, even-length hex string"))
        return self.connection.send(command)

    def start_reception(self, timeout_ms: int = 0) -> CommandResponse:
        """Open a receive window (``radio rx <timeout>``); 0 listens until stopped."""
        command = f"radio rx {timeout_ms}"
        if not isinstance(timeout_ms, int) or isinstance(timeout_ms, bool) or timeout_ms < 0:
            return self._reject(command, InvalidParameterError(
                "timeout", timeout_ms, "must be a non-negative number of milliseconds"))
        return self.connection.send(command)

    def _reject(self, command: str, error: InvalidParameterError) -> CommandResponse:
        self.connection.trace.error(str(error), command=command)
        return CommandResponse(
            command=command,
            raw_response=[],
            status=ResponseStatus.INVALID_PARAMETER,
            error_message=str(error)
        )
