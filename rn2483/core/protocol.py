"""Wire-level constants of the RN2483 text protocol."""

from typing import Tuple

LINE_TERMINATOR = "\r\n"
OK_TOKEN = "ok"

# Lines starting with these end a command's response sequence. radio_rx is
# included so an incoming packet notification completes a pending "radio rx".
TERMINAL_PREFIXES: Tuple[str, ...] = (
    "radio_tx_ok",
    "radio_err",
    "invalid",
    "mac_err",
    "radio_rx",
)


def encode_command(command: str) -> bytes:
    """Encode a command for the wire, appending the line terminator.

    Raises:
        UnicodeEncodeError: The command contains non-ASCII characters
    """
    return f"{command}{LINE_TERMINATOR}".encode('ascii')


def is_terminal(line: str) -> bool:
    """Check whether a line ends the response sequence of a command.

    Example:
        >>> is_terminal("ok")
        True
        >>> is_terminal("radio_tx_ok")
        True
        >>> is_terminal("RN2483 1.0.5 Oct 31 2018 15:06:52")
        False
    """
    return line == OK_TOKEN or line.startswith(TERMINAL_PREFIXES)
