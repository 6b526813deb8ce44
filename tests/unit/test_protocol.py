"""Unit tests for wire-level protocol helpers."""

import pytest

from rn2483.core.protocol import encode_command, is_terminal, LINE_TERMINATOR


class TestEncodeCommand:
    """Test encode_command()."""

    def test_appends_crlf(self):
        """Test the terminator is appended."""
        assert encode_command("sys get ver") == b"sys get ver\r\n"
        assert LINE_TERMINATOR == "\r\n"

    def test_radio_set_power(self):
        """Test command text is sent verbatim."""
        assert encode_command("radio set pwr 14") == b"radio set pwr 14\r\n"

    def test_non_ascii_rejected(self):
        """Test characters outside ASCII are not silently altered."""
        with pytest.raises(UnicodeEncodeError):
            encode_command("radio tx é")


class TestIsTerminal:
    """Test is_terminal()."""

    @pytest.mark.parametrize("line", [
        "ok",
        "radio_tx_ok",
        "radio_err",
        "invalid_param",
        "invalid",
        "mac_err",
        "radio_rx  48656C6C6F",
    ])
    def test_terminal_lines(self, line):
        """Test ok and the terminal prefixes end a response."""
        assert is_terminal(line) is True

    @pytest.mark.parametrize("line", [
        "RN2483 1.0.5 Oct 31 2018 15:06:52",
        "4294967245",
        "okay",
        "OK",
        "busy",
        "sys get ver",
    ])
    def test_non_terminal_lines(self, line):
        """Test ordinary reply lines do not end a response."""
        assert is_terminal(line) is False
