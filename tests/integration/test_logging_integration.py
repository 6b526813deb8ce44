"""Integration tests for end-to-end communication logging."""

import pytest
from pathlib import Path
import tempfile
import shutil

from conftest import FakeTransport
from rn2483.config.config_models import LoggingConfig, LogLevel
from rn2483.core.connection import Connection
from rn2483.logging import CommunicationLogger, LogEntry

pytestmark = pytest.mark.integration


class TestLoggingIntegration:
    """Integration test suite for communication logging."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for test logs."""
        temp_path = Path(tempfile.mkdtemp())
        yield temp_path
        if temp_path.exists():
            shutil.rmtree(temp_path)

    @pytest.fixture
    def logger(self, temp_dir):
        logger = CommunicationLogger.from_config(LoggingConfig(
            enabled=True,
            level=LogLevel.DEBUG,
            log_to_file=True,
            log_to_console=False,
            log_file_path=str(temp_dir / "link.log")
        ))
        yield logger
        logger.close()

    def test_session_is_logged(self, fast_config, logger, temp_dir):
        """Test a connect/send/close session produces a complete log."""
        transport = FakeTransport(responses={"mac get appeui": b"868...\r\nok\r\n"})
        conn = Connection(fast_config, logger=logger, transport_factory=lambda port: transport)

        conn.connect()
        conn.send("mac get appeui")
        conn.close()
        logger.flush()

        content = (temp_dir / "link.log").read_text(encoding='utf-8')
        assert "Port opened: /dev/ttyFAKE" in content
        assert "Sending command | CMD: mac get appeui" in content
        assert "<< 868..." in content
        assert "RESP: 868...ok | STATUS: SUCCESS" in content
        assert "Serial port closed" in content

    def test_timeout_logged_as_warning(self, fast_config, logger):
        """Test a timed-out command is recorded at WARNING."""
        conn = Connection(fast_config, logger=logger,
                          transport_factory=lambda port: FakeTransport())

        conn.connect()
        conn.send("sys get ver", timeout=0.05)
        conn.close()

        responses = [e for e in logger.get_entries() if e.message == "Received response"]
        assert responses[0].level == "WARNING"
        assert responses[0].status == "TIMEOUT"

    def test_info_level_hides_raw_trace(self, fast_config, temp_dir):
        """Test the raw << and >> trace is only recorded at DEBUG."""
        logger = CommunicationLogger(log_level=LogLevel.INFO, enable_console=False)
        transport = FakeTransport(responses={"sys get ver": b"RN2483 1.0.5\r\n"})
        conn = Connection(fast_config, logger=logger, transport_factory=lambda port: transport)

        conn.connect()
        conn.send("sys get ver", timeout=0.1)
        conn.close()

        messages = [e.message for e in logger.get_entries()]
        assert "Sending command" in messages
        assert not any(m.startswith("<<") or m.startswith(">>") for m in messages)

    def test_entries_survive_json(self, logger):
        """Test recorded entries serialize for export."""
        logger.log_port_event(event="Port opened", port="/dev/ttyAMA0",
                              details={"baud_rate": 57600})

        entry = logger.get_entries()[-1]

        assert LogEntry.from_json(entry.to_json()) == entry
