"""Unit tests for PendingResponseBuffer and ResponseRouter."""

import threading
import time

import pytest
from unittest.mock import Mock

from rn2483.config.config_models import RoutingMode
from rn2483.core.response_router import PendingResponseBuffer, ResponseRouter


class TestPendingResponseBuffer:
    """Test the pending response FIFO."""

    def test_fifo_order(self):
        """Test lines come out in the order they went in."""
        buffer = PendingResponseBuffer()
        buffer.put("868000000")
        buffer.put("ok")

        assert len(buffer) == 2
        assert buffer.get(0.1) == "868000000"
        assert buffer.get(0.1) == "ok"

    def test_get_times_out(self):
        """Test get returns None when nothing arrives."""
        buffer = PendingResponseBuffer()

        start = time.monotonic()
        assert buffer.get(0.05) is None
        assert time.monotonic() - start >= 0.04

    def test_get_negative_timeout(self):
        """Test a negative wait is treated as no wait."""
        assert PendingResponseBuffer().get(-1.0) is None

    def test_get_wakes_on_put(self):
        """Test a waiting get returns as soon as a line is put."""
        buffer = PendingResponseBuffer()
        threading.Timer(0.02, buffer.put, args=("ok",)).start()

        assert buffer.get(2.0) == "ok"

    def test_clear_returns_dropped_count(self):
        """Test clear empties the buffer and counts what it dropped."""
        buffer = PendingResponseBuffer()
        for line in ("radio_rx  00", "radio_err", "ok"):
            buffer.put(line)

        assert buffer.clear() == 3
        assert len(buffer) == 0
        assert buffer.clear() == 0


class TestResponseRouterDual:
    """Test DUAL routing (default)."""

    @pytest.fixture
    def router(self):
        return ResponseRouter(PendingResponseBuffer())

    def test_every_line_buffered(self, router):
        """Test all lines reach the buffer, including ok."""
        router.route("RN2483 1.0.5")
        router.route("ok")

        assert router.buffer.get(0.01) == "RN2483 1.0.5"
        assert router.buffer.get(0.01) == "ok"

    def test_observer_gets_everything_but_ok(self, router):
        """Test the observer sees reply lines too, except the bare ok."""
        observer = Mock()
        router.set_message_callback(observer)

        router.route("868000000")
        router.route("ok")
        router.route("radio_tx_ok")

        assert [c.args[0] for c in observer.call_args_list] == ["868000000", "radio_tx_ok"]

    def test_echo_not_forwarded(self, router):
        """Test a line equal to the command in flight is not passed to the observer."""
        observer = Mock()
        router.set_message_callback(observer)
        router.begin_command("sys get ver")

        router.route("sys get ver")
        router.route("RN2483 1.0.5")

        observer.assert_called_once_with("RN2483 1.0.5")
        assert len(router.buffer) == 2

    def test_trailing_echo_not_forwarded(self, router):
        """Test an echo arriving after the command ended is still withheld."""
        observer = Mock()
        router.set_message_callback(observer)
        router.begin_command("radio rx 0")
        router.end_command()

        router.route("radio rx 0")
        router.route("radio_rx  48656C6C6F")

        observer.assert_called_once_with("radio_rx  48656C6C6F")
        assert router.in_flight is None

    def test_echo_candidate_expires_after_one_line(self, router):
        """Test only the first line after a command can be taken for its echo."""
        observer = Mock()
        router.set_message_callback(observer)
        router.begin_command("sys get ver")
        router.end_command()

        router.route("radio_err")
        router.route("sys get ver")

        assert [c.args[0] for c in observer.call_args_list] == ["radio_err", "sys get ver"]

    def test_trailing_echo_exclusive_mode(self):
        """Test exclusive routing also withholds an echo arriving after the command."""
        router = ResponseRouter(PendingResponseBuffer(), mode=RoutingMode.EXCLUSIVE)
        observer = Mock()
        router.set_message_callback(observer)
        router.begin_command("radio rx 0")
        router.end_command()

        router.route("radio rx 0")

        observer.assert_not_called()

    def test_no_observer(self, router):
        """Test routing without an observer only buffers."""
        router.route("radio_rx  48656C6C6F")

        assert len(router.buffer) == 1

    def test_observer_exception_contained(self, router):
        """Test an observer that raises does not break routing."""
        router.set_message_callback(Mock(side_effect=RuntimeError("boom")))

        router.route("radio_err")

        assert len(router.buffer) == 1

    def test_trace_receives_every_line(self):
        """Test the trace sink sees each line first."""
        trace = Mock()
        router = ResponseRouter(PendingResponseBuffer(), trace=trace)

        router.route("ok")

        trace.assert_called_once_with("<< ok")

    def test_trace_failure_contained(self):
        """Test a raising trace sink does not stop delivery."""
        router = ResponseRouter(PendingResponseBuffer(), trace=Mock(side_effect=OSError("closed")))

        router.route("ok")

        assert len(router.buffer) == 1

    def test_dispatcher_used_when_present(self):
        """Test observer calls are submitted to the dispatcher."""
        dispatcher = Mock()
        observer = Mock()
        router = ResponseRouter(PendingResponseBuffer(), dispatcher=dispatcher)
        router.set_message_callback(observer)

        router.route("radio_rx  00")

        dispatcher.submit.assert_called_once_with(observer, "radio_rx  00")
        observer.assert_not_called()


class TestResponseRouterExclusive:
    """Test EXCLUSIVE routing."""

    @pytest.fixture
    def router(self):
        return ResponseRouter(PendingResponseBuffer(), mode=RoutingMode.EXCLUSIVE)

    def test_in_flight_lines_only_buffered(self, router):
        """Test lines go only to the response while a command waits."""
        observer = Mock()
        router.set_message_callback(observer)
        router.begin_command("mac get appeui")

        router.route("868000000")
        router.route("ok")

        observer.assert_not_called()
        assert len(router.buffer) == 2

    def test_idle_lines_only_observed(self, router):
        """Test lines go only to the observer when nothing waits."""
        observer = Mock()
        router.set_message_callback(observer)

        router.route("radio_rx  48656C6C6F")

        observer.assert_called_once_with("radio_rx  48656C6C6F")
        assert len(router.buffer) == 0
