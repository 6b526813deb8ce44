"""Unit tests for MessageDispatcher."""

import threading
import time

from unittest.mock import Mock

from rn2483.core.dispatcher import MessageDispatcher


class TestMessageDispatcher:
    """Test the observer worker thread."""

    def test_delivers_in_order_on_worker_thread(self):
        """Test callbacks run in submission order, off the caller's thread."""
        received = []
        threads = set()

        def observer(line):
            received.append(line)
            threads.add(threading.current_thread().name)

        dispatcher = MessageDispatcher()
        dispatcher.start()
        for line in ("radio_rx  01", "radio_rx  02", "radio_err"):
            assert dispatcher.submit(observer, line) is True
        assert dispatcher.stop(1.0) is True

        assert received == ["radio_rx  01", "radio_rx  02", "radio_err"]
        assert threads == {"RN2483-Dispatcher"}

    def test_submit_when_stopped(self):
        """Test messages are refused when not running."""
        observer = Mock()
        dispatcher = MessageDispatcher()

        assert dispatcher.submit(observer, "ok") is False
        observer.assert_not_called()

    def test_stop_drains_queue(self):
        """Test already queued messages are delivered before stop returns."""
        received = []

        def slow_observer(line):
            time.sleep(0.01)
            received.append(line)

        dispatcher = MessageDispatcher()
        dispatcher.start()
        for i in range(5):
            dispatcher.submit(slow_observer, str(i))
        dispatcher.stop(2.0)

        assert received == ["0", "1", "2", "3", "4"]
        assert dispatcher.is_running() is False

    def test_no_delivery_after_stop(self):
        """Test nothing is delivered once stop has returned."""
        observer = Mock()
        dispatcher = MessageDispatcher()
        dispatcher.start()
        dispatcher.stop(1.0)

        assert dispatcher.submit(observer, "radio_rx  00") is False
        time.sleep(0.02)
        observer.assert_not_called()

    def test_observer_exception_does_not_kill_worker(self):
        """Test a raising observer does not stop later deliveries."""
        good = Mock()
        dispatcher = MessageDispatcher()
        dispatcher.start()

        dispatcher.submit(Mock(side_effect=ValueError("bad")), "first")
        dispatcher.submit(good, "second")
        dispatcher.stop(1.0)

        good.assert_called_once_with("second")

    def test_stop_timeout_abandons_stuck_observer(self):
        """Test a blocked observer makes stop report failure and drops the queue."""
        release = threading.Event()
        late = Mock()
        dispatcher = MessageDispatcher()
        dispatcher.start()

        dispatcher.submit(lambda line: release.wait(2.0), "stuck")
        dispatcher.submit(late, "queued")
        time.sleep(0.02)

        assert dispatcher.stop(0.05) is False
        release.set()
        time.sleep(0.05)

        late.assert_not_called()
        assert dispatcher.is_running() is False

    def test_restart(self):
        """Test the dispatcher can be started again after stop."""
        observer = Mock()
        dispatcher = MessageDispatcher()
        dispatcher.start()
        dispatcher.stop(1.0)

        dispatcher.start()
        dispatcher.submit(observer, "ok")
        dispatcher.stop(1.0)

        observer.assert_called_once_with("ok")

    def test_stop_without_start(self):
        """Test stop is safe before start."""
        assert MessageDispatcher().stop(0.1) is True
