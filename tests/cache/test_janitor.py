"""Tests for cmdcache.cache.janitor — periodic background maintenance."""

import threading
from unittest.mock import patch

from cmdcache.cache.janitor import Janitor


class TestJanitor:
    def test_not_running_until_started(self):
        janitor = Janitor(10, lambda: None)
        assert janitor.running is False

    def test_ticks_periodically(self):
        ticks = []
        done = threading.Event()

        def task():
            ticks.append(1)
            if len(ticks) >= 3:
                done.set()

        janitor = Janitor(5, task)
        janitor.start()
        try:
            assert done.wait(2.0)
            assert janitor.running is True
        finally:
            janitor.stop()
        assert janitor.running is False

    def test_start_is_idempotent(self):
        janitor = Janitor(1_000, lambda: None)
        janitor.start()
        first = janitor._thread
        janitor.start()
        assert janitor._thread is first
        janitor.stop()

    def test_stop_is_idempotent(self):
        janitor = Janitor(1_000, lambda: None)
        janitor.stop()
        janitor.start()
        janitor.stop()
        janitor.stop()
        assert janitor.running is False

    def test_no_ticks_after_stop(self):
        ticks = []
        janitor = Janitor(5, lambda: ticks.append(1))
        janitor.start()
        janitor.stop()
        count = len(ticks)
        threading.Event().wait(0.05)
        assert len(ticks) == count

    def test_failing_tick_is_logged_and_loop_continues(self):
        calls = []
        done = threading.Event()

        def task():
            calls.append(1)
            if len(calls) >= 2:
                done.set()
            raise RuntimeError("sweep failed")

        janitor = Janitor(5, task)
        with patch("cmdcache.cache.janitor.logger") as mock_logger:
            janitor.start()
            try:
                assert done.wait(2.0)
            finally:
                janitor.stop()
            assert mock_logger.exception.called

    def test_stop_from_own_thread_does_not_deadlock(self):
        stopped = threading.Event()
        janitor: Janitor

        def task():
            janitor.stop()
            stopped.set()

        janitor = Janitor(5, task)
        janitor.start()
        assert stopped.wait(2.0)
        assert janitor._thread is None

    def test_tick_runs_task_inline(self):
        calls = []
        Janitor(1_000, lambda: calls.append(1)).tick()
        assert calls == [1]

    def test_stop_without_wait_returns_immediately(self):
        entered = threading.Event()
        release = threading.Event()

        def task():
            entered.set()
            release.wait(2.0)

        janitor = Janitor(5, task)
        janitor.start()
        thread = janitor._thread
        assert entered.wait(2.0)
        janitor.stop(wait=False)
        assert janitor._thread is None
        assert thread.is_alive()
        release.set()
        thread.join(2.0)
        assert not thread.is_alive()
