"""Tests for wall-clock timeout races."""

import threading
import time

import pytest

from gitdocify.core.timeouts import run_all_with_timeout, run_with_timeout
from gitdocify.exceptions import FetchTimeoutError


class TestRunWithTimeout:

    def test_returns_result(self):
        assert run_with_timeout(lambda: 42, timeout=1.0, label="answer") == 42

    def test_propagates_exception(self):
        def boom():
            raise ValueError("bad")

        with pytest.raises(ValueError, match="bad"):
            run_with_timeout(boom, timeout=1.0, label="boom")

    def test_times_out(self):
        release = threading.Event()
        with pytest.raises(FetchTimeoutError) as exc_info:
            run_with_timeout(lambda: release.wait(5), timeout=0.05, label="slow call")
        release.set()
        assert exc_info.value.status_code == 504
        assert exc_info.value.details["operation"] == "slow call"

    def test_abandoned_call_runs_on_daemon_thread(self):
        seen = {}
        started = threading.Event()
        release = threading.Event()

        def slow():
            seen["daemon"] = threading.current_thread().daemon
            started.set()
            release.wait(5)

        with pytest.raises(FetchTimeoutError):
            run_with_timeout(slow, timeout=0.05, label="slow")
        assert started.wait(1)
        release.set()
        assert seen["daemon"] is True


class TestRunAllWithTimeout:

    def test_calls_run_concurrently(self):
        start = time.monotonic()
        results = run_all_with_timeout(
            {"a": lambda: time.sleep(0.2) or "a", "b": lambda: time.sleep(0.2) or "b"},
            timeout=2.0,
        )
        assert results == {"a": "a", "b": "b"}
        assert time.monotonic() - start < 0.39

    def test_first_failure_in_order_wins(self):
        def fail():
            raise RuntimeError("metadata failed")

        with pytest.raises(RuntimeError, match="metadata failed"):
            run_all_with_timeout({"metadata": fail, "tree": lambda: ["README.md"]}, timeout=1.0)
