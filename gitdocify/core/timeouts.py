"""Wall-clock timeout races for blocking calls.

Each call runs on its own daemon thread and the caller waits on its future
with a deadline. When the deadline passes the caller gets FetchTimeoutError
and the thread is abandoned: its eventual result is discarded. Daemon
threads are not joined at interpreter exit, so an abandoned call never holds
up process shutdown; the underlying HTTP client's own timeout bounds how
long it lingers while the process is alive.
"""

import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FuturesTimeoutError
from typing import Any, Callable, Mapping

from ..exceptions import FetchTimeoutError

logger = logging.getLogger(__name__)


def _start(fn: Callable[[], Any], label: str) -> Future:
    future: Future = Future()

    def runner() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = fn()
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)

    threading.Thread(target=runner, name=f"fetch-{label}", daemon=True).start()
    return future


def run_with_timeout(fn: Callable[[], Any], timeout: float, label: str) -> Any:
    """Run *fn* with a wall-clock timeout.

    Raises:
        FetchTimeoutError: if *fn* exceeds *timeout* seconds.
        Exception: any exception raised by *fn*.
    """
    return run_all_with_timeout({label: fn}, timeout)[label]


def run_all_with_timeout(calls: Mapping[str, Callable[[], Any]], timeout: float) -> dict[str, Any]:
    """Start every call concurrently, each raced against its own *timeout*.

    All timers start together, so the whole batch finishes within *timeout*.
    The first failure (timeout or exception, checked in *calls* order) is
    raised; results of the other calls are discarded.

    Returns:
        ``{label: result}`` for every call.
    """
    deadline = time.monotonic() + timeout
    futures = {label: _start(fn, label) for label, fn in calls.items()}
    results: dict[str, Any] = {}
    for label, future in futures.items():
        remaining = max(0.0, deadline - time.monotonic())
        try:
            results[label] = future.result(timeout=remaining)
        except FuturesTimeoutError:
            logger.error("%s timed out after %ss", label, timeout)
            raise FetchTimeoutError(label, timeout) from None
    return results
