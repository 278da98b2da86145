"""
voxtranslate/timeouts.py
=========================
Bounded External Calls — voxtranslate

Responsibility:
    - Run a blocking external call (recognition, translation) on a worker
      thread and stop waiting for it after a per-call timeout
    - Abandon the wait as soon as the caller's cancel event is set

A timed-out call keeps running on its worker thread until the backend's
own timeout fires; its result is never read.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable

from voxtranslate.errors import TranscriptionCancelledError

# How often a blocked wait re-checks the cancel event (seconds).
CANCEL_POLL_SECONDS: float = 0.05


class CallTimeoutError(TimeoutError):
    """Raised when an external call exceeds its per-call timeout."""


def wait_for(
    future: Future,
    timeout: float,
    cancel_event: threading.Event | None = None,
) -> Any:
    """
    Wait for ``future`` for at most ``timeout`` seconds.

    Returns:
        The future's result (exceptions raised by the call propagate).

    Raises:
        CallTimeoutError:            If the deadline passes first.
        TranscriptionCancelledError: If ``cancel_event`` is set while waiting.
    """
    deadline = time.monotonic() + timeout
    while True:
        if cancel_event is not None and cancel_event.is_set():
            future.cancel()
            raise TranscriptionCancelledError("Request cancelled by caller.")

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            future.cancel()
            raise CallTimeoutError(f"External call exceeded {timeout:.1f}s timeout.")

        step = remaining if cancel_event is None else min(CANCEL_POLL_SECONDS, remaining)
        done, _ = wait([future], timeout=step)
        if done:
            return future.result()


def call_with_timeout(
    fn: Callable[..., Any],
    *args: Any,
    timeout: float,
    cancel_event: threading.Event | None = None,
    **kwargs: Any,
) -> Any:
    """Run ``fn(*args, **kwargs)`` on a worker thread, bounded by ``timeout``."""
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="voxtranslate-call")
    try:
        future = executor.submit(fn, *args, **kwargs)
        return wait_for(future, timeout, cancel_event)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
