"""
voxtranslate/retry.py
======================
Shared retry utility for translation backends — voxtranslate

Retries a callable on transient failures (429 rate-limit, 5xx server
errors, timeouts, connection errors) with exponential back-off. Both the
OpenAI SDK errors and ``requests`` errors are recognised.

Usage::

    from voxtranslate.retry import call_with_retry

    response = call_with_retry(
        client.chat.completions.create,
        max_retries=2,
        description="OpenAI translation",
        model="gpt-4o-mini",
        messages=[...],
    )

Recognition probes are NOT retried: the language detector already skips a
failed candidate, and retries would multiply probe latency.
"""

import logging
import time
from typing import Any, Callable

import requests

logger = logging.getLogger("voxtranslate.retry")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

MAX_RETRIES: int = 2          # total attempts = MAX_RETRIES + 1 (initial)
BASE_DELAY: float = 0.5       # seconds, first back-off delay
MAX_DELAY: float = 8.0        # cap so a request never waits too long
BACKOFF_FACTOR: float = 2.0   # exponential multiplier

# HTTP status codes worth retrying on
_RETRYABLE_STATUS_CODES: set[int] = {429, 500, 502, 503, 504}

_RETRYABLE_OPENAI_ERRORS: set[str] = {
    "RateLimitError",
    "APITimeoutError",
    "APIConnectionError",
    "InternalServerError",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_retryable(exc: Exception) -> bool:
    """Return True if the exception looks like a transient backend error."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True

    if isinstance(exc, requests.HTTPError):
        response = exc.response
        return response is not None and response.status_code in _RETRYABLE_STATUS_CODES

    if type(exc).__name__ in _RETRYABLE_OPENAI_ERRORS:
        return True

    # openai.APIStatusError and friends
    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        return status_code in _RETRYABLE_STATUS_CODES

    return False


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def call_with_retry(
    fn: Callable[..., Any],
    *args: Any,
    max_retries: int = MAX_RETRIES,
    description: str = "backend call",
    deadline: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> Any:
    """
    Call ``fn(*args, **kwargs)`` with automatic retry.

    Non-retryable errors are re-raised immediately. When ``deadline`` (a
    ``time.monotonic()`` value) is given, no retry is started that would
    begin after it; the last error is re-raised instead.

    Raises:
        The last exception if all retries are exhausted.
    """
    delay = BASE_DELAY

    for attempt in range(max_retries + 1):
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            if not is_retryable(exc):
                logger.warning("%s failed with non-retryable error: %s", description, exc)
                raise

            if attempt >= max_retries:
                logger.error(
                    "%s failed after %d attempts: %s", description, max_retries + 1, exc,
                )
                raise

            if deadline is not None and time.monotonic() + delay >= deadline:
                logger.warning(
                    "%s failed (attempt %d/%d): %s — no time left to retry",
                    description, attempt + 1, max_retries + 1, exc,
                )
                raise

            logger.warning(
                "%s failed (attempt %d/%d): %s — retrying in %.1fs",
                description, attempt + 1, max_retries + 1, exc, delay,
            )
            sleep(delay)
            delay = min(delay * BACKOFF_FACTOR, MAX_DELAY)

    raise RuntimeError(f"{description}: retry loop exited without a result")  # pragma: no cover
