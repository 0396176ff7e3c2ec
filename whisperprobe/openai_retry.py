"""
whisperprobe/openai_retry.py
=============================
Shared OpenAI API retry utility — WhisperProbe

Wraps OpenAI SDK calls so that transient failures (429 rate-limit, 5xx
server errors, connection timeouts) are retried with exponential back-off.

Usage::

    from whisperprobe.openai_retry import transcriptions_with_retry

    response = transcriptions_with_retry(
        client,
        model="whisper-1",
        file=audio_file,
    )

This module does NOT:
    - Create or manage OpenAI client instances
    - Interpret responses
"""

import logging
import time
from typing import Any, Callable

logger = logging.getLogger("whisperprobe.openai_retry")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

MAX_RETRIES: int = 4          # total attempts = MAX_RETRIES + 1 (initial)
BASE_DELAY: float = 1.0       # seconds, first back-off delay
MAX_DELAY: float = 30.0
BACKOFF_FACTOR: float = 2.0

_RETRYABLE_STATUS_CODES: set[int] = {429, 500, 502, 503, 504}
_RETRYABLE_ERROR_TYPES: set[str] = {"RateLimitError", "APITimeoutError", "APIConnectionError"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_retryable(exc: Exception) -> bool:
    """Return True if the exception is a transient OpenAI error."""
    if type(exc).__name__ in _RETRYABLE_ERROR_TYPES:
        return True

    if hasattr(exc, "status_code"):
        return getattr(exc, "status_code") in _RETRYABLE_STATUS_CODES

    exc_str = str(exc)
    return any(str(code) in exc_str for code in _RETRYABLE_STATUS_CODES)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def call_with_retry(func: Callable[..., Any], **kwargs: Any) -> Any:
    """
    Call ``func(**kwargs)``, retrying transient OpenAI failures.

    Retries up to ``MAX_RETRIES`` times using exponential back-off.
    Non-retryable errors are re-raised immediately.

    Raises:
        The last exception if all retries are exhausted.
    """
    last_exc: Exception | None = None
    delay = BASE_DELAY

    for attempt in range(MAX_RETRIES + 1):
        try:
            return func(**kwargs)
        except Exception as exc:
            last_exc = exc

            if not _is_retryable(exc):
                logger.warning("OpenAI call failed with non-retryable error: %s", exc)
                raise

            if attempt < MAX_RETRIES:
                logger.warning(
                    "OpenAI call failed (attempt %d/%d): %s — retrying in %.1fs",
                    attempt + 1,
                    MAX_RETRIES + 1,
                    exc,
                    delay,
                )
                time.sleep(delay)
                delay = min(delay * BACKOFF_FACTOR, MAX_DELAY)
            else:
                logger.error("OpenAI call failed after %d attempts: %s", MAX_RETRIES + 1, exc)

    raise last_exc  # type: ignore[misc]


def transcriptions_with_retry(client: Any, **kwargs: Any) -> Any:
    """``client.audio.transcriptions.create(**kwargs)`` with retry."""
    file_obj = kwargs.get("file")

    def _create(**call_kwargs: Any) -> Any:
        # A failed attempt may have consumed the upload stream.
        if hasattr(file_obj, "seek"):
            file_obj.seek(0)
        return client.audio.transcriptions.create(**call_kwargs)

    return call_with_retry(_create, **kwargs)
