"""
Resilience Infrastructure.

Retry callback and retry controller for calls to the remote store.
Only reads are retried, and only on transport failures: a write may
already have been applied when the connection dropped.

Usage:
    from lingo.core.resilience import transient_retry

    async for attempt in transient_retry(max_attempts=3, retry_on=(httpx.TransportError,)):
        with attempt:
            response = await client.request("GET", path)
"""

from typing import Any

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from lingo.core.logging import get_logger

logger = get_logger(__name__)


def log_retry(retry_state: Any) -> None:
    """Tenacity before_sleep callback that emits structured retry events.

    Every retry is logged with a standardized set of fields so that
    resilience events can be filtered and aggregated:

        jq 'select(.resilience_event != null)' logs/lingo.jsonl

    Args:
        retry_state: tenacity.RetryCallState instance
    """
    duration_ms = None
    if retry_state.outcome_timestamp and retry_state.start_time:
        duration_ms = round(
            (retry_state.outcome_timestamp - retry_state.start_time) * 1000
        )

    error = None
    if retry_state.outcome and retry_state.outcome.failed:
        error = str(retry_state.outcome.exception())

    fn_name = getattr(retry_state.fn, "__name__", "store_read")

    logger.warning(
        f"Retrying {fn_name} (attempt {retry_state.attempt_number})",
        extra={
            "resilience_event": "retry_attempt",
            "dependency": fn_name,
            "attempt": retry_state.attempt_number,
            "duration_ms": duration_ms,
            "error": error,
        },
    )


def transient_retry(
    max_attempts: int = 3,
    multiplier: float = 0.5,
    max_wait: float = 4.0,
    retry_on: tuple[type[BaseException], ...] = (ConnectionError, TimeoutError),
) -> AsyncRetrying:
    """Build a retry controller for transient failures.

    Only the exception types in retry_on are retried; anything else
    propagates on the first attempt. The last failure is re-raised.

    Args:
        max_attempts: Total attempts including the first
        multiplier: Exponential backoff multiplier in seconds
        max_wait: Upper bound on a single wait in seconds
        retry_on: Exception types considered transient

    Returns:
        tenacity.AsyncRetrying usable with ``async for attempt in ...``
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=log_retry,
        reraise=True,
    )
