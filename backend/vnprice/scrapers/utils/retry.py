"""Retry helpers with exponential backoff for browser operations."""

from typing import Optional

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base


logger = structlog.get_logger(__name__)


def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "retrying_after_error",
        attempt=retry_state.attempt_number,
        error=str(exc),
    )


def launch_retry(attempts: int, wait: Optional[wait_base] = None) -> AsyncRetrying:
    """Build a retry controller for launching the browser.

    The last error is re-raised once ``attempts`` are exhausted.

    Usage:
        async for attempt in launch_retry(2):
            with attempt:
                await launch()
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait or wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(Exception),
        before_sleep=_log_before_sleep,
        reraise=True,
    )
