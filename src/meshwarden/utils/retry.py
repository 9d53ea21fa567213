"""Retry utilities for MESHWARDEN."""

from collections.abc import Callable

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_fixed,
)

from meshwarden.core.config import RetryConfig
from meshwarden.utils.logging import get_logger

logger = get_logger(__name__)


def _log_before_sleep(max_attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        """Log before sleeping between retries."""
        if retry_state.outcome and retry_state.outcome.failed:
            exception = retry_state.outcome.exception()
            logger.warning(
                "retry_attempt",
                attempt=retry_state.attempt_number,
                max_attempts=max_attempts,
                exception=type(exception).__name__,
                message=str(exception),
            )

    return before_sleep


def fixed_delay_retrying(
    exceptions: tuple[type[Exception], ...],
    max_attempts: int,
    delay: float,
    timeout: float | None = None,
) -> Retrying:
    """Build a fixed-delay retry controller.

    The last exception is re-raised once attempts (or the optional timeout)
    are exhausted. A zero delay retries immediately.

    Args:
        exceptions: Exception types to retry on
        max_attempts: Maximum number of attempts
        delay: Delay between attempts (seconds)
        timeout: Overall time bound (seconds, optional)

    Returns:
        tenacity Retrying instance, callable as ``retrying(func, *args)``
    """
    stop = stop_after_attempt(max_attempts)
    if timeout is not None:
        stop = stop | stop_after_delay(timeout)

    return Retrying(
        retry=retry_if_exception_type(exceptions),
        stop=stop,
        wait=wait_fixed(delay),
        before_sleep=_log_before_sleep(max_attempts),
        reraise=True,
    )


def retry_on_conflict(settings: RetryConfig, exceptions: tuple[type[Exception], ...]) -> Retrying:
    """Retry controller for optimistic-concurrency conflicts."""
    return fixed_delay_retrying(
        exceptions=exceptions,
        max_attempts=settings.attempts,
        delay=settings.conflict_delay_seconds,
    )
