"""Retry logic with exponential backoff for transient provider failures.

Provider reads (VM, NIC, availability set lookups, resource listing) can fail
transiently: connection resets, throttling, gateway errors. Those are retried
here; everything else, including 404 responses, propagates on the first
attempt.

Usage:
    @retry_with_exponential_backoff(max_attempts=3)
    def get_vm():
        return compute_client.virtual_machines.get(resource_group, name)
"""

import functools
import logging
import random
import time
from typing import Any, Callable, TypeVar

from azure.core.exceptions import HttpResponseError, ServiceRequestError, ServiceResponseError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def retry_with_exponential_backoff(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: bool = True,
) -> Callable[[F], F]:
    """Decorator for retrying operations with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        initial_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay between retries in seconds (default: 30.0)
        jitter: Add random jitter (±25%) to delays (default: True)

    Returns:
        Decorated function that retries on transient failures
    """

    def decorator(func: F) -> F:
        name = getattr(func, "__name__", "operation")

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay

            for attempt in range(1, max_attempts + 1):
                try:
                    result = func(*args, **kwargs)

                    if attempt > 1:
                        logger.info(
                            f"{name} succeeded on attempt {attempt}/{max_attempts}"
                        )

                    return result

                except Exception as e:
                    if not is_transient_error(e):
                        raise

                    if attempt >= max_attempts:
                        logger.error(
                            f"{name} failed after {max_attempts} attempts: "
                            f"{_safe_error_message(e)}"
                        )
                        raise

                    actual_delay = delay
                    if jitter:
                        jitter_amount = delay * 0.25
                        actual_delay = delay + random.uniform(-jitter_amount, jitter_amount)

                    actual_delay = min(actual_delay, max_delay)

                    logger.warning(
                        f"{name} failed on attempt {attempt}/{max_attempts}, "
                        f"retrying in {actual_delay:.2f}s: {_safe_error_message(e)}"
                    )

                    time.sleep(actual_delay)
                    delay *= 2

            raise RuntimeError(f"{name} failed with unknown error")

        return wrapper  # type: ignore

    return decorator


def is_transient_error(exception: Exception) -> bool:
    """Determine whether an exception is worth retrying.

    Args:
        exception: Exception raised by a provider call

    Returns:
        True for network errors and retryable HTTP status codes
    """
    if isinstance(exception, (ServiceRequestError, ServiceResponseError)):
        return True
    if isinstance(exception, HttpResponseError):
        return should_retry_http_error(exception.status_code or 0)
    return isinstance(exception, (TimeoutError, ConnectionError))


def should_retry_http_error(status_code: int) -> bool:
    """Determine if HTTP status code should trigger retry.

    Retryable status codes:
        - 408: Request Timeout
        - 429: Too Many Requests (throttling)
        - 500, 502, 503, 504: Server-side failures
    """
    return status_code in RETRYABLE_STATUS_CODES


def _safe_error_message(exception: Exception) -> str:
    """Truncate error text and mask anything resembling a credential."""
    error_str = str(exception)

    if len(error_str) > 200:
        error_str = error_str[:200] + "..."

    sensitive_patterns = [
        "secret=",
        "password=",
        "token=",
        "key=",
        "authorization:",
    ]

    for pattern in sensitive_patterns:
        index = error_str.lower().find(pattern)
        if index != -1:
            error_str = error_str[:index] + f"{pattern}***"

    return error_str


__all__ = [
    "is_transient_error",
    "retry_with_exponential_backoff",
    "should_retry_http_error",
]
