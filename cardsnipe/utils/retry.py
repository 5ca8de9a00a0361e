"""
Retry utilities with exponential backoff.

Collaborator clients (certificate authority, catalog API, sold-sales scraper)
use these decorators to ride out transient failures before giving up and
reporting the source as unavailable.
"""

import asyncio
import functools
import logging
import random
import time
from typing import Any, Callable, Dict, Optional, Type, Union

from .error_handler import ErrorContext


def _backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    exponential_base: float,
    jitter: bool,
) -> float:
    delay = min(base_delay * (exponential_base ** (attempt - 1)), max_delay)
    if jitter:
        delay *= (0.5 + random.random() * 0.5)
    return delay


def retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: Union[Type[Exception], tuple] = Exception,
    logger: Optional[logging.Logger] = None,
    context: Optional[ErrorContext] = None,
):
    """
    Retry decorator with exponential backoff.

    Works for both plain and ``async def`` functions.

    Args:
        max_attempts: Maximum number of attempts
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential backoff calculation
        jitter: Whether to add random jitter to delays
        exceptions: Exception types to retry on
        logger: Logger instance for retry logging
        context: Optional error context attached to log records

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable) -> Callable:
        def _extra(**fields: Any) -> Dict[str, Any]:
            extra = {"function": func.__name__, **fields}
            if context is not None:
                extra["context"] = context
            return extra

        def _on_failure(attempt: int, error: Exception) -> Optional[float]:
            if attempt == max_attempts:
                if logger:
                    logger.error(
                        f"Function {func.__name__} failed after {max_attempts} attempts",
                        extra=_extra(attempts=max_attempts, final_exception=str(error)),
                    )
                return None

            delay = _backoff_delay(attempt, base_delay, max_delay, exponential_base, jitter)
            if logger:
                logger.warning(
                    f"Function {func.__name__} failed (attempt {attempt}/{max_attempts}), "
                    f"retrying in {delay:.2f}s",
                    extra=_extra(
                        attempt=attempt,
                        max_attempts=max_attempts,
                        delay=delay,
                        exception=str(error),
                    ),
                )
            return delay

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    delay = _on_failure(attempt, e)
                    if delay is None:
                        raise
                    time.sleep(delay)

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    delay = _on_failure(attempt, e)
                    if delay is None:
                        raise
                    await asyncio.sleep(delay)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return wrapper

    return decorator

