"""Bounded retry for external collaborator calls."""

import functools
import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from ..config import config
from ..errors import AuthorizationError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable)


def linear_backoff(step: float) -> Callable[[int], float]:
    """Backoff that waits ``step * attempt`` seconds after a failed attempt."""

    def delay(attempt: int) -> float:
        return step * attempt

    return delay


def retry(
    max_attempts: Optional[int] = None,
    backoff: Optional[Callable[[int], float]] = None,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    give_up_on: Tuple[Type[BaseException], ...] = (AuthorizationError,),
    sleep: Optional[Callable[[float], None]] = None,
) -> Callable[[F], F]:
    """Retry the decorated call a bounded number of times.

    Args:
        max_attempts: Total attempts. Defaults to ``config.max_retries``.
        backoff: Maps the 1-based failed attempt to a delay in seconds.
            Defaults to linear backoff of ``config.retry_delay``.
        retry_on: Exception types that trigger another attempt.
        give_up_on: Exception types re-raised immediately.
        sleep: Sleep function, ``time.sleep`` by default.

    Returns:
        Decorator. After the last attempt the last exception propagates
        unchanged.
    """

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            attempts = max_attempts if max_attempts is not None else config.max_retries
            attempts = max(1, attempts)
            delay_for = backoff or linear_backoff(config.retry_delay)

            for attempt in range(1, attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except give_up_on:
                    raise
                except retry_on as e:
                    if attempt == attempts:
                        logger.error(f"{fn.__qualname__} failed after {attempts} attempts: {e}")
                        raise
                    delay = delay_for(attempt)
                    logger.warning(
                        f"{fn.__qualname__} failed (attempt {attempt}/{attempts}): {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )
                    (sleep or time.sleep)(delay)

        return wrapper  # type: ignore[return-value]

    return decorator
