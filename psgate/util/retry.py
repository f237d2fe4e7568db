"""Bounded retry with a fixed delay between attempts."""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from psgate.gate.errors import RetryExhaustedError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_call(
    operation: Callable[[], T],
    max_attempts: int,
    delay: float,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "operation",
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """
    Call ``operation`` until it succeeds or ``max_attempts`` is used up.

    Only exceptions listed in ``retry_on`` are retried; anything else
    propagates immediately. There is no sleep after the final attempt.

    Args:
        operation: Zero-argument callable to invoke
        max_attempts: Total number of attempts (>= 1)
        delay: Seconds to wait between attempts
        retry_on: Exception types treated as transient
        description: Used in log lines and the final error
        sleep: Replaces time.sleep (tests)

    Returns:
        Whatever ``operation`` returns on its first successful attempt

    Raises:
        RetryExhaustedError: every attempt raised a ``retry_on`` exception
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    last_error: BaseException | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except retry_on as e:
            last_error = e
            if attempt == max_attempts:
                break
            logger.warning(
                f"{description} failed on attempt {attempt}/{max_attempts}: {e}; "
                f"retrying in {delay:g}s"
            )
            (sleep or time.sleep)(delay)

    assert last_error is not None
    raise RetryExhaustedError(description, max_attempts, last_error) from last_error
