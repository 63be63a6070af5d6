"""
Retry helper for storage failures.

Only StorageFailureError is retried: it guarantees the aborted unit of work
persisted nothing, so running it again cannot double-apply a movement.
Every other error is returned to the caller on the first attempt.
"""

import time
from typing import Callable, TypeVar

from inventory_kernel.exceptions import StorageFailureError
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.retry")

T = TypeVar("T")


def run_with_storage_retry(
    fn: Callable[[], T],
    attempts: int = 1,
    backoff_seconds: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``fn`` up to ``attempts`` times while it raises StorageFailureError.

    The wait before retry n (1-based) is ``backoff_seconds * n``.  The last
    StorageFailureError is re-raised when attempts run out.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except StorageFailureError as exc:
            if attempt == attempts:
                raise
            delay = backoff_seconds * attempt
            logger.warning(
                "storage_retry",
                extra={
                    "attempt": attempt,
                    "max_attempts": attempts,
                    "delay_seconds": delay,
                    "detail": exc.detail,
                },
            )
            if delay > 0:
                sleep(delay)
