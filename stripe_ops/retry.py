from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from stripe_ops.logging_config import get_logger

T = TypeVar("T")

logger = get_logger(__name__)

def fetch_with_retry(
    fn: Callable[[], T],
    max_retries: int = 3,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` until it succeeds, doubling the pause after each failure.

    Re-raises the last exception once ``max_retries`` attempts have failed.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be >= 1")

    for attempt in range(1, max_retries + 1):
        try:
            return fn()
        except Exception as e:
            if attempt == max_retries:
                logger.error("retries exhausted", attempts=max_retries, error=str(e))
                raise

            logger.warning(
                "attempt failed, retrying",
                attempt=attempt,
                max_retries=max_retries,
                delay_seconds=delay,
                error=str(e),
            )
            sleep(delay)
            delay *= 2

    # unreachable: the loop either returns or raises
    raise RuntimeError("fetch_with_retry exited without a result")
