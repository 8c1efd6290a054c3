"""Bounded retry with exponential backoff for unreachable sources."""

import logging
from collections.abc import Callable
from typing import TypeVar

from arca.errors import SourceUnreachableError
from arca.gateway.time.abc import Time

logger = logging.getLogger(__name__)

RETRY_BASE_DELAY = 0.5

T = TypeVar("T")


def backoff_delays(attempts: int, base_delay: float = RETRY_BASE_DELAY) -> list[float]:
    """Delays slept between attempts: base, 2*base, 4*base, ..."""
    return [base_delay * (2**i) for i in range(max(attempts - 1, 0))]


def with_source_retry(
    time: Time,
    operation_name: str,
    fn: Callable[[], T],
    attempts: int,
) -> T:
    """Execute fn, retrying only when the source is unreachable.

    Any other exception is a permanent failure and bubbles up immediately;
    retrying a missing version or path cannot succeed without the source
    itself changing.

    Args:
        time: Time abstraction for sleep operations
        operation_name: Description for logging
        fn: Operation to run
        attempts: Total number of tries, including the first

    Raises:
        SourceUnreachableError: If every attempt failed
    """
    delays = backoff_delays(attempts)

    for attempt in range(len(delays) + 1):
        try:
            result = fn()
            if attempt > 0:
                logger.info("Success on retry %d: %s", attempt, operation_name)
            return result
        except SourceUnreachableError as e:
            if attempt == len(delays):
                logger.warning(
                    "Failed after %d attempts: %s: %s", len(delays) + 1, operation_name, e
                )
                raise

            delay = delays[attempt]
            logger.warning("Retry %d after %ss: %s: %s", attempt + 1, delay, operation_name, e)
            time.sleep(delay)

    msg = "Retry logic error"
    raise AssertionError(msg)
